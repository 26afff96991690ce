"""Run health journal for page counts and per-field extraction misses."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
import json
import time
from pathlib import Path
from typing import Any


class HealthState(str, Enum):
    """Overall run health classification."""

    HEALTHY = "healthy"
    SUSPECT = "suspect"


@dataclass
class HealthMonitor:
    """Tracks empty pages and field misses and logs structured health events.

    A field that misses on more than ``field_miss_ratio`` of the records seen
    so far (after ``min_records``) marks the run suspect; it usually means a
    selector drifted or pages were read before they finished rendering.
    """

    run_id: str
    log_path: Path
    field_miss_ratio: float = 0.5
    min_records: int = 20
    state: HealthState = field(init=False, default=HealthState.HEALTHY)

    def __post_init__(self) -> None:
        self.records = 0
        self.pages = 0
        self.empty_pages = 0
        self.field_misses: Counter[str] = Counter()
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def _log(self, event_type: str, message: str, **details: Any) -> None:
        entry = {
            "ts": time.time(),
            "run_id": self.run_id,
            "state": self.state.value,
            "event": event_type,
            "message": message,
            "details": details,
        }
        with self.log_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False) + "\n")

    def _evaluate_state(self) -> None:
        prev = self.state
        noisy = [
            name
            for name, misses in self.field_misses.items()
            if self.records >= self.min_records and misses / self.records > self.field_miss_ratio
        ]
        if self.empty_pages or noisy:
            self.state = HealthState.SUSPECT
        else:
            self.state = HealthState.HEALTHY

        if self.state != prev:
            self._log(
                "state_change",
                f"{prev.value} -> {self.state.value}",
                empty_pages=self.empty_pages,
                noisy_fields=noisy,
            )

    def record_page(self, *, page: int, count: int) -> None:
        self.pages += 1
        self.records += count
        if count == 0:
            self.empty_pages += 1
            self._log("empty_page", f"Page {page} rendered no items", page=page)
        else:
            self._log("page", f"Page {page} collected", page=page, items=count)
        self._evaluate_state()

    def record_field_miss(self, field_name: str, reason: str) -> None:
        self.field_misses[field_name] += 1
        self._log("field_miss", reason, field=field_name, misses=self.field_misses[field_name])

    def record_run_end(self, *, ok: bool, total: int) -> None:
        self._evaluate_state()
        self._log(
            "run_end",
            "succeeded" if ok else "failed",
            total=total,
            pages=self.pages,
            field_misses=dict(self.field_misses),
        )
