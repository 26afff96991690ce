"""Timestamp, elapsed-time and status-string formatting for run reporting."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from .models import RunState, RunStatus

REPORT_TZ = ZoneInfo("Asia/Dubai")
TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"

IN_PROGRESS_TEXT = "🟡 Scraping in progress..."


def format_elapsed(ms: float) -> str:
    """Render elapsed milliseconds as ``"42s"`` or ``"2m 13s"``."""

    seconds = int(max(ms, 0) // 1000)
    minutes, remaining = divmod(seconds, 60)
    if minutes == 0:
        return f"{seconds}s"
    return f"{minutes}m {remaining}s"


def format_timestamp(now: datetime | None = None) -> str:
    """Return ``now`` (default: current time) as ``DD/MM/YYYY HH:MM:SS`` in Dubai time."""

    moment = now if now is not None else datetime.now(tz=REPORT_TZ)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=REPORT_TZ)
    return moment.astimezone(REPORT_TZ).strftime(TIMESTAMP_FORMAT)


def status_text(status: RunStatus) -> str:
    """Render a :class:`RunStatus` as the opaque text written to the status cell."""

    if status.state is RunState.STARTED:
        return IN_PROGRESS_TEXT
    if status.state is RunState.SUCCEEDED:
        return f"✅ {status.timestamp} — {status.elapsed}"
    return f"❌ Failed at {status.timestamp} — runtime ( {status.elapsed} )"


def finished_status(*, ok: bool, elapsed_ms: float, now: datetime | None = None) -> RunStatus:
    timestamp = format_timestamp(now)
    elapsed = format_elapsed(elapsed_ms)
    if ok:
        return RunStatus.succeeded(timestamp, elapsed)
    return RunStatus.failed(timestamp, elapsed)
