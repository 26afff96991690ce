"""Record, filter and status types shared across the scraper."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

HELPER_SENTINEL = "N/A"
CHARACTERISTICS_DELIMITER = " | "

HEADER: tuple[str, ...] = (
    "Name",
    "Variety",
    "Code",
    "Packing Code",
    "Price",
    "Image",
    "Quantity",
    "Farm Name",
    "Characteristics",
    "Helper",
    "Time",
)


class ProductRecord(BaseModel):
    """One listed product, rendered as a fixed 11-cell row.

    Every field is plain text and defaults to ``""``. ``helper_tag`` is the
    exception: ``None`` means the tag could not be resolved and is written as
    the ``N/A`` sentinel, which downstream sheets key on.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    variety: str = ""
    code: str = ""
    packing_code: str = ""
    price: str = ""
    image_url: str = ""
    quantity_price_combo: str = ""
    farm_name: str = ""
    characteristics: tuple[str, ...] = ()
    helper_tag: str | None = None
    capture_timestamp: str = ""

    def as_row(self) -> list[str]:
        return [
            self.name,
            self.variety,
            self.code,
            self.packing_code,
            self.price,
            self.image_url,
            self.quantity_price_combo,
            self.farm_name,
            CHARACTERISTICS_DELIMITER.join(self.characteristics),
            self.helper_tag if self.helper_tag else HELPER_SENTINEL,
            self.capture_timestamp,
        ]


class FilterSpec(BaseModel):
    """Target selection state for one filter group on the listing view.

    Toggles name their widget: ``label`` is a labelled checkbox, ``button``
    is a segmented button in the supplier combo box. Toggle labels match the
    rendered text exactly, ignoring a trailing ``(count)``.
    """

    model_config = ConfigDict(extra="forbid")

    group: str = ""
    kind: Literal["checkbox", "toggle"] = "checkbox"
    options: dict[str, bool] = Field(default_factory=dict)
    others: bool | None = None
    control: Literal["label", "button"] = "label"

    @field_validator("group")
    @classmethod
    def _strip_group(cls, value: str) -> str:
        return value.strip()

    @field_validator("options")
    @classmethod
    def _strip_labels(cls, value: dict[str, bool]) -> dict[str, bool]:
        cleaned = {label.strip(): state for label, state in value.items() if label.strip()}
        if len(cleaned) != len(value):
            raise ValueError("option labels must be non-empty")
        return cleaned

    @model_validator(mode="after")
    def _check_kind(self) -> "FilterSpec":
        if self.kind == "toggle":
            if len(self.options) != 1:
                raise ValueError("toggle filters take exactly one option")
            if self.others is not None:
                raise ValueError("toggle filters do not accept 'others'")
        else:
            if not self.group:
                raise ValueError("checkbox filters need a group label")
            if self.control != "label":
                raise ValueError("checkbox filters are always label controls")
        return self

    def target_for(self, label: str) -> bool | None:
        """Return the desired state for a rendered option label, if any."""

        for configured, state in self.options.items():
            if configured in label:
                return state
        return self.others

    @property
    def display_name(self) -> str:
        return self.group or "<page>"


class RunState(str, Enum):
    STARTED = "started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RunStatus:
    """Exactly one of started / succeeded / failed, with timing for the latter two."""

    state: RunState
    timestamp: str | None = None
    elapsed: str | None = None

    @classmethod
    def started(cls) -> "RunStatus":
        return cls(RunState.STARTED)

    @classmethod
    def succeeded(cls, timestamp: str, elapsed: str) -> "RunStatus":
        return cls(RunState.SUCCEEDED, timestamp, elapsed)

    @classmethod
    def failed(cls, timestamp: str, elapsed: str) -> "RunStatus":
        return cls(RunState.FAILED, timestamp, elapsed)
