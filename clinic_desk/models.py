from __future__ import annotations
import re
from datetime import date, time
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, model_serializer, model_validator

from .errors import MESSAGES, Reason, error_for

_CLOCK_TEXT = re.compile(r"^(\d{1,2}):(\d{2})$")


def whole_years(born: date, today: date) -> int:
    """Completed years between ``born`` and ``today`` (negative if born later)."""
    years = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years


class Verdict(BaseModel):
    """Outcome of a validator: accepted, or rejected with a reason."""
    model_config = ConfigDict(frozen=True)

    reason: Optional[Reason] = None

    @computed_field
    @property
    def accepted(self) -> bool:
        return self.reason is None

    @computed_field
    @property
    def message(self) -> str:
        return MESSAGES[self.reason] if self.reason else ""

    def raise_for_reason(self) -> None:
        if self.reason is not None:
            raise error_for(self.reason)

    @classmethod
    def reject(cls, reason: Reason) -> "Verdict":
        return cls(reason=reason)


ACCEPTED = Verdict()


class TimeOfDay(BaseModel):
    """Hour and minute on a 24-hour clock; built from ``"HH:MM"`` text too."""
    model_config = ConfigDict(frozen=True)

    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, value: Any) -> Any:
        if isinstance(value, time):
            return {"hour": value.hour, "minute": value.minute}
        if isinstance(value, str):
            match = _CLOCK_TEXT.match(value.strip())
            if not match:
                raise ValueError(f"expected HH:MM, got {value!r}")
            return {"hour": int(match.group(1)), "minute": int(match.group(2))}
        return value

    @classmethod
    def parse(cls, value: Any) -> Optional["TimeOfDay"]:
        """Return the parsed time, or None when ``value`` is not a valid time."""
        if isinstance(value, cls):
            return value
        try:
            return cls.model_validate(value)
        except ValidationError:
            return None

    def as_tuple(self) -> tuple[int, int]:
        return (self.hour, self.minute)

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def __lt__(self, other: "TimeOfDay") -> bool:
        return self.as_tuple() < other.as_tuple()

    def __le__(self, other: "TimeOfDay") -> bool:
        return self.as_tuple() <= other.as_tuple()

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    @model_serializer
    def _as_text(self) -> str:
        return str(self)


class Patient(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    birth_date: date

    def age(self, today: date) -> int:
        return whole_years(self.birth_date, today)


class ScheduleState(str, Enum):
    """Where a patient's appointment history stands."""
    EMPTY = "empty"
    HAS_ACTIVE = "has_active"
    HAS_EXPIRED_ONLY = "has_expired_only"


class Lookup(BaseModel):
    """Result of searching for a cancelable appointment.

    Either ``patient_id`` is set (a handle the caller may cancel with) or
    ``outcome`` explains why there is nothing to act on.
    """
    model_config = ConfigDict(frozen=True)

    patient_id: Optional[str] = None
    outcome: Optional[Reason] = None

    @property
    def found(self) -> bool:
        return self.patient_id is not None
