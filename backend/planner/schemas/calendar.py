from typing import Any

from pydantic import Field, field_validator

from planner.schemas.common import CamelModel, Weekday


def _parse_clock(value: Any) -> Any:
    """Accept minutes since midnight or an "HH:MM" string."""
    if isinstance(value, str) and ":" in value:
        parts = value.strip().split(":")
        if len(parts) != 2:
            raise ValueError(f"Invalid time: {value}")
        try:
            hours, minutes = int(parts[0]), int(parts[1])
        except ValueError as exc:
            raise ValueError(f"Invalid time: {value}") from exc
        return hours * 60 + minutes
    return value


class BusyBlock(CamelModel):
    id: str
    day: Weekday
    start_min: int = Field(ge=0, le=1440)
    end_min: int = Field(ge=0, le=1440)
    label: str = "Busy"


class BusyBlockCreate(CamelModel):
    day: Weekday
    start_min: int
    end_min: int
    label: str | None = None

    @field_validator("start_min", "end_min", mode="before")
    @classmethod
    def parse_clock(cls, value: Any) -> Any:
        return _parse_clock(value)


class PlannedBlock(CamelModel):
    id: str
    day: Weekday
    start_min: int
    end_min: int
    type: str = "plan"
    task_id: str | None = None
    label: str | None = None


class FreeIntervalPublic(CamelModel):
    start: int
    end: int
