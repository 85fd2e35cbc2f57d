import math
from datetime import date
from typing import Any

from pydantic import Field, field_validator, model_validator

from planner.schemas.calendar import PlannedBlock
from planner.schemas.common import CamelModel, TaskPriority, Weekday
from planner.schemas.preferences import PreferencesUpdate
from planner.schemas.state import AppState


class BusyBlockSpec(CamelModel):
    day: Weekday
    start_min: int = Field(ge=0, le=1440)
    end_min: int = Field(ge=0, le=1440)
    label: str | None = None

    @model_validator(mode="after")
    def check_order(self) -> "BusyBlockSpec":
        if self.end_min <= self.start_min:
            raise ValueError("endMin must be after startMin")
        return self


class TaskSpec(CamelModel):
    title: str
    due_date: date
    priority: TaskPriority | None = None
    # Left unbounded: the applier clamps out-of-range estimates instead of rejecting them
    estimate_mins: int | float | None = None

    @field_validator("estimate_mins", mode="before")
    @classmethod
    def coerce_estimate(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number


class Action(CamelModel):
    preferences: PreferencesUpdate | None = None
    add_busy_blocks: list[BusyBlockSpec] | None = None
    add_tasks: list[TaskSpec] | None = None
    replan: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        """Canonical JSON-ready form, used for persistence and token binding."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PlanProposal(CamelModel):
    preview: str
    action: Action
    confirmation_token: str


class ProposeRequest(CamelModel):
    message: str = Field(min_length=1)
    # Accepted for compatibility with clients that send their own snapshot;
    # the server always plans against its persisted state.
    state: dict[str, Any] | None = None


class ApplyRequest(CamelModel):
    confirmation_token: str | None = None
    action: Action
    user_confirmation_text: str | None = None


class UnscheduledUnit(CamelModel):
    task_id: str
    label: str
    mins: int


class ApplyResponse(CamelModel):
    ok: bool = True
    action: Action
    state: AppState
    unscheduled: list[UnscheduledUnit] = Field(default_factory=list)


class ReplanResponse(CamelModel):
    planned_blocks: list[PlannedBlock]
    unscheduled: list[UnscheduledUnit] = Field(default_factory=list)
