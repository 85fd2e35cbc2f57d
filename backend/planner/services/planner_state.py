"""Manual edits to the planner state.

Each function takes the current state and returns a new one; persisting the
result is left to the caller.
"""

from __future__ import annotations

import time
from typing import Any
from uuid import uuid4

from planner.core.errors import NotFoundError, ValidationFailedError
from planner.schemas.calendar import BusyBlock, BusyBlockCreate
from planner.schemas.preferences import Preferences, PreferencesUpdate
from planner.schemas.state import AppState
from planner.schemas.task import Task, TaskCreate

MIN_ESTIMATE = 15
MAX_ESTIMATE = 1440
DEFAULT_ESTIMATE = 60


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


def clamp(value: float, low: int, high: int) -> float:
    return max(low, min(high, value))


def clamp_estimate(value: Any) -> int:
    if value is None:
        return DEFAULT_ESTIMATE
    try:
        return int(round(clamp(float(value), MIN_ESTIMATE, MAX_ESTIMATE)))
    except (TypeError, ValueError):
        return DEFAULT_ESTIMATE


def default_state() -> AppState:
    return AppState()


def add_busy_block(state: AppState, spec: BusyBlockCreate) -> tuple[AppState, BusyBlock]:
    start_min = int(clamp(spec.start_min, 0, 1440))
    end_min = int(clamp(spec.end_min, 0, 1440))
    if end_min <= start_min:
        raise ValidationFailedError("End must be after start.")
    label = (spec.label or "").strip() or "Busy"
    block = BusyBlock(
        id=new_id("busy"),
        day=spec.day,
        start_min=start_min,
        end_min=end_min,
        label=label,
    )
    return state.model_copy(update={"busy_blocks": [*state.busy_blocks, block]}), block


def delete_busy_block(state: AppState, block_id: str) -> AppState:
    remaining = [b for b in state.busy_blocks if b.id != block_id]
    if len(remaining) == len(state.busy_blocks):
        raise NotFoundError("Busy block not found")
    return state.model_copy(update={"busy_blocks": remaining})


def add_task(
    state: AppState, spec: TaskCreate, now_ms: int | None = None
) -> tuple[AppState, Task]:
    title = spec.title.strip()
    if not title:
        raise ValidationFailedError("Task title required.")
    task = Task(
        id=new_id("task"),
        title=title,
        due_date=spec.due_date,
        priority=spec.priority,
        estimate_mins=clamp_estimate(spec.estimate_mins),
        done=False,
        created_at=now_ms if now_ms is not None else int(time.time() * 1000),
    )
    # Newest first
    return state.model_copy(update={"tasks": [task, *state.tasks]}), task


def _get_task(state: AppState, task_id: str) -> Task:
    for task in state.tasks:
        if task.id == task_id:
            return task
    raise NotFoundError("Task not found")


def toggle_task(state: AppState, task_id: str) -> tuple[AppState, Task]:
    target = _get_task(state, task_id)
    toggled = target.model_copy(update={"done": not target.done})
    tasks = [toggled if t.id == task_id else t for t in state.tasks]
    return state.model_copy(update={"tasks": tasks}), toggled


def delete_task(state: AppState, task_id: str) -> AppState:
    _get_task(state, task_id)
    return state.model_copy(
        update={
            "tasks": [t for t in state.tasks if t.id != task_id],
            "planned_blocks": [b for b in state.planned_blocks if b.task_id != task_id],
        }
    )


def update_preferences(state: AppState, patch: PreferencesUpdate) -> AppState:
    merged = {
        **state.preferences.model_dump(),
        **patch.model_dump(exclude_none=True),
    }
    try:
        preferences = Preferences(**merged)
    except ValueError as exc:
        raise ValidationFailedError("Start hour must be before end hour.") from exc
    return state.model_copy(update={"preferences": preferences})


def clear_plan(state: AppState) -> AppState:
    return state.model_copy(update={"planned_blocks": []})
