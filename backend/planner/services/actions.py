from __future__ import annotations

import logging
import time
from datetime import date

from pydantic import ValidationError

from planner.schemas.action import Action
from planner.schemas.calendar import BusyBlock
from planner.schemas.common import TaskPriority
from planner.schemas.preferences import Preferences, PreferencesUpdate
from planner.schemas.state import AppState
from planner.schemas.task import Task
from planner.services import planner_state
from planner.services.scheduling import ScheduleResult, replan

logger = logging.getLogger(__name__)


def merge_preferences(current: Preferences, patch: PreferencesUpdate) -> Preferences:
    """Overwrite the provided fields of ``current``.

    A patch whose hours would leave an empty day window keeps the current
    hours and applies the rest.
    """
    changes = patch.model_dump(exclude_none=True)
    try:
        return Preferences.model_validate({**current.model_dump(), **changes})
    except ValidationError:
        logger.warning(
            f"Ignoring proposed day window {changes.get('start_hour', current.start_hour)}-"
            f"{changes.get('end_hour', current.end_hour)}: start must be before end"
        )
    changes.pop("start_hour", None)
    changes.pop("end_hour", None)
    return Preferences.model_validate({**current.model_dump(), **changes})


def apply_action(
    state: AppState,
    action: Action,
    today: date | None = None,
    now_ms: int | None = None,
) -> tuple[AppState, ScheduleResult | None]:
    """Merge an approved action into a copy of ``state``.

    Numeric fields are clamped rather than rejected, since the user has
    already confirmed by the time this runs. The scheduler re-runs unless the
    action sets ``replan`` to false.
    """
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    updates: dict = {}

    if action.preferences:
        updates["preferences"] = merge_preferences(state.preferences, action.preferences)

    if action.add_busy_blocks:
        added = [
            BusyBlock(
                id=planner_state.new_id("busy"),
                day=spec.day,
                start_min=spec.start_min,
                end_min=spec.end_min,
                label=spec.label or "Busy",
            )
            for spec in action.add_busy_blocks
        ]
        updates["busy_blocks"] = [*state.busy_blocks, *added]

    if action.add_tasks:
        added_tasks = [
            Task(
                id=planner_state.new_id("task"),
                title=spec.title,
                due_date=spec.due_date,
                priority=spec.priority or TaskPriority.MEDIUM,
                estimate_mins=planner_state.clamp_estimate(spec.estimate_mins),
                done=False,
                created_at=now_ms,
            )
            for spec in action.add_tasks
        ]
        updates["tasks"] = [*added_tasks, *state.tasks]

    merged = state.model_copy(update=updates)
    logger.info(
        "Applied action: "
        f"preferences={'yes' if action.preferences else 'no'}, "
        f"busy_blocks=+{len(action.add_busy_blocks or [])}, "
        f"tasks=+{len(action.add_tasks or [])}"
    )

    if action.replan is False:
        return merged, None
    return replan(merged, today)
