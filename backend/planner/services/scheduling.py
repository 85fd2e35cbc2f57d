from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Sequence
from uuid import uuid4

from planner.schemas.calendar import BusyBlock, PlannedBlock
from planner.schemas.common import WEEKDAYS, Weekday
from planner.schemas.preferences import Preferences
from planner.schemas.state import AppState
from planner.schemas.task import Task
from planner.services.free_time import MIN_FREE_MINUTES, FreeGrid, FreeInterval, build_free_grid
from planner.services.work_units import WorkUnit, expand_work_units

logger = logging.getLogger(__name__)

DAY_ORDER = {day: index for index, day in enumerate(WEEKDAYS)}


@dataclass
class ScheduleResult:
    planned: list[PlannedBlock] = field(default_factory=list)
    unscheduled: list[WorkUnit] = field(default_factory=list)


def _find_slot(
    grid: FreeGrid,
    daily_count: dict[Weekday, int],
    max_blocks_per_day: int,
    mins: int,
) -> tuple[Weekday, int] | None:
    """First (day, interval index) with room for ``mins``, scanning Mon..Sun."""
    for day in WEEKDAYS:
        if daily_count[day] >= max_blocks_per_day:
            continue
        for index, interval in enumerate(grid[day]):
            if interval.length >= mins:
                return day, index
    return None


def _consume(intervals: list[FreeInterval], index: int, end_min: int) -> None:
    interval = intervals[index]
    if interval.end - end_min >= MIN_FREE_MINUTES:
        intervals[index] = FreeInterval(end_min, interval.end)
    else:
        del intervals[index]


def place_units(
    grid: FreeGrid, units: Sequence[WorkUnit], max_blocks_per_day: int
) -> ScheduleResult:
    """Greedy first-fit placement; mutates ``grid`` as capacity is used."""
    result = ScheduleResult()
    daily_count = {day: 0 for day in WEEKDAYS}

    # sorted() is stable: equal scores keep task-then-part order
    for unit in sorted(units, key=lambda u: -u.score):
        slot = _find_slot(grid, daily_count, max_blocks_per_day, unit.mins)
        if slot is None:
            result.unscheduled.append(unit)
            continue
        day, index = slot
        start_min = grid[day][index].start
        end_min = start_min + unit.mins
        result.planned.append(
            PlannedBlock(
                id=f"plan_{uuid4().hex}",
                day=day,
                start_min=start_min,
                end_min=end_min,
                task_id=unit.task_id,
                label=unit.label,
            )
        )
        daily_count[day] += 1
        _consume(grid[day], index, end_min)

    result.planned.sort(key=lambda b: (DAY_ORDER[b.day], b.start_min))
    return result


def auto_plan(
    preferences: Preferences,
    busy_blocks: Sequence[BusyBlock],
    tasks: Sequence[Task],
    today: date | None = None,
) -> ScheduleResult:
    today = today or date.today()
    grid = build_free_grid(preferences, busy_blocks)
    units = expand_work_units(tasks, preferences.work_block_mins, today)
    result = place_units(grid, units, preferences.max_blocks_per_day)

    logger.info(
        f"Scheduled {len(result.planned)} of {len(units)} work units "
        f"({len(result.unscheduled)} unscheduled)"
    )
    for unit in result.unscheduled:
        logger.warning(f"No free slot for work unit: {unit.label} ({unit.mins} min)")
    return result


def replan(state: AppState, today: date | None = None) -> tuple[AppState, ScheduleResult]:
    """Return a copy of ``state`` whose planned blocks are fully regenerated."""
    result = auto_plan(state.preferences, state.busy_blocks, state.tasks, today)
    return state.model_copy(update={"planned_blocks": result.planned}), result
