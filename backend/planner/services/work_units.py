from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from planner.schemas.common import TaskPriority
from planner.schemas.task import Task

MIN_UNIT_MINUTES = 15

PRIORITY_WEIGHT = {
    TaskPriority.LOW: 0.7,
    TaskPriority.MEDIUM: 1.0,
    TaskPriority.HIGH: 1.35,
}

# Sub-linear: large tasks are only mildly discouraged
SIZE_PENALTY_EXPONENT = 0.15


@dataclass
class WorkUnit:
    task_id: str
    label: str
    mins: int
    score: float


def score_task(task: Task, today: date) -> float:
    """Placement score: favors near-due, high-priority, short tasks."""
    days_left = max(0, (task.due_date - today).days)
    urgency = 1 / (days_left + 1)
    weight = PRIORITY_WEIGHT.get(task.priority, 1.0)
    size_penalty = (max(MIN_UNIT_MINUTES, task.estimate_mins) / 60) ** SIZE_PENALTY_EXPONENT
    return urgency * weight / size_penalty


def split_estimate(remaining: int, block_mins: int) -> list[int]:
    parts = max(1, math.ceil(remaining / block_mins))
    durations = []
    for index in range(parts):
        mins = remaining - block_mins * (parts - 1) if index == parts - 1 else block_mins
        durations.append(max(MIN_UNIT_MINUTES, round(mins)))
    return durations


def expand_work_units(
    tasks: Iterable[Task], block_mins: int, today: date
) -> list[WorkUnit]:
    """Break pending tasks into work units of at most ``block_mins`` minutes.

    Units keep task input order, which the scheduler relies on as its
    tie-break.
    """
    units: list[WorkUnit] = []
    for task in tasks:
        if task.done:
            continue
        remaining = max(0, task.estimate_mins)
        if remaining <= 0:
            continue

        score = score_task(task, today)
        durations = split_estimate(remaining, block_mins)
        parts = len(durations)
        for index, mins in enumerate(durations):
            label = task.title if parts == 1 else f"{task.title} (Part {index + 1}/{parts})"
            units.append(WorkUnit(task_id=task.id, label=label, mins=mins, score=score))
    return units
