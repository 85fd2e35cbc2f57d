from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from planner.schemas.calendar import BusyBlock
from planner.schemas.common import WEEKDAYS, Weekday
from planner.schemas.preferences import Preferences

MIN_FREE_MINUTES = 15


@dataclass
class FreeInterval:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


FreeGrid = dict[Weekday, list[FreeInterval]]


def _subtract(
    intervals: list[FreeInterval], busy_start: int, busy_end: int
) -> list[FreeInterval]:
    remaining: list[FreeInterval] = []
    for interval in intervals:
        if busy_end <= interval.start or busy_start >= interval.end:
            remaining.append(interval)
            continue
        if busy_start > interval.start:
            remaining.append(FreeInterval(interval.start, busy_start))
        if busy_end < interval.end:
            remaining.append(FreeInterval(busy_end, interval.end))
    remaining = [i for i in remaining if i.length >= MIN_FREE_MINUTES]
    remaining.sort(key=lambda i: i.start)
    return remaining


def build_free_grid(
    preferences: Preferences, busy_blocks: Iterable[BusyBlock]
) -> FreeGrid:
    """Free intervals per weekday after removing busy blocks from the daily window.

    Each day's intervals are disjoint, ascending and at least
    ``MIN_FREE_MINUTES`` long. The result does not depend on the order of
    ``busy_blocks``.
    """
    window_start, window_end = preferences.window
    grid: FreeGrid = {}
    for day in WEEKDAYS:
        if window_end - window_start >= MIN_FREE_MINUTES:
            grid[day] = [FreeInterval(window_start, window_end)]
        else:
            grid[day] = []

    for block in busy_blocks:
        grid[block.day] = _subtract(grid[block.day], block.start_min, block.end_min)
    return grid
