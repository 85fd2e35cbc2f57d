from fastapi import APIRouter, Depends

from planner.api import deps
from planner.schemas.action import ReplanResponse, UnscheduledUnit
from planner.schemas.calendar import FreeIntervalPublic, PlannedBlock
from planner.schemas.common import Weekday
from planner.services import planner_state
from planner.services.free_time import build_free_grid
from planner.services.scheduling import ScheduleResult, replan
from planner.services.state_store import StateStore, state_lock

router = APIRouter()


def unscheduled_units(result: ScheduleResult | None) -> list[UnscheduledUnit]:
    if result is None:
        return []
    return [
        UnscheduledUnit(task_id=unit.task_id, label=unit.label, mins=unit.mins)
        for unit in result.unscheduled
    ]


@router.get("", response_model=list[PlannedBlock])
def list_planned_blocks(store: StateStore = Depends(deps.get_state_store)) -> list[PlannedBlock]:
    return store.load().planned_blocks


@router.get("/free", response_model=dict[Weekday, list[FreeIntervalPublic]])
def read_free_grid(
    store: StateStore = Depends(deps.get_state_store),
) -> dict[Weekday, list[FreeIntervalPublic]]:
    state = store.load()
    grid = build_free_grid(state.preferences, state.busy_blocks)
    return {
        day: [FreeIntervalPublic(start=i.start, end=i.end) for i in intervals]
        for day, intervals in grid.items()
    }


@router.post("/replan", response_model=ReplanResponse)
def run_replan(store: StateStore = Depends(deps.get_state_store)) -> ReplanResponse:
    with state_lock:
        state, result = replan(store.load())
        store.save(state)
    return ReplanResponse(
        planned_blocks=state.planned_blocks,
        unscheduled=unscheduled_units(result),
    )


@router.delete("", response_model=list[PlannedBlock])
def clear_planned_blocks(store: StateStore = Depends(deps.get_state_store)) -> list[PlannedBlock]:
    with state_lock:
        state = planner_state.clear_plan(store.load())
        store.save(state)
    return state.planned_blocks
