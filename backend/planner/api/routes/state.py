from fastapi import APIRouter, Depends

from planner.api import deps
from planner.schemas.state import AppState, StateImport
from planner.services import planner_state
from planner.services.state_store import StateStore, state_lock

router = APIRouter()


@router.get("", response_model=AppState)
def read_state(store: StateStore = Depends(deps.get_state_store)) -> AppState:
    return store.load()


@router.put("", response_model=AppState)
def import_state(
    payload: StateImport,
    store: StateStore = Depends(deps.get_state_store),
) -> AppState:
    """Replace the planner state with an exported blob."""
    with state_lock:
        return store.import_payload(payload.state, payload.schema_version)


@router.delete("", response_model=AppState)
def reset_state(store: StateStore = Depends(deps.get_state_store)) -> AppState:
    with state_lock:
        return store.save(planner_state.default_state())
