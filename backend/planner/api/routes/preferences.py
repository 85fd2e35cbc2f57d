from fastapi import APIRouter, Depends

from planner.api import deps
from planner.schemas.preferences import Preferences, PreferencesUpdate
from planner.services import planner_state
from planner.services.state_store import StateStore, state_lock

router = APIRouter()


@router.get("", response_model=Preferences)
def read_preferences(store: StateStore = Depends(deps.get_state_store)) -> Preferences:
    return store.load().preferences


@router.patch("", response_model=Preferences)
def update_preferences(
    payload: PreferencesUpdate,
    store: StateStore = Depends(deps.get_state_store),
) -> Preferences:
    with state_lock:
        state = planner_state.update_preferences(store.load(), payload)
        store.save(state)
    return state.preferences
