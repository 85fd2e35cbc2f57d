import logging

from fastapi import APIRouter, Depends, status

from planner.api import deps
from planner.schemas.calendar import BusyBlock, BusyBlockCreate
from planner.services import planner_state
from planner.services.state_store import StateStore, state_lock

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[BusyBlock])
def list_busy_blocks(store: StateStore = Depends(deps.get_state_store)) -> list[BusyBlock]:
    return store.load().busy_blocks


@router.post("", response_model=BusyBlock, status_code=status.HTTP_201_CREATED)
def create_busy_block(
    payload: BusyBlockCreate,
    store: StateStore = Depends(deps.get_state_store),
) -> BusyBlock:
    with state_lock:
        state, block = planner_state.add_busy_block(store.load(), payload)
        store.save(state)
    logger.info(f"Busy block added: {block.id} | {block.day.value} {block.start_min}-{block.end_min}")
    return block


@router.delete("/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_busy_block(
    block_id: str,
    store: StateStore = Depends(deps.get_state_store),
) -> None:
    with state_lock:
        store.save(planner_state.delete_busy_block(store.load(), block_id))
    logger.info(f"Busy block deleted: {block_id}")
