import logging

from fastapi import APIRouter, Depends, status

from planner.api import deps
from planner.schemas.task import Task, TaskCreate
from planner.services import planner_state
from planner.services.state_store import StateStore, state_lock

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[Task])
def list_tasks(store: StateStore = Depends(deps.get_state_store)) -> list[Task]:
    """List tasks, newest first."""
    return store.load().tasks


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    store: StateStore = Depends(deps.get_state_store),
) -> Task:
    with state_lock:
        state, task = planner_state.add_task(store.load(), payload)
        store.save(state)
    logger.info(f"Task added: {task.id} | {task.title}")
    return task


@router.post("/{task_id}/toggle", response_model=Task)
def toggle_task(
    task_id: str,
    store: StateStore = Depends(deps.get_state_store),
) -> Task:
    with state_lock:
        state, task = planner_state.toggle_task(store.load(), task_id)
        store.save(state)
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    store: StateStore = Depends(deps.get_state_store),
) -> None:
    """Delete a task together with the planned blocks scheduled for it."""
    with state_lock:
        store.save(planner_state.delete_task(store.load(), task_id))
    logger.info(f"Task deleted: {task_id}")
