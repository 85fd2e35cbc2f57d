from fastapi import APIRouter

from planner.api.routes import (
    assistant,
    busy_blocks,
    preferences,
    schedule,
    state,
    tasks,
)


api_router = APIRouter()
api_router.include_router(state.router, prefix="/state", tags=["state"])
api_router.include_router(preferences.router, prefix="/preferences", tags=["preferences"])
api_router.include_router(busy_blocks.router, prefix="/busy-blocks", tags=["busy-blocks"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(schedule.router, prefix="/schedule", tags=["schedule"])
api_router.include_router(assistant.router, prefix="/assistant", tags=["assistant"])
