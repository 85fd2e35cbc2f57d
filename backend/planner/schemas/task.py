from datetime import date

from pydantic import Field

from planner.schemas.common import CamelModel, TaskPriority


class Task(CamelModel):
    id: str
    title: str
    due_date: date
    priority: TaskPriority = TaskPriority.MEDIUM
    estimate_mins: int = Field(default=60, ge=15, le=1440)
    done: bool = False
    # Epoch milliseconds
    created_at: int


class TaskCreate(CamelModel):
    title: str
    due_date: date
    priority: TaskPriority = TaskPriority.MEDIUM
    estimate_mins: int | None = None
