from pydantic import Field

from planner.schemas.calendar import BusyBlock, PlannedBlock
from planner.schemas.common import CamelModel
from planner.schemas.preferences import Preferences
from planner.schemas.task import Task


class AppState(CamelModel):
    preferences: Preferences = Field(default_factory=Preferences)
    busy_blocks: list[BusyBlock] = Field(default_factory=list)
    planned_blocks: list[PlannedBlock] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)

    def snapshot(self) -> dict:
        """Read-only view handed to the proposal oracle (no planned blocks)."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            include={"preferences", "busy_blocks", "tasks"},
        )


class StateImport(CamelModel):
    """Exported state blob; unversioned browser exports are version 0."""

    state: dict
    schema_version: int = Field(default=0, ge=0)
