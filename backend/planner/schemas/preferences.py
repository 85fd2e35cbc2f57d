from pydantic import Field, model_validator

from planner.schemas.common import CamelModel


class Preferences(CamelModel):
    work_block_mins: int = Field(default=50, gt=0)
    max_blocks_per_day: int = Field(default=3, ge=1)
    start_hour: int = Field(default=6, ge=0, le=24)
    end_hour: int = Field(default=22, ge=0, le=24)

    @model_validator(mode="after")
    def check_window(self) -> "Preferences":
        if self.start_hour >= self.end_hour:
            raise ValueError("startHour must be before endHour")
        return self

    @property
    def window(self) -> tuple[int, int]:
        """Daily scheduling window in minutes since midnight."""
        return self.start_hour * 60, self.end_hour * 60


class PreferencesUpdate(CamelModel):
    work_block_mins: int | None = Field(default=None, ge=15, le=180)
    max_blocks_per_day: int | None = Field(default=None, ge=1, le=12)
    start_hour: int | None = Field(default=None, ge=0, le=23)
    end_hour: int | None = Field(default=None, ge=1, le=24)
