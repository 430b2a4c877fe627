"""
Habit snapshot models.

Field names are snake_case in Python and camelCase in the serialized
snapshot, which is the format the web client keeps. Timestamps are
aware UTC and serialize with a `Z` suffix; naive input is taken as UTC.
"""
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from myfocus.core.config import HABIT_PROGRAM_DAYS, HabitCategory, as_utc


UTCDatetime = Annotated[datetime, AfterValidator(as_utc)]


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MicroStep(_SnapshotModel):
    """One daily action of a habit program."""
    day: int
    title: str
    description: str = ""
    completed: bool = False
    completed_date: Optional[UTCDatetime] = None


class Habit(_SnapshotModel):
    """A user's single active habit and its progress."""
    id: str
    category: HabitCategory
    title: str
    icon: str = ""
    gradient: str = ""
    current_day: int = 1
    streak: int = 0
    micro_steps: List[MicroStep] = []
    start_date: UTCDatetime
    is_active: bool = True
    
    @property
    def total_steps(self) -> int:
        return len(self.micro_steps)
    
    @property
    def completed_count(self) -> int:
        return sum(1 for step in self.micro_steps if step.completed)
    
    def get_step(self, day: int) -> Optional[MicroStep]:
        return next((step for step in self.micro_steps if step.day == day), None)


class HabitGoal(_SnapshotModel):
    """Selectable goal a habit is started from."""
    category: HabitCategory
    title: str
    subtitle: str
    icon: str
    gradient: str
    total_days: int = HABIT_PROGRAM_DAYS
