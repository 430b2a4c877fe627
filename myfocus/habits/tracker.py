"""
Stateful front for the progression engine: holds the current habit,
persists it after every change and clears it on reset.
"""
from datetime import datetime
from typing import Callable, Optional, Sequence

import structlog

from myfocus.core.config import utcnow
from myfocus.core.exceptions import ValidationError
from myfocus.habits import engine
from myfocus.habits.goals import get_goal
from myfocus.habits.models import Habit, MicroStep
from myfocus.habits.storage import HabitStorage

logger = structlog.get_logger(__name__)


class HabitTracker:
    """Owns the single active habit of a user session."""
    
    def __init__(self, storage: HabitStorage, clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self.clock = clock
        self._habit: Optional[Habit] = storage.load()
    
    @property
    def habit(self) -> Optional[Habit]:
        return self._habit
    
    def select_goal(self, category, micro_steps: Optional[Sequence[MicroStep]] = None) -> Habit:
        """Start a fresh habit for the goal of `category`, replacing any current one."""
        goal = get_goal(category)
        if goal is None:
            raise ValidationError(f"Unknown habit category: {category}")
        
        habit = engine.start_habit(goal, self.clock(), micro_steps=micro_steps)
        self._set(habit)
        logger.info("Habit started", habit_id=habit.id, category=habit.category.value)
        return habit
    
    def toggle(self, day: int) -> engine.ToggleResult:
        """
        Toggle a step of the current habit and persist the result.
        
        Raises:
            ValidationError: no active habit or no such step
            StepNotAvailableError: step is locked until a later day
        """
        if self._habit is None:
            raise ValidationError("No active habit")
        
        result = engine.toggle_step(self._habit, day, self.clock())
        self._set(result.habit)
        if engine.is_finished(result.habit):
            logger.info("Habit program finished", habit_id=result.habit.id, streak=result.habit.streak)
        return result
    
    def reset(self) -> None:
        self._habit = None
        self.storage.clear()
    
    def _set(self, habit: Habit) -> None:
        self._habit = habit
        self.storage.save(habit)
