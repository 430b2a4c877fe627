"""
Habit progression: a single 90-day goal made of daily micro-steps.
"""

from .models import Habit, HabitGoal, MicroStep
from .engine import (
    ToggleResult,
    days_since_start,
    is_step_available,
    toggle_step,
    start_habit,
    todays_step,
    upcoming_steps,
    completed_steps,
    is_finished,
)
from .goals import HABIT_GOALS, PROGRAM_STAGES, build_micro_steps, get_goal
from .storage import HabitStorage, STORAGE_KEY
from .tracker import HabitTracker

__all__ = [
    "Habit",
    "HabitGoal",
    "MicroStep",
    "ToggleResult",
    "days_since_start",
    "is_step_available",
    "toggle_step",
    "start_habit",
    "todays_step",
    "upcoming_steps",
    "completed_steps",
    "is_finished",
    "HABIT_GOALS",
    "get_goal",
    "PROGRAM_STAGES",
    "build_micro_steps",
    "HabitStorage",
    "STORAGE_KEY",
    "HabitTracker",
]
