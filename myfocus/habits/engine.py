"""
Habit progression engine.

Pure functions over a `Habit` snapshot and an externally supplied `now`.
A step for day d is available once d <= days since start. Progress is
driven by completion count: `streak` is the number of completed steps and
`current_day` is min(completed + 1, total steps).
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from myfocus.core.config import as_utc
from myfocus.core.exceptions import StepNotAvailableError, ValidationError
from myfocus.habits.goals import build_micro_steps
from myfocus.habits.models import Habit, HabitGoal, MicroStep

SECONDS_PER_DAY = 24 * 60 * 60
UPCOMING_STEPS = 5


@dataclass
class ToggleResult:
    habit: Habit
    completed: bool


def days_since_start(habit: Habit, now: datetime) -> int:
    """Whole days elapsed since the start, counting the start day as 1."""
    elapsed = (as_utc(now) - habit.start_date).total_seconds()
    return int(elapsed // SECONDS_PER_DAY) + 1


def is_step_available(habit: Habit, day: int, now: datetime) -> bool:
    return day <= days_since_start(habit, now)


def recompute_progress(habit: Habit) -> Habit:
    completed = habit.completed_count
    return habit.model_copy(update={
        "streak": completed,
        "current_day": min(completed + 1, habit.total_steps),
    })


def toggle_step(habit: Habit, day: int, now: datetime) -> ToggleResult:
    """
    Flip completion of the step for `day`.
    
    Raises:
        ValidationError: the habit has no step for `day`
        StepNotAvailableError: the step's day has not come yet; habit untouched
    """
    now = as_utc(now)
    step = habit.get_step(day)
    if step is None:
        raise ValidationError(f"No micro-step for day {day}", details={"day": day})
    
    if not is_step_available(habit, day, now):
        raise StepNotAvailableError(day, days_since_start(habit, now))
    
    completed = not step.completed
    steps = [
        s.model_copy(update={
            "completed": completed,
            "completed_date": now if completed else None,
        }) if s.day == day else s
        for s in habit.micro_steps
    ]
    updated = recompute_progress(habit.model_copy(update={"micro_steps": steps}))
    return ToggleResult(habit=updated, completed=completed)


def start_habit(
    goal: HabitGoal,
    now: datetime,
    micro_steps: Optional[Sequence[MicroStep]] = None,
    habit_id: Optional[str] = None,
) -> Habit:
    """
    New habit for `goal`, starting today at day 1 with no step completed.
    
    Uses the goal's own program unless `micro_steps` is given.
    
    Raises:
        ValidationError: the steps do not cover exactly the goal's days
    """
    now = as_utc(now)
    if micro_steps is None:
        micro_steps = build_micro_steps(goal.category, goal.total_days)
    ordered = sorted(micro_steps, key=lambda step: step.day)
    if [step.day for step in ordered] != list(range(1, goal.total_days + 1)):
        raise ValidationError(
            f"Program must have one step for each of {goal.total_days} days",
            details={"steps": len(ordered), "total_days": goal.total_days}
        )
    return Habit(
        id=habit_id or str(int(now.timestamp() * 1000)),
        category=goal.category,
        title=goal.title,
        icon=goal.icon,
        gradient=goal.gradient,
        current_day=1,
        streak=0,
        micro_steps=[step.model_copy(update={"completed": False, "completed_date": None}) for step in ordered],
        start_date=now,
        is_active=True,
    )


def todays_step(habit: Habit) -> Optional[MicroStep]:
    return habit.get_step(habit.current_day)


def upcoming_steps(habit: Habit, count: int = UPCOMING_STEPS) -> List[MicroStep]:
    """Steps following the current day, in program order."""
    return habit.micro_steps[habit.current_day:habit.current_day + count]


def completed_steps(habit: Habit) -> List[MicroStep]:
    return [step for step in habit.micro_steps if step.completed]


def is_finished(habit: Habit) -> bool:
    return habit.total_steps > 0 and habit.completed_count == habit.total_steps
