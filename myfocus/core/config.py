"""
Application configuration constants and enums.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta


class PlanType(str, Enum):
    """Subscription plan tiers."""
    THREE_MONTHS = "3_months"
    SIX_MONTHS = "6_months"
    ONE_YEAR = "1_year"


class PaymentStatus(str, Enum):
    """Local payment record status."""
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"


class SubscriptionStatus(str, Enum):
    """User subscription status."""
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"


class HabitCategory(str, Enum):
    """Habit goal categories."""
    HEALTH = "health"
    FITNESS = "fitness"
    SLEEP = "sleep"
    MINDFULNESS = "mindfulness"
    LEARNING = "learning"


# Base prices in currency units, fixed by the billing contract
PLAN_PRICES = {
    PlanType.THREE_MONTHS: 750,
    PlanType.SIX_MONTHS: 1300,
    PlanType.ONE_YEAR: 2200,
}

# Calendar durations (added to month/year fields, not a day count)
PLAN_DURATIONS = {
    PlanType.THREE_MONTHS: relativedelta(months=3),
    PlanType.SIX_MONTHS: relativedelta(months=6),
    PlanType.ONE_YEAR: relativedelta(years=1),
}

PLAN_NAMES = {
    PlanType.THREE_MONTHS: "3 месяца",
    PlanType.SIX_MONTHS: "6 месяцев",
    PlanType.ONE_YEAR: "1 год",
}

# Statuses that count as a live subscription; at most one per user
LIVE_SUBSCRIPTION_STATUSES = (SubscriptionStatus.TRIAL, SubscriptionStatus.ACTIVE)

HABIT_PROGRAM_DAYS = 90


def plan_display_name(plan_type) -> str:
    """Human-readable plan name, falling back to the raw value."""
    try:
        return PLAN_NAMES[PlanType(plan_type)]
    except ValueError:
        return str(plan_type)


def plan_end_date(plan_type: PlanType, start: datetime) -> datetime:
    """End of a plan started at `start`."""
    return start + PLAN_DURATIONS[PlanType(plan_type)]


def utcnow() -> datetime:
    """Timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert to aware UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
