"""
Subscription model.

Rows are never deleted; superseded rows are marked `expired`. At most one
row per user is `trial` or `active` at any time.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid

from myfocus.core.config import SubscriptionStatus, as_utc, utcnow


class Subscription(SQLModel, table=True):
    """User subscription period."""
    __tablename__ = "subscriptions"
    
    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True
    )
    
    user_id: str = Field(index=True)
    
    status: str = Field(index=True, description="trial, active or expired")
    
    plan_type: Optional[str] = Field(default=None, description="Null for trial")
    
    start_date: datetime = Field(default_factory=utcnow)
    
    end_date: Optional[datetime] = Field(default=None, description="Null for trial")
    
    payment_id: Optional[str] = Field(
        default=None,
        foreign_key="payments.id",
        description="Payment that provisioned this subscription"
    )
    
    created_at: datetime = Field(default_factory=utcnow)
    
    def is_live(self) -> bool:
        return self.status in (SubscriptionStatus.TRIAL.value, SubscriptionStatus.ACTIVE.value)
    
    def days_remaining(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole days left, or None for open-ended rows."""
        if self.end_date is None:
            return None
        if not self.is_live():
            return 0
        delta = as_utc(self.end_date) - (as_utc(now) or utcnow())
        return max(0, delta.days)


class SubscriptionRead(SQLModel):
    """Current subscription as shown to the user."""
    status: Optional[str] = None
    planType: Optional[str] = None
    planName: Optional[str] = None
    endDate: Optional[datetime] = None
    daysRemaining: Optional[int] = None
