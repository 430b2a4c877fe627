"""
Subscription lifecycle: trial provisioning, paid activation and lookup.

Rows are never deleted. Activation expires every live row of the user and
inserts one new active row, so a user never has more than one live row.
"""
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import update
from sqlmodel import Session, select

from myfocus.core.config import (
    LIVE_SUBSCRIPTION_STATUSES,
    PlanType,
    SubscriptionStatus,
    as_utc,
    plan_display_name,
    plan_end_date,
    utcnow,
)
from myfocus.db.models.subscription import Subscription, SubscriptionRead

logger = structlog.get_logger(__name__)

_LIVE_VALUES = [status.value for status in LIVE_SUBSCRIPTION_STATUSES]


class SubscriptionService:
    """
    Reads and writes subscription rows.
    
    `activate` and `expire_live` leave the commit to the caller so they can
    share a transaction with the payment update; `start_trial` commits.
    """
    
    def __init__(self, session: Session):
        self.session = session
    
    def get_current(self, user_id: str) -> Optional[Subscription]:
        """Most recent trial/active subscription of the user."""
        statement = (
            select(Subscription)
            .where(Subscription.user_id == user_id, Subscription.status.in_(_LIVE_VALUES))
            .order_by(Subscription.created_at.desc())
        )
        return self.session.exec(statement).first()
    
    def expire_live(self, user_id: str) -> int:
        """Mark every trial/active row of the user expired; returns row count."""
        statement = (
            update(Subscription)
            .where(Subscription.user_id == user_id, Subscription.status.in_(_LIVE_VALUES))
            .values(status=SubscriptionStatus.EXPIRED.value)
            .execution_options(synchronize_session="evaluate")
        )
        return self.session.execute(statement).rowcount
    
    def activate(
        self,
        user_id: str,
        plan_type: PlanType,
        payment_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> Subscription:
        """Replace the user's live subscription with a paid one starting now."""
        now = as_utc(now) or utcnow()
        end_date = plan_end_date(plan_type, now)
        
        expired = self.expire_live(user_id)
        subscription = Subscription(
            user_id=user_id,
            status=SubscriptionStatus.ACTIVE.value,
            plan_type=PlanType(plan_type).value,
            start_date=now,
            end_date=end_date,
            payment_id=payment_id,
            created_at=now,
        )
        self.session.add(subscription)
        
        logger.info(
            "Creating subscription",
            user_id=user_id,
            plan_type=subscription.plan_type,
            end_date=end_date.isoformat(),
            expired_previous=expired
        )
        return subscription
    
    def start_trial(self, user_id: str, now: Optional[datetime] = None) -> Subscription:
        """Give a user a trial unless they already hold a live subscription."""
        existing = self.get_current(user_id)
        if existing is not None:
            return existing
        
        now = as_utc(now) or utcnow()
        subscription = Subscription(
            user_id=user_id,
            status=SubscriptionStatus.TRIAL.value,
            start_date=now,
            created_at=now,
        )
        self.session.add(subscription)
        self.session.commit()
        self.session.refresh(subscription)
        logger.info("Trial subscription started", user_id=user_id)
        return subscription
    
    @staticmethod
    def to_read(subscription: Optional[Subscription], now: Optional[datetime] = None) -> SubscriptionRead:
        if subscription is None:
            return SubscriptionRead()
        return SubscriptionRead(
            status=subscription.status,
            planType=subscription.plan_type,
            planName=plan_display_name(subscription.plan_type) if subscription.plan_type else None,
            endDate=subscription.end_date,
            daysRemaining=subscription.days_remaining(now),
        )
