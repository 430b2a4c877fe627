"""
Gateway webhook processing.

Handles YooKassa payment notifications. Only `payment.succeeded` and
`payment.canceled` change state; every other event is acknowledged and
ignored. Processing is idempotent: the pending -> terminal transition is a
conditional update, so a redelivered event finds nothing to change and does
not provision a second subscription.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from myfocus.core.config import PaymentStatus, PlanType, as_utc, utcnow
from myfocus.core.exceptions import MalformedWebhookError
from myfocus.core.monitoring import increment_webhook_events
from myfocus.db.models.payment import Payment
from myfocus.api.services.subscriptions import SubscriptionService

logger = structlog.get_logger(__name__)


class PaymentEventKind(str, Enum):
    """Closed set of notification kinds the handler distinguishes."""
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    IGNORED = "ignored"


class WebhookOutcome(str, Enum):
    """What processing did with a notification."""
    IGNORED = "ignored"
    PROCESSED = "processed"
    DUPLICATE = "duplicate"
    CONFLICT = "conflict"


GATEWAY_EVENTS = {
    "payment.succeeded": PaymentEventKind.SUCCEEDED,
    "payment.canceled": PaymentEventKind.CANCELLED,
}

# Status the gateway reports on the payment object for each kind
GATEWAY_STATUS = {
    PaymentEventKind.SUCCEEDED: "succeeded",
    PaymentEventKind.CANCELLED: "canceled",
}

TARGET_STATUS = {
    PaymentEventKind.SUCCEEDED: PaymentStatus.SUCCEEDED,
    PaymentEventKind.CANCELLED: PaymentStatus.CANCELLED,
}


@dataclass
class PaymentNotification:
    """Parsed webhook envelope."""
    kind: PaymentEventKind
    event: str
    gateway_payment_id: Optional[str] = None
    user_id: Optional[str] = None
    plan_type: Optional[PlanType] = None
    promo_code: Optional[str] = None
    amount: Optional[int] = None
    gateway_status: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def _parse_amount(obj: Dict[str, Any]) -> Optional[int]:
    amount = obj.get("amount")
    value = amount.get("value") if isinstance(amount, dict) else None
    if value is None:
        return None
    try:
        return int(Decimal(str(value)))
    except (InvalidOperation, ValueError):
        return None


def parse_notification(payload: Dict[str, Any]) -> PaymentNotification:
    """
    Turn the raw envelope into a `PaymentNotification`.
    
    Raises:
        MalformedWebhookError: an accepted event lacks payment id, user id or
            a known plan type
    """
    if not isinstance(payload, dict):
        raise MalformedWebhookError("Webhook payload must be a JSON object")
    
    event = payload.get("event") or ""
    kind = GATEWAY_EVENTS.get(event, PaymentEventKind.IGNORED)
    if kind is PaymentEventKind.IGNORED:
        return PaymentNotification(kind=kind, event=event)
    
    obj = payload.get("object") or {}
    metadata = obj.get("metadata") or {}
    gateway_payment_id = obj.get("id")
    user_id = metadata.get("user_id")
    raw_plan_type = metadata.get("plan_type")
    
    if not gateway_payment_id:
        logger.error("Missing payment id in webhook object", event_name=event)
        raise MalformedWebhookError("Missing payment id")
    
    if not user_id or not raw_plan_type:
        logger.error("Missing user_id or plan_type in metadata", gateway_payment_id=gateway_payment_id)
        raise MalformedWebhookError()
    
    try:
        plan_type = PlanType(raw_plan_type)
    except ValueError:
        logger.error("Unknown plan_type in metadata", plan_type=raw_plan_type)
        raise MalformedWebhookError(f"Unknown plan type: {raw_plan_type}")
    
    return PaymentNotification(
        kind=kind,
        event=event,
        gateway_payment_id=gateway_payment_id,
        user_id=str(user_id),
        plan_type=plan_type,
        promo_code=metadata.get("promo_code"),
        amount=_parse_amount(obj),
        gateway_status=obj.get("status"),
        metadata=metadata,
    )


class WebhookService:
    """Applies payment notifications to payments and subscriptions."""
    
    def __init__(self, session: Session):
        self.session = session
        self.subscriptions = SubscriptionService(session)
    
    def handle(self, payload: Dict[str, Any], now: Optional[datetime] = None) -> WebhookOutcome:
        """
        Process one webhook delivery.
        
        Raises:
            MalformedWebhookError: unusable payload
            SQLAlchemyError: store failure; nothing is committed
        """
        notification = parse_notification(payload)
        
        if notification.kind is PaymentEventKind.IGNORED:
            logger.info("Ignoring event", event_name=notification.event)
            increment_webhook_events(notification.event or "unknown", WebhookOutcome.IGNORED.value)
            return WebhookOutcome.IGNORED
        
        try:
            outcome = self._apply(notification, as_utc(now) or utcnow())
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                "Error processing payment notification",
                gateway_payment_id=notification.gateway_payment_id,
                error=str(e)
            )
            raise
        
        increment_webhook_events(notification.kind.value, outcome.value)
        return outcome
    
    def _apply(self, notification: PaymentNotification, now: datetime) -> WebhookOutcome:
        if notification.gateway_status and notification.gateway_status != GATEWAY_STATUS[notification.kind]:
            logger.warning(
                "Event kind and object status disagree",
                event_name=notification.event,
                gateway_status=notification.gateway_status
            )
        
        logger.info(
            "Processing payment",
            gateway_payment_id=notification.gateway_payment_id,
            kind=notification.kind.value,
            user_id=notification.user_id
        )
        
        payment = self._get_or_reconcile(notification, now)
        target = TARGET_STATUS[notification.kind]
        
        result = self.session.execute(
            update(Payment)
            .where(Payment.id == payment.id, Payment.status == PaymentStatus.PENDING.value)
            .values(status=target.value, updated_at=now)
            .execution_options(synchronize_session="evaluate")
        )
        
        if result.rowcount != 1:
            self.session.refresh(payment)
            if payment.status == target.value:
                logger.info(
                    "Payment already processed",
                    gateway_payment_id=notification.gateway_payment_id,
                    status=payment.status
                )
                return WebhookOutcome.DUPLICATE
            logger.warning(
                "Payment already in a different terminal status",
                gateway_payment_id=notification.gateway_payment_id,
                status=payment.status,
                requested=target.value
            )
            return WebhookOutcome.CONFLICT
        
        logger.info("Payment status updated", gateway_payment_id=notification.gateway_payment_id, status=target.value)
        
        if notification.kind is PaymentEventKind.SUCCEEDED:
            self.subscriptions.activate(
                user_id=notification.user_id,
                plan_type=notification.plan_type,
                payment_id=payment.id,
                now=now,
            )
        
        return WebhookOutcome.PROCESSED
    
    def _get_or_reconcile(self, notification: PaymentNotification, now: datetime) -> Payment:
        """Local payment row, inserting one from the notification if missing."""
        statement = select(Payment).where(Payment.yookassa_payment_id == notification.gateway_payment_id)
        payment = self.session.exec(statement).first()
        if payment is not None:
            return payment
        
        logger.warning(
            "No local payment for gateway payment, reconciling from webhook",
            gateway_payment_id=notification.gateway_payment_id,
            user_id=notification.user_id
        )
        payment = Payment(
            user_id=notification.user_id,
            yookassa_payment_id=notification.gateway_payment_id,
            amount=notification.amount or 0,
            status=PaymentStatus.PENDING.value,
            plan_type=notification.plan_type.value,
            promo_code=notification.promo_code,
            created_at=now,
            updated_at=now,
        )
        self.session.add(payment)
        self.session.flush()
        return payment
