"""
Payment initiation: price a plan, apply an optional promo code, register the
payment with the gateway and record it locally as pending.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from myfocus.core.config import PLAN_PRICES, PaymentStatus, PlanType, plan_display_name, utcnow
from myfocus.core.exceptions import ExternalServiceError, PaymentPersistenceError
from myfocus.core.monitoring import increment_gateway_error, increment_payments_created
from myfocus.core.settings import settings
from myfocus.db.models.payment import Payment
from myfocus.api.services.gateway import GatewayError, GatewayPaymentRequest, PaymentGateway
from myfocus.api.services.promo_codes import PromoCodeService, normalize_code

logger = structlog.get_logger(__name__)


def compute_discount(base_amount: int, discount_percent: int) -> Tuple[int, int]:
    """
    Split a base price into (discount, final).
    
    The discount is rounded half-up to whole currency units.
    """
    discount = (Decimal(base_amount) * Decimal(discount_percent) / Decimal(100)).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    discount_amount = int(discount)
    return discount_amount, base_amount - discount_amount


@dataclass
class PaymentInitiation:
    """What the caller needs to send the user to the gateway."""
    payment_id: str
    confirmation_url: str
    amount: int
    discount_amount: int


class PaymentService:
    """Creates gateway payments for subscription plans."""
    
    def __init__(self, session: Session, gateway: PaymentGateway):
        self.session = session
        self.gateway = gateway
        self.promo_codes = PromoCodeService(session)
    
    def create_payment(
        self,
        user_id: str,
        plan_type: PlanType,
        promo_code: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PaymentInitiation:
        """
        Initiate a subscription payment.
        
        Raises:
            PromoCodeRejected: promo given but invalid; nothing is charged
            ExternalServiceError: gateway refused or was unreachable
            PaymentPersistenceError: gateway accepted but the row was not saved
        """
        plan_type = PlanType(plan_type)
        promo_code = normalize_code(promo_code) or None
        
        logger.info(
            "Creating payment",
            user_id=user_id,
            plan_type=plan_type.value,
            promo_code=promo_code
        )
        
        base_amount = PLAN_PRICES[plan_type]
        discount_amount, final_amount = 0, base_amount
        
        if promo_code:
            validation = self.promo_codes.validate(promo_code, now=now)
            validation.raise_if_rejected()
            discount_amount, final_amount = compute_discount(base_amount, validation.discount_percent)
            self.promo_codes.consume(validation.promo)
        
        request = GatewayPaymentRequest(
            amount=final_amount,
            currency=settings.payment_currency,
            return_url=settings.effective_return_url,
            description=f"Подписка на {plan_display_name(plan_type)}",
            metadata={
                "user_id": user_id,
                "plan_type": plan_type.value,
                "promo_code": promo_code,
            },
            idempotence_key=str(uuid.uuid4()),
        )
        
        try:
            gateway_payment = self.gateway.create_payment(request)
        except GatewayError as e:
            increment_gateway_error("create_payment")
            logger.error(
                "Gateway payment creation failed",
                user_id=user_id,
                plan_type=plan_type.value,
                promo_code=promo_code,
                error=e.message
            )
            raise ExternalServiceError(self.gateway.name, e.message) from e
        
        payment = Payment(
            user_id=user_id,
            yookassa_payment_id=gateway_payment.id,
            amount=final_amount,
            currency=settings.payment_currency,
            status=PaymentStatus.PENDING.value,
            plan_type=plan_type.value,
            promo_code=promo_code,
            discount_amount=discount_amount,
            confirmation_url=gateway_payment.confirmation_url,
        )
        
        try:
            self.session.add(payment)
            self.session.commit()
            self.session.refresh(payment)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                "Error saving payment",
                user_id=user_id,
                gateway_payment_id=gateway_payment.id,
                error=str(e)
            )
            raise PaymentPersistenceError(gateway_payment.id) from e
        
        increment_payments_created(plan_type.value, with_promo=promo_code is not None)
        logger.info(
            "Payment saved to database",
            payment_id=payment.id,
            gateway_payment_id=gateway_payment.id,
            amount=final_amount,
            discount_amount=discount_amount
        )
        
        return PaymentInitiation(
            payment_id=payment.id,
            confirmation_url=gateway_payment.confirmation_url,
            amount=final_amount,
            discount_amount=discount_amount,
        )
