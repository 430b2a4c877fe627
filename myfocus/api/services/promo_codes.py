"""
Promo code validation and usage consumption.

Validation runs the checks in a fixed order and stops at the first failure.
It is read-only and is used both as a standalone pre-check and again by the
payment initiator right before charging.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import or_, update
from sqlmodel import Session, select

from myfocus.core.config import as_utc, utcnow
from myfocus.core.exceptions import PromoCodeRejected
from myfocus.core.monitoring import increment_promo_rejection
from myfocus.db.models.promo_code import PromoCode

logger = structlog.get_logger(__name__)


class PromoRejection:
    """Rejection reasons, in the order the checks run."""
    CODE_REQUIRED = "code_required"
    NOT_FOUND = "not_found"
    NOT_YET_VALID = "not_yet_valid"
    EXPIRED = "expired"
    USAGE_CAP_REACHED = "usage_cap_reached"


REJECTION_MESSAGES = {
    PromoRejection.CODE_REQUIRED: "Промокод не указан",
    PromoRejection.NOT_FOUND: "Промокод не найден",
    PromoRejection.NOT_YET_VALID: "Промокод еще не действителен",
    PromoRejection.EXPIRED: "Промокод просрочен",
    PromoRejection.USAGE_CAP_REACHED: "Промокод использован максимальное количество раз",
}


@dataclass
class PromoValidation:
    """Outcome of a promo check. `promo` is set only when accepted."""
    valid: bool
    discount_percent: Optional[int] = None
    reason: Optional[str] = None
    promo: Optional[PromoCode] = None
    
    @property
    def message(self) -> Optional[str]:
        return REJECTION_MESSAGES.get(self.reason) if self.reason else None
    
    def raise_if_rejected(self) -> None:
        if not self.valid:
            raise PromoCodeRejected(self.reason, self.message)


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class PromoCodeService:
    """Reads and consumes promo codes."""
    
    def __init__(self, session: Session):
        self.session = session
    
    def get_active(self, code: str) -> Optional[PromoCode]:
        statement = select(PromoCode).where(
            PromoCode.code == normalize_code(code),
            PromoCode.is_active == True,  # noqa: E712
        )
        return self.session.exec(statement).first()
    
    def validate(self, code: Optional[str], now: Optional[datetime] = None) -> PromoValidation:
        """Check a code; first failing check wins."""
        now = as_utc(now) or utcnow()
        
        if not normalize_code(code):
            return self._reject(code, PromoRejection.CODE_REQUIRED)
        
        promo = self.get_active(code)
        if promo is None:
            return self._reject(code, PromoRejection.NOT_FOUND)
        
        if now < as_utc(promo.valid_from):
            return self._reject(code, PromoRejection.NOT_YET_VALID)
        
        if promo.valid_until is not None and now > as_utc(promo.valid_until):
            return self._reject(code, PromoRejection.EXPIRED)
        
        if not promo.has_uses_left():
            return self._reject(code, PromoRejection.USAGE_CAP_REACHED)
        
        logger.info(
            "Promo code accepted",
            promo_code=promo.code,
            discount_percent=promo.discount_percent
        )
        return PromoValidation(valid=True, discount_percent=promo.discount_percent, promo=promo)
    
    def consume(self, promo: PromoCode) -> None:
        """
        Use up one redemption of an accepted code.
        
        Single conditional UPDATE so two concurrent redemptions of a near-cap
        code cannot both pass. Commits immediately: the use is kept even if
        the gateway call that follows fails.
        
        Raises:
            PromoCodeRejected: cap was reached between validation and use
        """
        statement = (
            update(PromoCode)
            .where(
                PromoCode.id == promo.id,
                or_(PromoCode.max_uses.is_(None), PromoCode.current_uses < PromoCode.max_uses),
            )
            .values(current_uses=PromoCode.current_uses + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        
        if result.rowcount != 1:
            logger.warning("Promo code cap reached at consumption", promo_code=promo.code)
            increment_promo_rejection(PromoRejection.USAGE_CAP_REACHED)
            raise PromoCodeRejected(
                PromoRejection.USAGE_CAP_REACHED,
                REJECTION_MESSAGES[PromoRejection.USAGE_CAP_REACHED]
            )
        
        self.session.refresh(promo)
        logger.info("Promo code consumed", promo_code=promo.code, current_uses=promo.current_uses)
    
    def _reject(self, code: Optional[str], reason: str) -> PromoValidation:
        logger.info("Promo code rejected", promo_code=normalize_code(code), reason=reason)
        increment_promo_rejection(reason)
        return PromoValidation(valid=False, reason=reason)
