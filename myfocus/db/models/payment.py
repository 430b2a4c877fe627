"""
Payment model for gateway-backed subscription purchases.

A row is written in `pending` status when the gateway accepts a payment
intent and moves to a terminal status exactly once, driven by the gateway
webhook and keyed by the gateway payment id.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid

from myfocus.core.config import PaymentStatus, PlanType, utcnow


class Payment(SQLModel, table=True):
    """Local record of a payment registered with the gateway."""
    __tablename__ = "payments"
    
    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True
    )
    
    user_id: str = Field(index=True)
    
    yookassa_payment_id: str = Field(
        unique=True,
        index=True,
        description="Payment id assigned by the gateway"
    )
    
    amount: int = Field(description="Final charged amount in currency units")
    
    currency: str = Field(default="RUB")
    
    status: str = Field(default=PaymentStatus.PENDING.value, index=True)
    
    plan_type: str
    
    promo_code: Optional[str] = Field(default=None)
    
    discount_amount: int = Field(default=0)
    
    confirmation_url: Optional[str] = Field(default=None)
    
    created_at: datetime = Field(default_factory=utcnow)
    
    updated_at: datetime = Field(default_factory=utcnow)


class CreatePaymentRequest(SQLModel):
    """Body of the payment initiation call."""
    planType: PlanType
    promoCode: Optional[str] = None


class CreatePaymentResponse(SQLModel):
    """Result of a successful payment initiation."""
    paymentId: str
    confirmationUrl: str
    amount: int
    discountAmount: int
