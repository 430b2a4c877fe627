"""
Subscription payment initiation.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from myfocus.api.services.gateway import PaymentGateway, get_payment_gateway
from myfocus.api.services.payments import PaymentService
from myfocus.core.security import SupabaseUser, get_current_active_user
from myfocus.db.models.payment import CreatePaymentRequest, CreatePaymentResponse
from myfocus.db.session import get_session

router = APIRouter(tags=["payments"])


@router.post("/create-payment", response_model=CreatePaymentResponse)
async def create_payment(
    body: CreatePaymentRequest,
    current_user: SupabaseUser = Depends(get_current_active_user),
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Price the plan, apply the promo code and return the gateway redirect URL.
    
    Promo rejections come back as 400 with the reason; gateway and store
    failures as 500.
    """
    result = PaymentService(session, gateway).create_payment(
        user_id=current_user.id,
        plan_type=body.planType,
        promo_code=body.promoCode,
    )
    
    return CreatePaymentResponse(
        paymentId=result.payment_id,
        confirmationUrl=result.confirmation_url,
        amount=result.amount,
        discountAmount=result.discount_amount,
    )
