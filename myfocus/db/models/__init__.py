from .promo_code import PromoCode, PromoValidationRequest, PromoValidationResponse
from .payment import Payment, CreatePaymentRequest, CreatePaymentResponse
from .subscription import Subscription, SubscriptionRead

__all__ = [
    "PromoCode",
    "PromoValidationRequest",
    "PromoValidationResponse",
    "Payment",
    "CreatePaymentRequest",
    "CreatePaymentResponse",
    "Subscription",
    "SubscriptionRead",
]
