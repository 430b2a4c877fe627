"""
Services package for business logic components.
"""

from .promo_codes import PromoCodeService, PromoValidation, PromoRejection
from .gateway import PaymentGateway, YooKassaGateway, get_payment_gateway
from .payments import PaymentService, PaymentInitiation, compute_discount
from .subscriptions import SubscriptionService
from .webhooks import WebhookService, WebhookOutcome, PaymentEventKind, parse_notification

__all__ = [
    "PromoCodeService",
    "PromoValidation",
    "PromoRejection",
    "PaymentGateway",
    "YooKassaGateway",
    "get_payment_gateway",
    "PaymentService",
    "PaymentInitiation",
    "compute_discount",
    "SubscriptionService",
    "WebhookService",
    "WebhookOutcome",
    "PaymentEventKind",
    "parse_notification",
]
