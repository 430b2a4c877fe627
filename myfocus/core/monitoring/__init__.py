"""
Monitoring and observability package for MyFocus.
"""

from .sentry_config import init_sentry
from .prometheus_metrics import (
    metrics,
    increment_http_requests,
    observe_http_request_duration,
    increment_payments_created,
    increment_gateway_error,
    increment_promo_rejection,
    increment_webhook_events,
)

__all__ = [
    "init_sentry",
    "metrics",
    "increment_http_requests",
    "observe_http_request_duration",
    "increment_payments_created",
    "increment_gateway_error",
    "increment_promo_rejection",
    "increment_webhook_events",
]
