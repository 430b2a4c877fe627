"""
Prometheus metrics for MyFocus.
Tracks HTTP traffic, payment initiation, promo code checks and webhook events.
"""

from prometheus_client import Counter, Histogram, CollectorRegistry, CONTENT_TYPE_LATEST, generate_latest
from fastapi import Response
import structlog

logger = structlog.get_logger(__name__)

# Create custom registry for our metrics
registry = CollectorRegistry()

# HTTP Metrics
http_requests_total = Counter(
    'myfocus_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=registry
)

http_request_duration = Histogram(
    'myfocus_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float('inf')],
    registry=registry
)

# Payment Metrics
payments_created_total = Counter(
    'myfocus_payments_created_total',
    'Payments registered with the gateway',
    ['plan_type', 'with_promo'],
    registry=registry
)

gateway_errors_total = Counter(
    'myfocus_gateway_errors_total',
    'Payment gateway call failures',
    ['operation'],
    registry=registry
)

promo_rejections_total = Counter(
    'myfocus_promo_rejections_total',
    'Promo code validation rejections',
    ['reason'],
    registry=registry
)

# Webhook Metrics
webhook_events_total = Counter(
    'myfocus_webhook_events_total',
    'Gateway webhook events received',
    ['event_kind', 'outcome'],
    registry=registry
)


class MetricsCollector:
    """Exposes the metrics registry over HTTP."""
    
    def get_metrics_response(self) -> Response:
        """Render all registered metrics in the Prometheus text format."""
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


metrics = MetricsCollector()


def increment_http_requests(method: str, endpoint: str, status_code: str):
    http_requests_total.labels(method=method, endpoint=endpoint, status_code=status_code).inc()


def observe_http_request_duration(method: str, endpoint: str, duration: float):
    http_request_duration.labels(method=method, endpoint=endpoint).observe(duration)


def increment_payments_created(plan_type: str, with_promo: bool):
    payments_created_total.labels(plan_type=plan_type, with_promo=str(with_promo).lower()).inc()


def increment_gateway_error(operation: str):
    gateway_errors_total.labels(operation=operation).inc()


def increment_promo_rejection(reason: str):
    promo_rejections_total.labels(reason=reason).inc()


def increment_webhook_events(event_kind: str, outcome: str):
    webhook_events_total.labels(event_kind=event_kind, outcome=outcome).inc()
