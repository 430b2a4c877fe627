"""
Sentry integration for MyFocus.
Provides exception tracking and performance monitoring.
"""

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
import structlog

from myfocus.core.settings import settings

logger = structlog.get_logger(__name__)


def init_sentry():
    """Initialize Sentry when a DSN is configured."""
    if not settings.sentry_dsn:
        logger.info("Sentry DSN not configured, skipping Sentry initialization")
        return
    
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=settings.app_version,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        attach_stacktrace=True,
        send_default_pii=False,
        integrations=[
            FastApiIntegration(
                failed_request_status_codes={*range(500, 600)},
            ),
            SqlalchemyIntegration(),
        ],
        before_send=_before_send_filter,
    )
    
    logger.info("Sentry initialized", environment=settings.environment)


def _before_send_filter(event, hint):
    """Strip authorization headers before events leave the process."""
    headers = event.get("request", {}).get("headers")
    if isinstance(headers, dict):
        for key in list(headers):
            if key.lower() == "authorization":
                headers[key] = "[Filtered]"
    return event
