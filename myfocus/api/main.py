"""
FastAPI application setup with monitoring, rate limiting and error handling.
"""
import time

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from myfocus.core.settings import settings
from myfocus.core.logging import configure_logging
from myfocus.core.rate_limit import limiter
from myfocus.core.exceptions import (
    MyFocusException,
    myfocus_exception_handler,
    general_exception_handler,
)
from myfocus.core.monitoring import (
    init_sentry,
    metrics,
    increment_http_requests,
    observe_http_request_duration,
)
from myfocus.core.monitoring.health_checks import basic_health_check, readiness_check
from myfocus.db.session import create_db_and_tables

configure_logging(settings.log_level)
logger = structlog.get_logger()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    
    app = FastAPI(
        title="MyFocus API",
        description="Habit subscriptions: promo codes, payments and gateway webhooks",
        version=settings.app_version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    
    setup_middleware(app)
    setup_monitoring(app)
    setup_exception_handlers(app)
    setup_routers(app)
    setup_event_handlers(app)
    
    return app


def setup_middleware(app: FastAPI):
    """Setup CORS for the web client."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
        max_age=3600 if settings.is_production else 600,
    )


def setup_monitoring(app: FastAPI):
    """Setup Sentry and request metrics."""
    
    init_sentry()
    
    if not settings.enable_metrics:
        return
    
    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        
        route = request.scope.get("route")
        endpoint = getattr(route, "path", "unmatched")
        increment_http_requests(request.method, endpoint, str(response.status_code))
        observe_http_request_duration(request.method, endpoint, time.time() - start_time)
        
        return response
    
    @app.get("/metrics", include_in_schema=False)
    async def get_metrics():
        """Expose Prometheus metrics."""
        return metrics.get_metrics_response()


def setup_exception_handlers(app: FastAPI):
    """Setup exception handlers."""
    
    app.add_exception_handler(MyFocusException, myfocus_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed input is a 400 with the offending fields."""
        logger.warning(
            "Validation error",
            path=request.url.path,
            method=request.method,
            errors=str(exc.errors())
        )
        return JSONResponse(
            status_code=400,
            content={
                "error": "Input validation failed",
                "type": "ValidationError",
                "details": {"errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()
                ]},
            }
        )


def setup_routers(app: FastAPI):
    """Mount the function-style routes and the REST API."""
    
    from myfocus.api.routers import payments, promo_codes, subscriptions, webhooks
    
    app.include_router(promo_codes.router, prefix="/functions/v1")
    app.include_router(payments.router, prefix="/functions/v1")
    app.include_router(webhooks.router, prefix="/functions/v1")
    app.include_router(subscriptions.router, prefix="/api/v1")
    
    @app.get("/healthz")
    async def health_check():
        """Basic health check endpoint."""
        return await basic_health_check()
    
    @app.get("/readyz")
    async def readiness_check_endpoint():
        """Readiness check with database verification."""
        result = await readiness_check()
        status_code = 200 if result["status"] == "ready" else 503
        return JSONResponse(status_code=status_code, content=result)


def setup_event_handlers(app: FastAPI):
    """Setup application event handlers."""
    
    @app.on_event("startup")
    async def startup_event():
        logger.info("MyFocus API starting up", environment=settings.environment)
        for issue in settings.validate_production_config():
            logger.warning("Production configuration issue", issue=issue)
        create_db_and_tables()
        logger.info("MyFocus API started successfully")
    
    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("MyFocus API shutting down")


app = create_application()
