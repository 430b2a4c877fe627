"""
Custom exception classes and error handling utilities.
"""
from typing import Optional, Dict, Any
from fastapi import Request, status
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class MyFocusException(Exception):
    """Base exception class for MyFocus application."""
    
    def __init__(
        self, 
        message: str, 
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(MyFocusException):
    """Authentication related errors."""
    
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class ValidationError(MyFocusException):
    """Missing or malformed input."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class PromoCodeRejected(MyFocusException):
    """Promo code failed one of the validation checks."""
    
    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"reason": reason}
        )


class StepNotAvailableError(MyFocusException):
    """Micro-step toggled before its day has come."""
    
    def __init__(self, day: int, days_since_start: int):
        self.day = day
        self.days_since_start = days_since_start
        super().__init__(
            message="Этот шаг станет доступен позже. Сосредоточься на сегодняшнем!",
            status_code=status.HTTP_409_CONFLICT,
            details={"day": day, "days_since_start": days_since_start}
        )


class ExternalServiceError(MyFocusException):
    """External service integration errors."""
    
    def __init__(self, service: str, message: str):
        super().__init__(
            message=f"{service} service error: {message}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"service": service}
        )


class PaymentPersistenceError(MyFocusException):
    """Gateway accepted the payment but the local record could not be written."""
    
    def __init__(self, gateway_payment_id: str):
        super().__init__(
            message="Failed to save payment",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"gateway_payment_id": gateway_payment_id}
        )


class MalformedWebhookError(MyFocusException):
    """Webhook payload cannot be processed; the sender is expected to retry."""
    
    def __init__(self, message: str = "Missing required metadata"):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


# Exception handlers
async def myfocus_exception_handler(request: Request, exc: MyFocusException) -> JSONResponse:
    """Global exception handler for MyFocus exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "type": exc.__class__.__name__,
            "details": exc.details,
        }
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unexpected exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc)
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "type": "InternalServerError",
        }
    )
