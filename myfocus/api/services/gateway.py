"""
Payment gateway integration.

`PaymentGateway` is the contract the payment initiator relies on;
`YooKassaGateway` implements it over the YooKassa v3 REST API.
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
import structlog

from myfocus.core.settings import settings

logger = structlog.get_logger(__name__)


@dataclass
class GatewayPaymentRequest:
    """Payment intent to register with the gateway."""
    amount: int
    currency: str
    return_url: str
    description: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    idempotence_key: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class GatewayPayment:
    """Gateway's view of a created payment."""
    id: str
    status: str
    confirmation_url: str
    raw: Optional[Dict[str, Any]] = None


class GatewayError(Exception):
    """Gateway call failed."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PaymentGateway(ABC):
    """Abstract payment gateway."""
    
    @property
    @abstractmethod
    def name(self) -> str:
        """Gateway name identifier."""
    
    @abstractmethod
    def create_payment(self, request: GatewayPaymentRequest) -> GatewayPayment:
        """
        Register a payment intent.
        
        Raises:
            GatewayError: On any transport or API failure
        """


class YooKassaGateway(PaymentGateway):
    """YooKassa REST client. No retries; one call per request."""
    
    def __init__(
        self,
        shop_id: str,
        secret_key: str,
        api_url: str = "https://api.yookassa.ru/v3",
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ):
        self.shop_id = shop_id
        self.secret_key = secret_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
    
    @property
    def name(self) -> str:
        return "yookassa"
    
    def create_payment(self, request: GatewayPaymentRequest) -> GatewayPayment:
        body = {
            "amount": {
                "value": f"{request.amount:.2f}",
                "currency": request.currency,
            },
            "capture": True,
            "confirmation": {
                "type": "redirect",
                "return_url": request.return_url,
            },
            "description": request.description,
            "metadata": request.metadata,
        }
        
        try:
            response = self.http.post(
                f"{self.api_url}/payments",
                json=body,
                auth=(self.shop_id, self.secret_key),
                headers={"Idempotence-Key": request.idempotence_key},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("YooKassa request failed", error=str(e))
            raise GatewayError(str(e)) from e
        
        if not response.ok:
            logger.error(
                "YooKassa error",
                status_code=response.status_code,
                response=response.text[:500]
            )
            raise GatewayError("Failed to create payment in YooKassa", response.status_code)
        
        try:
            data = response.json()
            payment = GatewayPayment(
                id=data["id"],
                status=data.get("status", "pending"),
                confirmation_url=data["confirmation"]["confirmation_url"],
                raw=data,
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Unexpected YooKassa response", error=str(e))
            raise GatewayError("Unexpected response from YooKassa") from e
        
        logger.info("YooKassa payment created", gateway_payment_id=payment.id)
        return payment


def get_payment_gateway() -> PaymentGateway:
    """Dependency returning the configured gateway."""
    return YooKassaGateway(
        shop_id=settings.yookassa_shop_id,
        secret_key=settings.yookassa_secret_key,
        api_url=settings.yookassa_api_url,
        timeout=settings.yookassa_timeout_seconds,
    )
