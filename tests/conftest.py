"""
Shared fixtures: in-memory database, mock gateway, authenticated client.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so the environment comes first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-supabase-jwt-secret-0123456789")
os.environ.setdefault("YOOKASSA_SHOP_ID", "test-shop")
os.environ.setdefault("YOOKASSA_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENABLE_RATE_LIMITING", "false")
os.environ.setdefault("ENVIRONMENT", "testing")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

import myfocus.db.models  # noqa: F401  registers tables
from myfocus.api.main import app
from myfocus.api.services.gateway import get_payment_gateway
from myfocus.core.settings import settings
from myfocus.db.models.promo_code import PromoCode
from myfocus.db.session import get_session
from tests.mocks.gateway import MockPaymentGateway

TEST_USER_ID = "8d0f6b1e-3c7a-4b8e-9f0a-1a2b3c4d5e6f"


@pytest.fixture(name="engine")
def engine_fixture():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def mock_gateway():
    return MockPaymentGateway()


@pytest.fixture
def client(session, mock_gateway):
    """Test client wired to the test session and the mock gateway."""
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_payment_gateway] = lambda: mock_gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(user_id: str = TEST_USER_ID, email: str = "user@example.com", **claims) -> str:
    payload = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.supabase_jwt_secret, algorithm="HS256")


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def user_id():
    return TEST_USER_ID


@pytest.fixture
def make_promo(session):
    """Factory for promo codes that are usable unless told otherwise."""
    def _make(code="SAVE10", discount_percent=20, **overrides):
        fields = {
            "code": code.upper(),
            "discount_percent": discount_percent,
            "is_active": True,
            "valid_from": datetime(2020, 1, 1, tzinfo=timezone.utc),
            "valid_until": None,
            "max_uses": None,
            "current_uses": 0,
        }
        fields.update(overrides)
        promo = PromoCode(**fields)
        session.add(promo)
        session.commit()
        session.refresh(promo)
        return promo
    return _make


def gateway_event(event: str, gateway_payment_id: str = None, status: str = None,
                  user_id: str = TEST_USER_ID, plan_type: str = "1_year", amount: str = None) -> dict:
    """Build a YooKassa notification envelope."""
    obj = {
        "id": gateway_payment_id or f"2d{uuid.uuid4().hex[:14]}",
        "status": status or ("succeeded" if event == "payment.succeeded" else "canceled"),
        "metadata": {"user_id": user_id, "plan_type": plan_type},
    }
    if amount is not None:
        obj["amount"] = {"value": amount, "currency": "RUB"}
    return {"type": "notification", "event": event, "object": obj}
