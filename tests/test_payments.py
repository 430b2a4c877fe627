"""
Tests for payment initiation.

Tests cover:
- Plan pricing and discount rounding
- Promo re-validation and usage consumption
- Gateway request contents
- Failure modes (promo rejection, gateway failure, store failure)
- The create-payment endpoint
"""

from datetime import timedelta

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from myfocus.api.services.payments import PaymentService, compute_discount
from myfocus.core.config import PlanType, PaymentStatus
from myfocus.core.exceptions import ExternalServiceError, PaymentPersistenceError, PromoCodeRejected
from myfocus.db.models.payment import Payment
from tests.mocks.gateway import MockPaymentGateway


def _payments(session: Session):
    return session.exec(select(Payment)).all()


class TestDiscountComputation:
    
    def test_three_month_plan_with_twenty_percent(self):
        assert compute_discount(750, 20) == (150, 600)
    
    def test_half_rounds_up(self):
        # 750 * 1% = 7.5
        assert compute_discount(750, 1) == (8, 742)
    
    def test_zero_and_full_discount(self):
        assert compute_discount(2200, 0) == (0, 2200)
        assert compute_discount(2200, 100) == (2200, 0)


class TestPaymentService:
    
    def test_plan_without_promo(self, session: Session, mock_gateway: MockPaymentGateway, user_id):
        result = PaymentService(session, mock_gateway).create_payment(user_id, PlanType.SIX_MONTHS)
        
        assert result.amount == 1300
        assert result.discount_amount == 0
        assert result.confirmation_url.startswith("https://yoomoney.ru/")
        
        payment = session.get(Payment, result.payment_id)
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.user_id == user_id
        assert payment.plan_type == "6_months"
        assert payment.amount == 1300
        assert payment.promo_code is None
        assert payment.yookassa_payment_id.startswith("yk-")
        assert payment.created_at.utcoffset() == timedelta(0)
    
    def test_gateway_request_contents(self, session: Session, mock_gateway: MockPaymentGateway, user_id, make_promo):
        make_promo("SAVE20", discount_percent=20)
        
        PaymentService(session, mock_gateway).create_payment(user_id, PlanType.THREE_MONTHS, "save20")
        
        request = mock_gateway.requests[0]
        assert request.amount == 600
        assert request.currency == "RUB"
        assert request.return_url == "https://project.supabase.co/functions/v1/payment-success"
        assert request.description == "Подписка на 3 месяца"
        assert request.metadata == {"user_id": user_id, "plan_type": "3_months", "promo_code": "SAVE20"}
    
    def test_idempotence_key_is_fresh_per_call(self, session: Session, mock_gateway: MockPaymentGateway, user_id):
        service = PaymentService(session, mock_gateway)
        
        service.create_payment(user_id, PlanType.ONE_YEAR)
        service.create_payment(user_id, PlanType.ONE_YEAR)
        
        keys = {request.idempotence_key for request in mock_gateway.requests}
        assert len(keys) == 2
    
    def test_promo_applies_discount_and_consumes_one_use(self, session: Session, mock_gateway, user_id, make_promo):
        promo = make_promo("SAVE20", discount_percent=20, max_uses=10, current_uses=3)
        
        result = PaymentService(session, mock_gateway).create_payment(user_id, PlanType.THREE_MONTHS, "SAVE20")
        
        assert result.amount == 600
        assert result.discount_amount == 150
        session.refresh(promo)
        assert promo.current_uses == 4
        payment = session.get(Payment, result.payment_id)
        assert payment.promo_code == "SAVE20"
        assert payment.discount_amount == 150
    
    def test_rejected_promo_aborts_everything(self, session: Session, mock_gateway, user_id, make_promo):
        promo = make_promo("SAVE10", max_uses=5, current_uses=5)
        
        with pytest.raises(PromoCodeRejected):
            PaymentService(session, mock_gateway).create_payment(user_id, PlanType.THREE_MONTHS, "SAVE10")
        
        assert mock_gateway.requests == []
        assert _payments(session) == []
        session.refresh(promo)
        assert promo.current_uses == 5
    
    def test_gateway_failure_keeps_consumed_promo(self, session: Session, user_id, make_promo):
        """Usage is consumed before the gateway call and is not given back."""
        gateway = MockPaymentGateway(scenario="failure")
        promo = make_promo("SAVE20", max_uses=10, current_uses=0)
        
        with pytest.raises(ExternalServiceError) as exc_info:
            PaymentService(session, gateway).create_payment(user_id, PlanType.ONE_YEAR, "SAVE20")
        
        assert exc_info.value.status_code == 500
        assert _payments(session) == []
        session.refresh(promo)
        assert promo.current_uses == 1
    
    def test_store_failure_after_gateway_success(self, session: Session, user_id):
        gateway = MockPaymentGateway(scenario="fixed_id")
        service = PaymentService(session, gateway)
        service.create_payment(user_id, PlanType.ONE_YEAR)
        
        with pytest.raises(PaymentPersistenceError) as exc_info:
            service.create_payment(user_id, PlanType.ONE_YEAR)
        
        assert exc_info.value.details["gateway_payment_id"] == "fixed-payment-id"
        assert len(_payments(session)) == 1


class TestCreatePaymentEndpoint:
    """POST /functions/v1/create-payment"""
    
    url = "/functions/v1/create-payment"
    
    def test_success_shape(self, client: TestClient, auth_headers: dict, make_promo):
        make_promo("SAVE20", discount_percent=20)
        
        response = client.post(self.url, json={"planType": "3_months", "promoCode": "save20"}, headers=auth_headers)
        
        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"paymentId", "confirmationUrl", "amount", "discountAmount"}
        assert data["amount"] == 600
        assert data["discountAmount"] == 150
    
    def test_promo_rejection_is_400(self, client: TestClient, auth_headers: dict, mock_gateway):
        response = client.post(self.url, json={"planType": "1_year", "promoCode": "NOPE"}, headers=auth_headers)
        
        assert response.status_code == 400
        assert response.json()["error"] == "Промокод не найден"
        assert mock_gateway.requests == []
    
    def test_gateway_failure_is_500(self, client: TestClient, auth_headers: dict, mock_gateway):
        mock_gateway.scenario = "failure"
        
        response = client.post(self.url, json={"planType": "1_year"}, headers=auth_headers)
        
        assert response.status_code == 500
        assert "error" in response.json()
    
    def test_unknown_plan_is_rejected(self, client: TestClient, auth_headers: dict, mock_gateway):
        response = client.post(self.url, json={"planType": "2_weeks"}, headers=auth_headers)
        
        assert response.status_code == 400
        assert mock_gateway.requests == []
    
    def test_requires_authentication(self, client: TestClient):
        response = client.post(self.url, json={"planType": "1_year"})
        
        assert response.status_code == 401
    
    def test_rejects_token_signed_with_other_secret(self, client: TestClient):
        token = jwt.encode({"sub": "someone", "aud": "authenticated"}, "another-secret-0123456789abcdef", algorithm="HS256")
        
        response = client.post(self.url, json={"planType": "1_year"}, headers={"Authorization": f"Bearer {token}"})
        
        assert response.status_code == 401
