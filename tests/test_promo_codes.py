"""
Tests for promo code validation and consumption.

Tests cover:
- Ordered validation checks and their rejection reasons
- Case-insensitive lookup
- Atomic usage consumption
- The standalone validation endpoint
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from myfocus.api.services.promo_codes import PromoCodeService, PromoRejection
from myfocus.core.exceptions import PromoCodeRejected

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestPromoValidation:
    """Validation runs fixed checks and the first failure wins."""
    
    def test_accepts_usable_code(self, session: Session, make_promo):
        make_promo("SPRING", discount_percent=15)
        
        result = PromoCodeService(session).validate("SPRING", now=NOW)
        
        assert result.valid is True
        assert result.discount_percent == 15
        assert result.reason is None
    
    def test_lookup_is_case_insensitive(self, session: Session, make_promo):
        make_promo("SPRING", discount_percent=15)
        
        result = PromoCodeService(session).validate("  spring ", now=NOW)
        
        assert result.valid is True
    
    @pytest.mark.parametrize("code", ["", None, "   "])
    def test_empty_code_is_required(self, session: Session, code):
        result = PromoCodeService(session).validate(code, now=NOW)
        
        assert result.valid is False
        assert result.reason == PromoRejection.CODE_REQUIRED
    
    def test_unknown_code_not_found(self, session: Session):
        result = PromoCodeService(session).validate("NOPE", now=NOW)
        
        assert result.reason == PromoRejection.NOT_FOUND
        assert result.message == "Промокод не найден"
    
    def test_inactive_code_is_not_found(self, session: Session, make_promo):
        make_promo("OLD", is_active=False)
        
        result = PromoCodeService(session).validate("OLD", now=NOW)
        
        assert result.reason == PromoRejection.NOT_FOUND
    
    def test_not_yet_valid(self, session: Session, make_promo):
        make_promo("FUTURE", valid_from=NOW + timedelta(days=1))
        
        result = PromoCodeService(session).validate("FUTURE", now=NOW)
        
        assert result.reason == PromoRejection.NOT_YET_VALID
    
    def test_expired(self, session: Session, make_promo):
        make_promo("PAST", valid_until=NOW - timedelta(seconds=1))
        
        result = PromoCodeService(session).validate("PAST", now=NOW)
        
        assert result.reason == PromoRejection.EXPIRED
    
    def test_window_bounds_are_inclusive(self, session: Session, make_promo):
        make_promo("EDGE", valid_from=NOW, valid_until=NOW)
        
        assert PromoCodeService(session).validate("EDGE", now=NOW).valid is True
    
    def test_usage_cap_reached(self, session: Session, make_promo):
        """SAVE10 at 20% with 5 of 5 uses taken is exhausted."""
        make_promo("SAVE10", discount_percent=20, max_uses=5, current_uses=5)
        
        result = PromoCodeService(session).validate("SAVE10", now=NOW)
        
        assert result.valid is False
        assert result.reason == PromoRejection.USAGE_CAP_REACHED
        assert result.discount_percent is None
    
    def test_earlier_check_wins(self, session: Session, make_promo):
        """An expired and exhausted code reports expiry, not the cap."""
        make_promo("BOTH", valid_until=NOW - timedelta(days=1), max_uses=1, current_uses=1)
        
        result = PromoCodeService(session).validate("BOTH", now=NOW)
        
        assert result.reason == PromoRejection.EXPIRED
    
    def test_validation_has_no_side_effects(self, session: Session, make_promo):
        promo = make_promo("SPRING", max_uses=3, current_uses=1)
        
        PromoCodeService(session).validate("SPRING", now=NOW)
        session.refresh(promo)
        
        assert promo.current_uses == 1
    
    def test_raise_if_rejected(self, session: Session):
        result = PromoCodeService(session).validate("NOPE", now=NOW)
        
        with pytest.raises(PromoCodeRejected) as exc_info:
            result.raise_if_rejected()
        
        assert exc_info.value.reason == PromoRejection.NOT_FOUND
        assert exc_info.value.status_code == 400


class TestPromoConsumption:
    """Usage is consumed by a single conditional update."""
    
    def test_consume_increments_by_one(self, session: Session, make_promo):
        promo = make_promo("SPRING", max_uses=3, current_uses=1)
        
        PromoCodeService(session).consume(promo)
        
        assert promo.current_uses == 2
    
    def test_consume_unlimited_code(self, session: Session, make_promo):
        promo = make_promo("FOREVER", max_uses=None, current_uses=41)
        
        PromoCodeService(session).consume(promo)
        
        assert promo.current_uses == 42
    
    def test_consume_refuses_past_cap(self, session: Session, make_promo):
        """A redemption that lost the race to the last use is rejected."""
        promo = make_promo("LAST", max_uses=1, current_uses=0)
        service = PromoCodeService(session)
        
        service.consume(promo)
        with pytest.raises(PromoCodeRejected) as exc_info:
            service.consume(promo)
        
        session.refresh(promo)
        assert promo.current_uses == 1
        assert exc_info.value.reason == PromoRejection.USAGE_CAP_REACHED


class TestValidatePromoCodeEndpoint:
    """POST /functions/v1/validate-promo-code"""
    
    url = "/functions/v1/validate-promo-code"
    
    def test_valid_code(self, client: TestClient, auth_headers: dict, make_promo):
        make_promo("SPRING", discount_percent=15)
        
        response = client.post(self.url, json={"code": "spring"}, headers=auth_headers)
        
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert "error" not in data
        assert data["discountPercent"] == 15
    
    def test_rejection_is_graceful(self, client: TestClient, auth_headers: dict, make_promo):
        make_promo("SAVE10", max_uses=5, current_uses=5)
        
        response = client.post(self.url, json={"code": "SAVE10"}, headers=auth_headers)
        
        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "error": "Промокод использован максимальное количество раз",
        }
    
    def test_missing_code_is_bad_request(self, client: TestClient, auth_headers: dict):
        response = client.post(self.url, json={}, headers=auth_headers)
        
        assert response.status_code == 400
        assert response.json() == {"valid": False, "error": "Промокод не указан"}
    
    def test_requires_authentication(self, client: TestClient):
        response = client.post(self.url, json={"code": "SPRING"})
        
        assert response.status_code == 401
