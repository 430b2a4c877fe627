"""
Promo code pre-check, so the user sees the discount before paying.
"""
import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session

from myfocus.api.services.promo_codes import PromoCodeService, PromoRejection
from myfocus.core.rate_limit import limiter
from myfocus.core.security import SupabaseUser, get_current_active_user
from myfocus.core.settings import settings
from myfocus.db.models.promo_code import PromoValidationRequest, PromoValidationResponse
from myfocus.db.session import get_session

router = APIRouter(tags=["promo-codes"])
logger = structlog.get_logger(__name__)


@router.post("/validate-promo-code", response_model=PromoValidationResponse, response_model_exclude_none=True)
@limiter.limit(settings.promo_validation_rate_limit)
async def validate_promo_code(
    request: Request,
    body: PromoValidationRequest,
    current_user: SupabaseUser = Depends(get_current_active_user),
    session: Session = Depends(get_session),
):
    """
    Check a promo code without consuming it.
    
    Rejections are reported with 200 and `valid: false`; only a missing
    code is a 400.
    """
    try:
        result = PromoCodeService(session).validate(body.code)
    except Exception as e:
        logger.error("Error in validate-promo-code", user_id=current_user.id, error=str(e))
        return JSONResponse(status_code=500, content={"valid": False, "error": "Internal server error"})
    
    if result.valid:
        return PromoValidationResponse(valid=True, discountPercent=result.discount_percent)
    
    status_code = 400 if result.reason == PromoRejection.CODE_REQUIRED else 200
    return JSONResponse(
        status_code=status_code,
        content={"valid": False, "error": result.message},
    )
