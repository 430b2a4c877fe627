"""
Subscription status for the signed-in user.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from myfocus.api.services.subscriptions import SubscriptionService
from myfocus.core.security import SupabaseUser, get_current_active_user
from myfocus.db.models.subscription import SubscriptionRead
from myfocus.db.session import get_session

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.get("/current", response_model=SubscriptionRead)
async def get_current_subscription(
    current_user: SupabaseUser = Depends(get_current_active_user),
    session: Session = Depends(get_session),
):
    """Latest trial or active subscription, or an empty body if none."""
    service = SubscriptionService(session)
    return service.to_read(service.get_current(current_user.id))


@router.post("/trial", response_model=SubscriptionRead)
async def start_trial(
    current_user: SupabaseUser = Depends(get_current_active_user),
    session: Session = Depends(get_session),
):
    """Start a trial for a user without a live subscription."""
    service = SubscriptionService(session)
    return service.to_read(service.start_trial(current_user.id))
