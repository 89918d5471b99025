from fastapi import APIRouter, Depends, HTTPException
from api.dependencies import get_current_user, get_subscription_service
from api.models import SubscriptionResponse, TrialStart
from api.services.subscription_service import SubscriptionService, SubscriptionServiceException
from db.models.user import User

router = APIRouter(prefix="/subscription")


def subscription_view(user: User) -> dict:
    return {
        "plan": user.plan,
        "subscription_status": user.subscription_status,
        "trial_ends_at": user.trial_ends_at,
        "subscription_ends_at": user.subscription_ends_at,
        "has_valid_subscription": SubscriptionService.has_valid_subscription(user),
    }


@router.get("", response_model=SubscriptionResponse)
def get_subscription(current_user: User = Depends(get_current_user)):
    return subscription_view(current_user)


@router.post("/trial", response_model=SubscriptionResponse)
def start_trial(
    payload: TrialStart,
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    try:
        user = subscription_service.start_trial(current_user, payload.plan)
    except SubscriptionServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
    return subscription_view(user)


@router.post("/cancel", response_model=SubscriptionResponse)
def cancel_subscription(
    current_user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    try:
        user = subscription_service.cancel(current_user)
    except SubscriptionServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
    return subscription_view(user)
