from fastapi import APIRouter, Depends, HTTPException, Query
from api.dependencies import get_current_user, get_preference_store, get_role_profile
from api.models import (
    OnboardingStatusResponse,
    TrialStateResponse,
    UpgradeBannerResponse,
    TrialBannerResponse,
    OnboardingProgressResponse,
    ProfileResponse,
)
from api.services.banner_service import UpgradeBanner, TrialBanner
from api.services.dismissal_store import PreferenceStore
from api.services.onboarding_service import OnboardingProgress
from api.services.role_service import RoleProfile
from api.services.trial_service import resolve_trial_state, onboarding_status
from db.models.user import User

router = APIRouter()


@router.get("/user/onboarding/status", response_model=OnboardingStatusResponse)
def get_onboarding_status(current_user: User = Depends(get_current_user)):
    return onboarding_status(current_user)


@router.get("/user/trial", response_model=TrialStateResponse)
def get_trial_state(current_user: User = Depends(get_current_user)):
    return resolve_trial_state(current_user).to_dict()


@router.get("/user/trial-banner", response_model=TrialBannerResponse)
def get_trial_banner(
    variant: str = Query("default"),
    current_user: User = Depends(get_current_user),
):
    try:
        banner = TrialBanner(resolve_trial_state(current_user), variant=variant)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return banner.to_dict()


@router.get("/user/upgrade-banner", response_model=UpgradeBannerResponse)
def get_upgrade_banner(
    current_user: User = Depends(get_current_user),
    store: PreferenceStore = Depends(get_preference_store),
):
    return UpgradeBanner(resolve_trial_state(current_user), store).to_dict()


@router.post("/user/upgrade-banner/dismiss", response_model=UpgradeBannerResponse)
def dismiss_upgrade_banner(
    current_user: User = Depends(get_current_user),
    store: PreferenceStore = Depends(get_preference_store),
):
    banner = UpgradeBanner(resolve_trial_state(current_user), store)
    banner.dismiss()
    return banner.to_dict()


@router.get("/user/onboarding", response_model=OnboardingProgressResponse)
def get_onboarding_progress(
    current_user: User = Depends(get_current_user),
    store: PreferenceStore = Depends(get_preference_store),
):
    return OnboardingProgress(store, current_user.id).to_dict()


@router.post("/user/onboarding/{action}", response_model=OnboardingProgressResponse)
def update_onboarding_progress(
    action: str,
    current_user: User = Depends(get_current_user),
    store: PreferenceStore = Depends(get_preference_store),
):
    progress = OnboardingProgress(store, current_user.id)
    actions = {
        "complete": progress.complete,
        "skip": progress.skip,
        "reset": progress.reset,
    }
    if action not in actions:
        raise HTTPException(status_code=404, detail=f"Unknown onboarding action: {action}")
    actions[action]()
    return progress.to_dict()


@router.get("/permissions", response_model=dict[str, bool])
def get_permissions(profile: RoleProfile = Depends(get_role_profile)):
    return profile.permissions


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    current_user: User = Depends(get_current_user),
    profile: RoleProfile = Depends(get_role_profile),
):
    return {"user": current_user, "role": profile.to_dict()}
