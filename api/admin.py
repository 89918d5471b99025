# api/admin.py
from fastapi import APIRouter, Depends, HTTPException, status
from api.dependencies import require_admin, get_user_repository, get_subscription_service
from api.models import (
    AdminUserResponse,
    UserResponse,
    RoleUpdate,
    ActiveUpdate,
    SubscriptionActivate,
    SubscriptionResponse,
)
from api.services.role_service import resolve_user_kind, is_system_admin, legacy_admin_username
from api.services.subscription_service import SubscriptionService, SubscriptionServiceException
from api.subscription import subscription_view
from db.models.user import User, ROLE_ADMIN
from db.repositories.user_repository import UserRepository
import logging

router = APIRouter(prefix="/admin")
logger = logging.getLogger(__name__)


def _admin_view(user: User) -> dict:
    view = UserResponse.model_validate(user).model_dump()
    view["user_kind"] = resolve_user_kind(user).value
    return view


def _get_or_404(user_repo: UserRepository, user_id: int) -> User:
    user = user_repo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _get_managed_user(user_repo: UserRepository, user_id: int, current_user: User) -> User:
    user = _get_or_404(user_repo, user_id)
    if is_system_admin(user) and not is_system_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="System administrators can only be managed by a system administrator",
        )
    return user


@router.get("/users", response_model=list[AdminUserResponse])
def list_users(
    current_user: User = Depends(require_admin),
    user_repo: UserRepository = Depends(get_user_repository),
):
    return [_admin_view(user) for user in user_repo.list_users()]


@router.get("/users/{user_id}", response_model=AdminUserResponse)
def get_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    user_repo: UserRepository = Depends(get_user_repository),
):
    return _admin_view(_get_or_404(user_repo, user_id))


@router.patch("/users/{user_id}/role", response_model=AdminUserResponse)
def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    current_user: User = Depends(require_admin),
    user_repo: UserRepository = Depends(get_user_repository),
):
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot change your own admin role",
        )
    target = _get_managed_user(user_repo, user_id, current_user)
    # admin role on the legacy username is the system admin tier
    if (
        payload.role == ROLE_ADMIN
        and target.username == legacy_admin_username()
        and not is_system_admin(current_user)
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a system administrator can grant this role",
        )
    user = user_repo.update_user(user_id, {"role": payload.role})
    logger.info(f"User {current_user.id} set role of user {user_id} to {payload.role}")
    return _admin_view(user)


@router.patch("/users/{user_id}/active", response_model=AdminUserResponse)
def update_user_active(
    user_id: int,
    payload: ActiveUpdate,
    current_user: User = Depends(require_admin),
    user_repo: UserRepository = Depends(get_user_repository),
):
    if user_id == current_user.id and not payload.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot deactivate your own account",
        )
    _get_managed_user(user_repo, user_id, current_user)
    user = user_repo.update_user(user_id, {"is_active": payload.is_active})
    logger.info(f"User {current_user.id} set active={payload.is_active} on user {user_id}")
    return _admin_view(user)


@router.post("/users/{user_id}/subscription", response_model=SubscriptionResponse)
def activate_user_subscription(
    user_id: int,
    payload: SubscriptionActivate,
    current_user: User = Depends(require_admin),
    user_repo: UserRepository = Depends(get_user_repository),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Put a user on a paid plan. Stands in for the payment provider callback,
    so only admin tiers may call it.
    """
    target = _get_managed_user(user_repo, user_id, current_user)
    try:
        user = subscription_service.activate(target, payload.plan, payload.annual)
    except SubscriptionServiceException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    logger.info(f"User {current_user.id} activated {payload.plan} for user {user_id}")
    return subscription_view(user)
