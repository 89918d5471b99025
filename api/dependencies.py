# api/dependencies.py
from fastapi import Depends, Request, HTTPException, status
from db.engine import SessionLocal
from sqlalchemy.orm import Session
from db.models.user import User
from db.repositories.user_repository import UserRepository
from db.repositories.preference_repository import PreferenceRepository
from api.services.user_service import UserService, UserServiceException
from api.services.subscription_service import SubscriptionService
from api.services.dismissal_store import PreferenceStore
from api.services.role_service import RoleProfile


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user_repository(db: Session = Depends(get_db)):
    return UserRepository(db)


def get_preference_repository(db: Session = Depends(get_db)):
    return PreferenceRepository(db)


def get_user_service(user_repo: UserRepository = Depends(get_user_repository)):
    return UserService(user_repo)


def get_subscription_service(user_repo: UserRepository = Depends(get_user_repository)):
    return SubscriptionService(user_repo)


async def get_current_user(
    request: Request,
    user_service: UserService = Depends(get_user_service),
):
    try:
        return await user_service.get_current_user_from_request(request)
    except UserServiceException as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


def get_preference_store(
    current_user: User = Depends(get_current_user),
    preference_repo: PreferenceRepository = Depends(get_preference_repository),
):
    return PreferenceStore(preference_repo, current_user.id)


def get_role_profile(current_user: User = Depends(get_current_user)):
    return RoleProfile.for_user(current_user)


async def require_admin(current_user: User = Depends(get_current_user)):
    """Dependency to ensure user is a system or client admin"""
    if not RoleProfile.for_user(current_user).can_access_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required",
        )
    return current_user

