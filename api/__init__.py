from fastapi import APIRouter
from .auth import router as auth_router
from .users import router as users_router
from .subscription import router as subscription_router
from .admin import router as admin_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(subscription_router)
router.include_router(admin_router)
