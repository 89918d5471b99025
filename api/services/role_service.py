from enum import Enum
from typing import Mapping, Optional
import logging
import os

from db.models.user import (
    User,
    ROLE_SYSTEM_ADMIN,
    ROLE_ADMIN,
    ROLE_STAFF,
    ROLE_LOCATION_MANAGER,
    ROLE_USER,
)

logger = logging.getLogger(__name__)

VALID_ROLES = (ROLE_SYSTEM_ADMIN, ROLE_ADMIN, ROLE_STAFF, ROLE_LOCATION_MANAGER, ROLE_USER)

# Roles assignable through the admin API
ASSIGNABLE_ROLES = (ROLE_ADMIN, ROLE_STAFF, ROLE_LOCATION_MANAGER, ROLE_USER)

# Every role reaches itself and all roles below it
ROLE_HIERARCHY = {
    role: VALID_ROLES[index:] for index, role in enumerate(VALID_ROLES)
}


class UserKind(str, Enum):
    SYSTEM_ADMIN = "system_admin"
    CLIENT_ADMIN = "client_admin"
    STAFF = "staff"
    LOCATION_MANAGER = "location_manager"
    REGULAR_USER = "regular_user"


KIND_DESCRIPTIONS = {
    UserKind.SYSTEM_ADMIN: "System Administrator",
    UserKind.CLIENT_ADMIN: "Administrator",
    UserKind.STAFF: "Staff Member",
    UserKind.LOCATION_MANAGER: "Location Manager",
    UserKind.REGULAR_USER: "User",
}


def legacy_admin_username() -> str:
    return os.getenv("LEGACY_ADMIN_USERNAME", "admin")


def is_system_admin(user: Optional[User]) -> bool:
    if user is None:
        return False
    if user.role == ROLE_SYSTEM_ADMIN:
        return True
    # Accounts created before the system_admin tier existed
    legacy = legacy_admin_username()
    return bool(legacy) and user.role == ROLE_ADMIN and user.username == legacy


def resolve_user_kind(user: Optional[User]) -> UserKind:
    if user is None:
        return UserKind.REGULAR_USER
    if is_system_admin(user):
        return UserKind.SYSTEM_ADMIN
    if user.role == ROLE_ADMIN:
        return UserKind.CLIENT_ADMIN
    if user.role == ROLE_STAFF:
        return UserKind.STAFF
    if user.role == ROLE_LOCATION_MANAGER:
        return UserKind.LOCATION_MANAGER
    return UserKind.REGULAR_USER


def default_permissions() -> dict:
    return {
        "canManageUsers": False,
        "canManageStaff": False,
        "canViewAllLocations": False,
        "canEditSettings": False,
        "canDeleteReviews": False,
        "canManageIntegrations": False,
        "canViewReports": True,
        "canBulkEditReviews": False,
        "isLocationManager": False,
        "canManageAssignedLocations": False,
    }


def effective_role(user: Optional[User]) -> Optional[str]:
    """The hierarchy role of `user`, or None when it is not a known role."""
    if user is None:
        return None
    if is_system_admin(user):
        return ROLE_SYSTEM_ADMIN
    role = user.role or ROLE_USER
    return role if role in ROLE_HIERARCHY else None


def permissions_for(user: Optional[User]) -> dict:
    role = effective_role(user)
    if role is None:
        if user is not None:
            logger.warning(f"Unknown role {user.role!r} for user {user.id}, using default permissions")
        return default_permissions()

    allowed = ROLE_HIERARCHY[role]
    admin = ROLE_ADMIN in allowed
    staff = ROLE_STAFF in allowed
    return {
        "canManageUsers": admin,
        "canManageStaff": admin,
        "canViewAllLocations": admin or staff,
        "canEditSettings": admin or staff,
        "canDeleteReviews": admin,
        "canManageIntegrations": admin or staff,
        "canViewReports": True,
        "canBulkEditReviews": admin or staff,
        "isLocationManager": role == ROLE_LOCATION_MANAGER,
        "canManageAssignedLocations": ROLE_LOCATION_MANAGER in allowed,
    }


class RoleProfile:
    """Role classification of one user plus named-permission lookup."""

    def __init__(self, user: Optional[User], permissions: Optional[Mapping[str, bool]] = None):
        self.user = user
        self.kind = resolve_user_kind(user)
        self.permissions = permissions

    @classmethod
    def for_user(cls, user: Optional[User]) -> "RoleProfile":
        return cls(user, permissions_for(user) if user is not None else None)

    @property
    def is_admin(self) -> bool:
        return self.kind in (UserKind.SYSTEM_ADMIN, UserKind.CLIENT_ADMIN)

    @property
    def is_system_admin(self) -> bool:
        return self.kind == UserKind.SYSTEM_ADMIN

    @property
    def is_client_admin(self) -> bool:
        return self.kind == UserKind.CLIENT_ADMIN

    @property
    def is_staff(self) -> bool:
        return self.kind == UserKind.STAFF

    @property
    def is_location_manager(self) -> bool:
        return self.kind == UserKind.LOCATION_MANAGER

    @property
    def is_regular_user(self) -> bool:
        return self.kind == UserKind.REGULAR_USER

    @property
    def can_access_admin(self) -> bool:
        return self.is_admin

    @property
    def description(self) -> str:
        return KIND_DESCRIPTIONS[self.kind]

    def has_permission(self, name: str) -> bool:
        if not self.permissions:
            return False
        return bool(self.permissions.get(name, False))

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "description": self.description,
            "can_access_admin": self.can_access_admin,
            "permissions": dict(self.permissions or {}),
        }
