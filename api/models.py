from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, constr
from datetime import datetime
from typing import Literal, Optional
import re


def _strip_tags(value):
    if value:
        return re.sub(r'<[^>]+>', '', value).strip()
    return value


class UserCreate(BaseModel):
    email: EmailStr
    username: constr(min_length=3, max_length=50, strip_whitespace=True)  # type: ignore
    password: constr(min_length=8, max_length=100)  # type: ignore
    full_name: Optional[constr(max_length=200, strip_whitespace=True)] = None  # type: ignore

    @field_validator("username")
    @classmethod
    def validate_username(cls, username):
        if not re.fullmatch(r"[A-Za-z0-9_.-]+", username):
            raise ValueError("Username may only contain letters, digits, '.', '_' and '-'")
        return username

    @field_validator("full_name")
    @classmethod
    def sanitize_full_name(cls, full_name):
        return _strip_tags(full_name)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str
    role: str
    plan: str
    subscription_status: Optional[str]
    trial_ends_at: Optional[datetime]
    subscription_ends_at: Optional[datetime]
    is_active: bool


class LoginResponse(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse


class TrialStatus(BaseModel):
    active: bool
    days_remaining: int = Field(alias="daysRemaining")


class OnboardingStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    trial_status: TrialStatus = Field(alias="trialStatus")
    plan: str
    subscription_status: Optional[str] = Field(alias="subscriptionStatus")


class TrialStateResponse(BaseModel):
    is_trial: bool
    days_left: int
    is_expired: bool
    trial_end_date: Optional[datetime]
    upgrade_url: str


class UpgradeBannerResponse(BaseModel):
    visible: bool
    dismissed: bool
    urgent: bool
    tone: str
    days_left: int
    progress_percent: Optional[float]
    message: str
    upgrade_url: str


class TrialBannerResponse(BaseModel):
    visible: bool
    expired: bool
    urgent: bool
    tone: str
    variant: str
    message: Optional[str]
    upgrade_url: str


class OnboardingProgressResponse(BaseModel):
    is_completed: bool
    is_skipped: bool
    should_show: bool
    step: int


class RoleProfileResponse(BaseModel):
    kind: str
    description: str
    can_access_admin: bool
    permissions: dict[str, bool]


class ProfileResponse(BaseModel):
    user: UserResponse
    role: RoleProfileResponse


class SubscriptionResponse(BaseModel):
    plan: str
    subscription_status: Optional[str]
    trial_ends_at: Optional[datetime]
    subscription_ends_at: Optional[datetime]
    has_valid_subscription: bool


class TrialStart(BaseModel):
    plan: str = "Pro"


class SubscriptionActivate(BaseModel):
    plan: str
    annual: bool = False


class RoleUpdate(BaseModel):
    role: Literal["admin", "staff", "location_manager", "user"]


class ActiveUpdate(BaseModel):
    is_active: bool


class AdminUserResponse(UserResponse):
    user_kind: str
