from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import os

from db.models.user import (
    User,
    ROLE_ADMIN,
    ROLE_SYSTEM_ADMIN,
    SUBSCRIPTION_ACTIVE,
    SUBSCRIPTION_CANCELED,
    SUBSCRIPTION_TRIAL,
    PLAN_FREE,
)
from db.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

AVAILABLE_PLANS = ("Free", "Basic", "Pro", "Enterprise")
DEFAULT_TRIAL_PLAN = "Pro"


class SubscriptionServiceException(Exception):
    def __init__(self, detail):
        super().__init__(detail)
        self.detail = detail

    def __str__(self):
        return str(self.detail)


def trial_days() -> int:
    try:
        return int(os.getenv("TRIAL_DAYS", "14"))
    except ValueError:
        logger.warning("TRIAL_DAYS is not an integer, using 14")
        return 14


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class SubscriptionService:
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def start_trial(self, user: User, plan: str = DEFAULT_TRIAL_PLAN, now: Optional[datetime] = None) -> User:
        if plan not in AVAILABLE_PLANS or plan == PLAN_FREE:
            raise SubscriptionServiceException(f"Plan {plan} has no trial")
        if user.subscription_status == SUBSCRIPTION_ACTIVE:
            raise SubscriptionServiceException("Subscription is already active")
        if user.trial_ends_at is not None:
            raise SubscriptionServiceException("Trial already used")

        now = _as_naive_utc(now) if now else _utcnow()
        trial_end = now + timedelta(days=trial_days())
        updated = self.user_repo.update_user(
            user.id,
            {
                "plan": plan,
                "subscription_status": SUBSCRIPTION_TRIAL,
                "trial_ends_at": trial_end,
            },
        )
        logger.info(f"Started {plan} trial for user {user.id}, ends {trial_end.isoformat()}")
        return updated

    def activate(
        self,
        user: User,
        plan: str,
        annual: bool = False,
        now: Optional[datetime] = None,
    ) -> User:
        if plan not in AVAILABLE_PLANS:
            raise SubscriptionServiceException(f"Subscription plan not found: {plan}")

        update = {
            "plan": plan,
            "subscription_status": SUBSCRIPTION_ACTIVE,
            "trial_ends_at": None,
            "subscription_ends_at": None,
        }
        if plan != PLAN_FREE:
            now = _as_naive_utc(now) if now else _utcnow()
            update["subscription_ends_at"] = now + timedelta(days=365 if annual else 30)

        updated = self.user_repo.update_user(user.id, update)
        logger.info(f"Activated {plan} subscription for user {user.id} (annual={annual})")
        return updated

    def cancel(self, user: User) -> User:
        if user.subscription_status == SUBSCRIPTION_CANCELED:
            raise SubscriptionServiceException("Subscription is already canceled")
        updated = self.user_repo.update_user(
            user.id, {"subscription_status": SUBSCRIPTION_CANCELED}
        )
        logger.info(f"Canceled subscription for user {user.id}")
        return updated

    @staticmethod
    def has_valid_subscription(user: Optional[User], now: Optional[datetime] = None) -> bool:
        if user is None:
            return False
        if user.role in (ROLE_ADMIN, ROLE_SYSTEM_ADMIN):
            return True

        now = _as_naive_utc(now) if now else _utcnow()
        if user.subscription_status == SUBSCRIPTION_TRIAL and user.trial_ends_at:
            return _as_naive_utc(user.trial_ends_at) > now

        if user.subscription_status == SUBSCRIPTION_ACTIVE:
            if user.plan == PLAN_FREE:
                return True
            if user.subscription_ends_at:
                return _as_naive_utc(user.subscription_ends_at) > now
            return True

        return False
