from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional
import logging

from db.models.user import User, SUBSCRIPTION_ACTIVE, SUBSCRIPTION_TRIAL, PLAN_TRIAL

logger = logging.getLogger(__name__)

DAY_MS = 86_400_000
UPGRADE_URL = "/subscription"


@dataclass(frozen=True)
class TrialState:
    is_trial: bool = False
    days_left: int = 0
    is_expired: bool = False
    trial_end_date: Optional[datetime] = None
    upgrade_url: str = UPGRADE_URL

    @property
    def is_active(self) -> bool:
        return self.is_trial and not self.is_expired

    def to_dict(self) -> dict:
        return asdict(self)


ZERO_STATE = TrialState()


def is_trial_user(user: Optional[User]) -> bool:
    if user is None:
        return False
    return user.subscription_status == SUBSCRIPTION_TRIAL or (
        user.plan == PLAN_TRIAL and user.subscription_status != SUBSCRIPTION_ACTIVE
    )


def _align(value: datetime, reference: datetime) -> datetime:
    """
    Bring `value` into the same naive/aware flavour as `reference`.
    Naive stored timestamps are UTC; a naive reference is local wall time.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if reference.tzinfo is not None:
        return value.astimezone(timezone.utc)
    return value.astimezone().replace(tzinfo=None)


def _diff_ms(later: datetime, earlier: datetime) -> int:
    """Whole milliseconds between two instants, floored."""
    if earlier.tzinfo is not None:
        earlier = earlier.astimezone(timezone.utc)
    delta = later - earlier
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def end_of_day(now: datetime) -> datetime:
    return now.replace(hour=23, minute=59, second=59, microsecond=999000)


def resolve_trial_state(user: Optional[User], now: Optional[datetime] = None) -> TrialState:
    """
    Derive the trial state of `user` at `now`.

    Days are counted against the end of the current calendar day so that a
    trial ending at any point today still reports one day left, and a trial
    only counts as expired once it ended before today started.
    """
    if user is None:
        return ZERO_STATE

    if now is None:
        now = datetime.now().astimezone()

    is_trial = is_trial_user(user)
    trial_end_date = user.trial_ends_at

    days_left = 0
    is_expired = False
    if is_trial and trial_end_date is not None:
        diff = _diff_ms(_align(trial_end_date, now), end_of_day(now))
        days_left = max(0, diff // DAY_MS + 1)
        is_expired = diff <= -DAY_MS
        if -DAY_MS < diff <= DAY_MS:
            days_left = 1

    return TrialState(
        is_trial=is_trial,
        days_left=days_left,
        is_expired=is_expired,
        trial_end_date=trial_end_date,
    )


def onboarding_status(user: User, now: Optional[datetime] = None) -> dict:
    """Snapshot served by GET /api/user/onboarding/status"""
    state = resolve_trial_state(user, now)
    return {
        "trialStatus": {
            "active": state.is_active,
            "daysRemaining": state.days_left,
        },
        "plan": user.plan,
        "subscriptionStatus": user.subscription_status,
    }
