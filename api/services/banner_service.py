from typing import Optional
import logging

from api.services.dismissal_store import KeyValueStore, MemoryStore
from api.services.onboarding_client import OnboardingStatusError
from api.services.trial_service import TrialState

logger = logging.getLogger(__name__)

UPGRADE_BANNER_DISMISSED_KEY = "upgrade-banner-dismissed"
URGENT_DAYS = 3
PROGRESS_SPAN_DAYS = 7

TONE_URGENT = "urgent"
TONE_NOTICE = "notice"


def _days_text(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


class UpgradeBanner:
    """
    Dismissible upgrade prompt shown to trial users.

    Dismissal goes to `store`. Without one the banner gets its own
    MemoryStore, so dismissing only lasts for this instance; pass a
    PreferenceStore to keep the banner hidden across reloads.
    """

    def __init__(self, trial_state: TrialState, store: Optional[KeyValueStore] = None):
        self.trial_state = trial_state
        self.store = store if store is not None else MemoryStore()

    @property
    def is_dismissed(self) -> bool:
        return self.store.get_flag(UPGRADE_BANNER_DISMISSED_KEY)

    @property
    def is_visible(self) -> bool:
        state = self.trial_state
        return state.is_trial and not state.is_expired and not self.is_dismissed

    @property
    def is_urgent(self) -> bool:
        return self.trial_state.days_left <= URGENT_DAYS

    @property
    def tone(self) -> str:
        return TONE_URGENT if self.is_urgent else TONE_NOTICE

    @property
    def progress_percent(self) -> Optional[float]:
        if not self.is_urgent:
            return None
        return self.trial_state.days_left / PROGRESS_SPAN_DAYS * 100

    @property
    def message(self) -> str:
        days = self.trial_state.days_left
        return f"{_days_text(days)} left in your free trial. Upgrade now to unlock full automation."

    def dismiss(self) -> bool:
        """Returns False when the banner was already dismissed."""
        if self.is_dismissed:
            return False
        self.store.set_flag(UPGRADE_BANNER_DISMISSED_KEY)
        logger.info("Upgrade banner dismissed")
        return True

    def to_dict(self) -> dict:
        return {
            "visible": self.is_visible,
            "dismissed": self.is_dismissed,
            "urgent": self.is_urgent,
            "tone": self.tone,
            "days_left": self.trial_state.days_left,
            "progress_percent": self.progress_percent,
            "message": self.message,
            "upgrade_url": self.trial_state.upgrade_url,
        }


class TrialBanner:
    """Non-dismissible trial countdown, with an expired notice."""

    VARIANTS = ("default", "compact")

    def __init__(self, trial_state: TrialState, variant: str = "default"):
        if variant not in self.VARIANTS:
            raise ValueError(f"Unknown banner variant: {variant}")
        self.trial_state = trial_state
        self.variant = variant

    @property
    def is_visible(self) -> bool:
        state = self.trial_state
        if not state.is_trial:
            return False
        return state.is_expired or state.days_left > 0

    @property
    def is_urgent(self) -> bool:
        return not self.trial_state.is_expired and self.trial_state.days_left <= URGENT_DAYS

    @property
    def message(self) -> Optional[str]:
        if not self.is_visible:
            return None
        state = self.trial_state
        if state.is_expired:
            return "Your trial has expired. Upgrade now to continue using all features."
        if self.variant == "compact":
            return f"Trial: {state.days_left}d left"
        text = f"You have {_days_text(state.days_left)} left in your trial."
        if self.is_urgent:
            text += " Upgrade soon to avoid service interruption."
        return text

    def to_dict(self) -> dict:
        return {
            "visible": self.is_visible,
            "expired": self.trial_state.is_expired,
            "urgent": self.is_urgent,
            "tone": TONE_URGENT if self.is_urgent or self.trial_state.is_expired else TONE_NOTICE,
            "variant": self.variant,
            "message": self.message,
            "upgrade_url": self.trial_state.upgrade_url,
        }


class TrialStatusNotice:
    """Dashboard notice driven by the onboarding status snapshot."""

    def __init__(self, status: Optional[dict]):
        self.status = status
        self.dismissed = False

    @classmethod
    def load(cls, client) -> "TrialStatusNotice":
        try:
            return cls(client.fetch_status())
        except OnboardingStatusError as e:
            logger.error(f"Hiding trial notice, onboarding status unavailable: {e}")
            return cls(None)

    @property
    def is_visible(self) -> bool:
        if self.dismissed or not self.status:
            return False
        trial_status = self.status.get("trialStatus") or {}
        return bool(trial_status.get("active")) and self.status.get("subscriptionStatus") == "trial"

    @property
    def title(self) -> Optional[str]:
        if not self.is_visible:
            return None
        return f"Your {self.status.get('plan')} Trial"

    @property
    def message(self) -> Optional[str]:
        if not self.is_visible:
            return None
        days = int(self.status["trialStatus"].get("daysRemaining", 0))
        return (
            f"{_days_text(days)} remaining in your trial - "
            "Upgrade to keep access to all premium features"
        )

    def dismiss(self) -> None:
        self.dismissed = True
