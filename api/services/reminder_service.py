from datetime import datetime
from typing import Optional
import logging

from api.services.email_service import EmailService
from api.services.trial_service import resolve_trial_state
from db.models.user import User
from db.repositories.preference_repository import PreferenceRepository
from db.repositories.settings_repository import SettingsRepository
from db.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

REMINDER_DAYS = (3, 1)


def reminder_key(user: User, days_left: int) -> str:
    # Keyed on the trial end so an extended trial gets fresh reminders
    return f"trial-reminder-{days_left}:{user.trial_ends_at.date().isoformat()}"


class TrialReminderService:
    def __init__(
        self,
        user_repo: UserRepository,
        preference_repo: PreferenceRepository,
        settings_repo: Optional[SettingsRepository] = None,
        email_service: Optional[EmailService] = None,
    ):
        self.user_repo = user_repo
        self.preference_repo = preference_repo
        self.email_service = email_service
        if self.email_service is None and settings_repo is not None:
            try:
                self.email_service = EmailService.from_settings(settings_repo)
            except ValueError as e:
                logger.warning(f"Failed to initialize email service: {e}")

    def send_trial_reminders(self, now: Optional[datetime] = None) -> int:
        """Email every trial user sitting on a reminder day. Returns the number sent."""
        if not self.email_service:
            logger.info("Email service not configured, skipping trial reminders")
            return 0

        sent = 0
        for user in self.user_repo.list_trial_users():
            state = resolve_trial_state(user, now)
            if not state.is_active or state.days_left not in REMINDER_DAYS:
                continue
            key = reminder_key(user, state.days_left)
            if self.preference_repo.get_value(user.id, key):
                continue
            if self.send_reminder(user, state.days_left):
                self.preference_repo.set_value(user.id, key, "sent")
                sent += 1
        if sent:
            logger.info(f"Sent {sent} trial reminder(s)")
        return sent

    def send_reminder(self, user: User, days_left: int) -> bool:
        days_text = "1 day" if days_left == 1 else f"{days_left} days"
        subject = f"Your RepuRadar trial ends in {days_text}"
        name = user.full_name or user.username
        html_content = f"""
        <h2>Your {user.plan} trial is ending soon</h2>
        <p>Hi {name},</p>
        <p>You have <strong>{days_text}</strong> left in your trial.
        Upgrade to keep AI replies, analytics and review alerts running.</p>
        <p><a href="/subscription">Choose a plan</a></p>
        """
        text_content = (
            f"Hi {name}, you have {days_text} left in your {user.plan} trial. "
            "Upgrade at /subscription to keep access to all features."
        )
        success, message = self.email_service.send_email(
            to_email=user.email,
            subject=subject,
            html_content=html_content,
            text_content=text_content,
        )
        if not success:
            logger.error(f"Failed to send trial reminder to user {user.id}: {message}")
        return success
