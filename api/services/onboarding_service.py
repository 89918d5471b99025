from api.services.dismissal_store import KeyValueStore


class OnboardingProgress:
    """Completed/skipped onboarding flags for one user."""

    def __init__(self, store: KeyValueStore, user_id: int):
        self.store = store
        self.user_id = user_id

    @property
    def completed_key(self) -> str:
        return f"onboarding_completed_{self.user_id}"

    @property
    def skipped_key(self) -> str:
        return f"onboarding_skipped_{self.user_id}"

    @property
    def is_completed(self) -> bool:
        return self.store.get_flag(self.completed_key)

    @property
    def is_skipped(self) -> bool:
        return self.store.get_flag(self.skipped_key)

    @property
    def should_show(self) -> bool:
        return not self.is_completed and not self.is_skipped

    def complete(self) -> None:
        self.store.set_flag(self.completed_key)

    def skip(self) -> None:
        self.store.set_flag(self.skipped_key)

    def reset(self) -> None:
        self.store.remove(self.completed_key)
        self.store.remove(self.skipped_key)

    def to_dict(self) -> dict:
        return {
            "is_completed": self.is_completed,
            "is_skipped": self.is_skipped,
            "should_show": self.should_show,
            "step": 1,
        }
