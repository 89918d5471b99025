from abc import ABC, abstractmethod
from typing import Dict, Optional

from db.repositories.preference_repository import PreferenceRepository


class KeyValueStore(ABC):
    """Small string key/value capability used for UI flags."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...

    def get_flag(self, key: str) -> bool:
        return self.get(key) == "true"

    def set_flag(self, key: str) -> None:
        self.set(key, "true")


class MemoryStore(KeyValueStore):
    """Lives as long as the object does; a fresh one behaves like a reload."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class PreferenceStore(KeyValueStore):
    """Per-user values persisted in the user_preferences table."""

    def __init__(self, preference_repo: PreferenceRepository, user_id: int):
        self.preference_repo = preference_repo
        self.user_id = user_id

    def get(self, key: str) -> Optional[str]:
        return self.preference_repo.get_value(self.user_id, key)

    def set(self, key: str, value: str) -> None:
        self.preference_repo.set_value(self.user_id, key, value)

    def remove(self, key: str) -> None:
        self.preference_repo.delete_value(self.user_id, key)
