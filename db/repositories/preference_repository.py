from sqlalchemy.orm import Session
from db.models.preference import UserPreference
from typing import Optional


class PreferenceRepository:
    """Per-user key/value rows backing persistent UI state."""

    def __init__(self, db: Session):
        self.db = db

    def _get(self, user_id: int, key: str) -> Optional[UserPreference]:
        return (
            self.db.query(UserPreference)
            .filter(UserPreference.user_id == user_id, UserPreference.key == key)
            .first()
        )

    def get_value(self, user_id: int, key: str) -> Optional[str]:
        pref = self._get(user_id, key)
        return pref.value if pref else None

    def set_value(self, user_id: int, key: str, value: Optional[str]) -> None:
        pref = self._get(user_id, key)
        if pref:
            pref.value = value
        else:
            self.db.add(UserPreference(user_id=user_id, key=key, value=value))
        self.db.commit()

    def delete_value(self, user_id: int, key: str) -> bool:
        pref = self._get(user_id, key)
        if not pref:
            return False
        self.db.delete(pref)
        self.db.commit()
        return True

