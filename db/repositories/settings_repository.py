from db.models.settings import Settings
from sqlalchemy.orm import Session
from typing import Optional, Dict
import os

SMTP_REQUIRED_KEYS = ["SMTP_HOST", "SMTP_PORT", "SMTP_USER", "SMTP_PASSWORD", "SENDER_EMAIL"]


class SettingsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_setting(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Environment variable wins over the stored value"""
        env_value = os.getenv(key)
        if env_value is not None:
            return env_value

        setting = self.db.query(Settings).filter(Settings.key == key).first()
        if setting and setting.value is not None:
            return setting.value
        return default

    def set_setting(self, key: str, value: Optional[str], is_secret: bool = False):
        setting = self.db.query(Settings).filter(Settings.key == key).first()
        if setting:
            setting.value = value
            setting.is_secret = is_secret
        else:
            self.db.add(Settings(key=key, value=value, is_secret=is_secret))
        self.db.commit()

    def get_smtp_config(self) -> Dict[str, Optional[str]]:
        config = {key: self.get_setting(key) for key in SMTP_REQUIRED_KEYS}
        config["SENDER_NAME"] = self.get_setting("SENDER_NAME", "RepuRadar")
        config["SMTP_USE_TLS"] = self.get_setting("SMTP_USE_TLS", "true")
        return config

    def is_smtp_configured(self) -> bool:
        return all(self.get_setting(key) for key in SMTP_REQUIRED_KEYS)
