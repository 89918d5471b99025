from .preference import UserPreference
from .user import User
from .settings import Settings

__all__ = ["UserPreference", "User", "Settings"]
