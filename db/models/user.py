from sqlalchemy import Column, Integer, String, Boolean, DateTime
from db.base import Base
from datetime import datetime

# Subscription status constants
SUBSCRIPTION_ACTIVE = "active"
SUBSCRIPTION_INACTIVE = "inactive"
SUBSCRIPTION_TRIAL = "trial"
SUBSCRIPTION_CANCELED = "canceled"

# Role tiers, highest first
ROLE_SYSTEM_ADMIN = "system_admin"
ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
ROLE_LOCATION_MANAGER = "location_manager"
ROLE_USER = "user"

PLAN_FREE = "Free"
PLAN_TRIAL = "trial"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    username = Column(String, unique=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=False, default="")
    role = Column(String, nullable=False, default=ROLE_USER)
    plan = Column(String, nullable=False, default=PLAN_FREE)
    subscription_status = Column(String, default=SUBSCRIPTION_INACTIVE)
    trial_ends_at = Column(DateTime, nullable=True)
    subscription_ends_at = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
