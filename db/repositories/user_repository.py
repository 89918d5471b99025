from sqlalchemy import or_
from sqlalchemy.orm import Session
from db.models.user import User, SUBSCRIPTION_ACTIVE, SUBSCRIPTION_TRIAL, PLAN_TRIAL


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_user(self, user: User):
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_user(self, user_id: int, update_data: dict) -> User | None:
        """Update user with dict of fields"""
        existing_user = self.get_user_by_id(user_id)
        if not existing_user:
            return None
        for key, value in update_data.items():
            if hasattr(existing_user, key):
                setattr(existing_user, key, value)
        self.db.commit()
        self.db.refresh(existing_user)
        return existing_user

    def get_user_by_email(self, email: str):
        return self.db.query(User).filter(User.email == email).first()

    def get_user_by_username(self, username: str):
        return self.db.query(User).filter(User.username == username).first()

    def get_user_by_login(self, identifier: str):
        """Look a user up by email first, then by username"""
        return self.get_user_by_email(identifier) or self.get_user_by_username(identifier)

    def get_user_by_id(self, user_id: int):
        return self.db.query(User).filter(User.id == user_id).first()

    def list_users(self, limit: int = None):
        """Get all users, optionally limited"""
        query = self.db.query(User).order_by(User.id)
        if limit:
            query = query.limit(limit)
        return query.all()

    def list_trial_users(self):
        """Users the trial resolver could consider on trial"""
        return (
            self.db.query(User)
            .filter(
                User.is_active.is_(True),
                User.trial_ends_at.isnot(None),
                or_(
                    User.subscription_status == SUBSCRIPTION_TRIAL,
                    (User.plan == PLAN_TRIAL) & (User.subscription_status != SUBSCRIPTION_ACTIVE),
                ),
            )
            .all()
        )

