from passlib.context import CryptContext
from db.models.user import User, ROLE_USER, ROLE_SYSTEM_ADMIN
from api.services.role_service import legacy_admin_username
from db.repositories.user_repository import UserRepository
import jwt
import os
from datetime import datetime, timedelta, timezone
import logging
from fastapi import Request

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"


class UserServiceException(Exception):
    def __init__(self, detail):
        super().__init__(detail)
        self.detail = detail

    def __str__(self):
        return str(self.detail)


class UserService:
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo
        self.pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")
        self.SECRET_KEY = os.getenv("JWT_SECRET") or os.getenv("SESSION_SECRET")
        if not self.SECRET_KEY:
            logger.warning("JWT_SECRET not found in environment, using fallback")
            self.SECRET_KEY = "repuradar-secret-key"
        self.ALGORITHM = "HS256"
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

    def signup(
        self,
        email: str,
        password: str,
        username: str | None = None,
        full_name: str = "",
        role: str = ROLE_USER,
    ) -> User:
        if not email or "@" not in email:
            logger.error(f"Invalid email address: {email}")
            raise UserServiceException("Invalid email address")
        if len(password) < 8:
            logger.error("Password too short")
            raise UserServiceException("Password must be at least 8 characters long")
        username = (username or email.split("@", 1)[0]).strip()
        if not username:
            raise UserServiceException("Username cannot be empty")
        legacy = legacy_admin_username()
        if legacy and username == legacy and role != ROLE_SYSTEM_ADMIN:
            logger.error(f"Refused reserved username: {username}")
            raise UserServiceException("Username is reserved")
        if self.user_repo.get_user_by_email(email):
            logger.error(f"Email already registered: {email}")
            raise UserServiceException("Email already in use")
        if self.user_repo.get_user_by_username(username):
            logger.error(f"Username already registered: {username}")
            raise UserServiceException("Username already exists")

        user = User(
            email=email,
            username=username,
            full_name=full_name or "",
            hashed_password=self.pwd_context.hash(password),
            role=role,
        )
        self.user_repo.create_user(user)
        logger.info(f"Created user {user.id} ({email})")
        return user

    def authenticate(self, identifier: str, password: str) -> User:
        user = self.user_repo.get_user_by_login(identifier)
        if not user or not self.pwd_context.verify(password, user.hashed_password):
            logger.error(f"Login failed for {identifier}: Invalid credentials")
            raise UserServiceException(
                "We couldn't find a match for the information you entered. "
                "Please check your username/email and password and try again."
            )
        if not user.is_active:
            logger.error(f"Login refused for deactivated user {user.id}")
            raise UserServiceException("Account is deactivated")
        return user

    def login(self, identifier: str, password: str) -> dict:
        user = self.authenticate(identifier, password)
        access_token_expires = timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = self.create_access_token(
            data={"sub": str(user.id)}, expires_delta=access_token_expires
        )
        logger.info(f"Generated token for user {user.id}")
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user_id": user.id,
            "user": user,
            "expires_in": int(access_token_expires.total_seconds()),
        }

    def create_access_token(self, data: dict, expires_delta: timedelta):
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + expires_delta
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self.SECRET_KEY, algorithm=self.ALGORITHM)

    def get_current_user(self, token: str) -> User:
        try:
            payload = jwt.decode(token, self.SECRET_KEY, algorithms=[self.ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.error("Token has expired")
            raise UserServiceException("Token expired")
        except jwt.PyJWTError as e:
            logger.error(f"JWT decode error: {str(e)}")
            raise UserServiceException("Not authenticated")

        user_id = payload.get("sub")
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            logger.error(f"Invalid user_id in token payload: {user_id!r}")
            raise UserServiceException("Not authenticated")

        user = self.user_repo.get_user_by_id(user_id)
        if user is None:
            logger.error(f"No user found for ID {user_id} in database")
            raise UserServiceException("Not authenticated")
        if not user.is_active:
            logger.error(f"Rejected token for deactivated user {user_id}")
            raise UserServiceException("Account is deactivated")
        return user

    async def get_current_user_from_request(self, request: Request) -> User:
        token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        if not token:
            auth = request.headers.get("Authorization")
            if auth and auth.lower().startswith("bearer "):
                token = auth.split(" ", 1)[1].strip()
        if not token:
            logger.info("No access token in request cookies or headers")
            raise UserServiceException("Not authenticated")
        return self.get_current_user(token)
