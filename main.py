from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.events import EVENT_JOB_ERROR
from contextlib import asynccontextmanager
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from api import router as api_router
from api.health import router as health_router
from api.rate_limit import limiter
from api.services.reminder_service import TrialReminderService
from api.services.user_service import UserService, UserServiceException
from db.engine import SessionLocal
from db.models.user import ROLE_SYSTEM_ADMIN
from db.repositories.preference_repository import PreferenceRepository
from db.repositories.settings_repository import SettingsRepository
from db.repositories.user_repository import UserRepository
import logging
import os
import secrets


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    filename="log.txt",
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def ensure_jwt_secret():
    """Ensure JWT_SECRET exists and is secure"""
    jwt_secret = os.getenv("JWT_SECRET")

    insecure_defaults = [
        "change-me-in-production",
        "repuradar-secret-key",
        "your-secret-key-here",
    ]
    if jwt_secret and jwt_secret not in insecure_defaults:
        return jwt_secret

    db = SessionLocal()
    try:
        settings_repo = SettingsRepository(db)
        stored = settings_repo.get_setting("JWT_SECRET")
        if stored and stored not in insecure_defaults:
            os.environ["JWT_SECRET"] = stored
            return stored

        new_secret = secrets.token_hex(32)
        logger.warning(
            "JWT_SECRET not set or insecure! Generated secure random secret. "
            "Please set JWT_SECRET in your environment for production."
        )
        try:
            settings_repo.set_setting("JWT_SECRET", new_secret, is_secret=True)
            logger.info("Generated JWT_SECRET saved to database")
        except SQLAlchemyError as e:
            logger.error(f"Failed to save JWT_SECRET to database: {e}")
    finally:
        db.close()

    os.environ["JWT_SECRET"] = new_secret
    return new_secret


def initialize_admin_user():
    """Create the system administrator from environment variables if no users exist"""
    db = SessionLocal()
    try:
        user_repo = UserRepository(db)
        if user_repo.list_users(limit=1):
            logger.info("Users already exist, skipping admin creation")
            return

        admin_email = os.getenv("ADMIN_EMAIL")
        admin_password = os.getenv("ADMIN_PASSWORD")
        if not (admin_email and admin_password):
            logger.info("No admin credentials in environment, skipping admin creation")
            return

        logger.info(f"Creating system administrator from environment variables: {admin_email}")
        UserService(user_repo).signup(
            admin_email,
            admin_password,
            username=os.getenv("ADMIN_USERNAME", "admin"),
            full_name="System Administrator",
            role=ROLE_SYSTEM_ADMIN,
        )
    except UserServiceException as e:
        logger.error(f"Error initializing admin user: {e}")
    finally:
        db.close()


scheduler = None


def send_trial_reminders():
    logger.info("Checking for trial reminders...")
    db = SessionLocal()
    try:
        service = TrialReminderService(
            UserRepository(db),
            PreferenceRepository(db),
            SettingsRepository(db),
        )
        service.send_trial_reminders()
    finally:
        db.close()


def init_scheduler():
    new_scheduler = AsyncIOScheduler()
    new_scheduler.add_job(
        send_trial_reminders,
        "interval",
        minutes=int(os.getenv("TRIAL_REMINDER_INTERVAL_MINUTES", "60")),
        id="trial_reminders_job",
    )
    return new_scheduler


def start_scheduler():
    global scheduler
    if os.getenv("SKIP_SCHEDULER", "false").lower() == "true":
        logger.info("SKIP_SCHEDULER set, scheduler not started")
        return

    scheduler = init_scheduler()

    def job_error_listener(event):
        logger.error(f"Job {event.job_id} crashed: {event.exception}")

    scheduler.add_listener(job_error_listener, EVENT_JOB_ERROR)
    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler():
    global scheduler
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
    scheduler = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_jwt_secret()
    initialize_admin_user()
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(title="RepuRadar", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS Configuration - Allow same-origin by default, customize for production
allowed_origins = os.getenv("CORS_ORIGINS", "*").split(",")
if allowed_origins == ["*"]:
    logger.warning(
        "CORS is set to allow all origins (*). "
        "Set CORS_ORIGINS environment variable to restrict origins in production."
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
    max_age=600,
)


# Security headers middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


app.include_router(health_router)
app.include_router(api_router, prefix="/api")
