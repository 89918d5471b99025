from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from api.dependencies import get_db
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint for monitoring and load balancers.
    Always answers 200; the body says what is degraded.
    """
    from main import scheduler

    scheduler_status = "running" if scheduler and scheduler.running else "stopped"
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "scheduler": scheduler_status,
            "error": str(e),
        }

    return {
        "status": "healthy",
        "database": "connected",
        "scheduler": scheduler_status,
    }
