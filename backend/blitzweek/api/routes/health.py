from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from blitzweek.db.base import utcnow
from blitzweek.db.session import get_db
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

# Mounted at both /health and /api/health
@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    try:
        db.execute(text("SELECT 1"))

        return {
            "status": "OK",
            "database": "connected",
            "service": "blitzweek-registration",
            "timestamp": utcnow().isoformat()
        }
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "database": "unreachable",
            "service": "blitzweek-registration",
            "timestamp": utcnow().isoformat()
        }
