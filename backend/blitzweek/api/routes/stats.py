from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blitzweek.db.session import get_db
from blitzweek.services import stats_service

router = APIRouter()

@router.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    """Distributions, trends and recent registrations (confirmed only)"""
    return {"success": True, "data": stats_service.get_stats(db)}

@router.get("/stats/live-count")
def get_live_count(db: Session = Depends(get_db)):
    """Lightweight totals for polling displays"""
    return {"success": True, "data": stats_service.get_live_count(db)}

@router.get("/stats/event/{event_name}")
def get_event_stats(event_name: str, db: Session = Depends(get_db)):
    return {"success": True, "data": stats_service.get_event_stats(db, event_name)}
