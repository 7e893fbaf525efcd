from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from blitzweek.core.exceptions import NotFound
from blitzweek.db.session import get_db
from blitzweek.schemas import RegistrationCreate
from blitzweek.services import registration_service

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_participant(
    payload: RegistrationCreate,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Register a participant for Blitz Week.
    Returns 409 with the earlier registration number if the LDAP ID or roll number is taken.
    """
    data = registration_service.register(
        db,
        payload.model_dump(),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return {
        "success": True,
        "message": "Registration successful!",
        "data": data
    }

@router.get("/check-registration/{identifier}")
def check_registration(identifier: str, db: Session = Depends(get_db)):
    """Check by LDAP ID (anything with an '@') or roll number"""
    try:
        data = registration_service.check_status(db, identifier)
    except NotFound as e:
        return JSONResponse(
            status_code=e.status_code,
            content={**e.to_payload(), "isRegistered": False}
        )

    return {
        "success": True,
        "isRegistered": True,
        "data": data
    }

@router.get("/registration/{registration_number}")
def get_registration(registration_number: str, db: Session = Depends(get_db)):
    """Look up a registration by its number"""
    return {
        "success": True,
        "data": registration_service.get_by_number(db, registration_number)
    }
