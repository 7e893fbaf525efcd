import logging
import secrets

from fastapi import APIRouter, HTTPException, status

from blitzweek.core.config import settings
from blitzweek.core.security import create_access_token
from blitzweek.schemas import LoginRequest, LoginResponse

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/login", response_model=LoginResponse)
def login(login_data: LoginRequest):
    """Exchange the configured admin credentials for a bearer token"""
    email_ok = secrets.compare_digest(
        login_data.email.lower().encode(), settings.ADMIN_EMAIL.lower().encode()
    )
    password_ok = secrets.compare_digest(
        login_data.password.encode(), settings.ADMIN_PASSWORD.encode()
    )

    if email_ok and password_ok:
        access_token = create_access_token(
            data={
                "sub": settings.ADMIN_EMAIL,
                "role": "admin"
            }
        )
        logger.info(f"🔑 Admin login for {settings.ADMIN_EMAIL}")

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": {
                "email": settings.ADMIN_EMAIL,
                "name": "Admin",
                "is_admin": True
            }
        }

    logger.warning(f"Failed admin login for {login_data.email}")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid email or password"
    )
