from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from blitzweek.core.config import settings
from blitzweek.core.security import decode_token

# This tells FastAPI that the client must send a "Bearer <token>" in the Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

def get_current_admin(token: Optional[str] = Depends(oauth2_scheme)):
    """
    Gate for the administrative registration routes.
    Returns the admin identity, raises 401 Unauthorized otherwise.
    """
    if not settings.ADMIN_AUTH_ENABLED:
        return {"username": "anonymous", "role": "admin"}

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    payload = decode_token(token)
    if payload is None:
        raise credentials_exception

    username: str = payload.get("sub")
    role: str = payload.get("role")

    if username is None or role != "admin":
        raise credentials_exception

    return {"username": username, "role": role}
