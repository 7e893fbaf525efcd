from pydantic import BaseModel, EmailStr, ConfigDict
from typing import Any, Optional

class RegistrationCreate(BaseModel):
    # Loose types: blitzweek.services.validation reports every bad field at once
    name: Optional[Any] = None
    ldapId: Optional[Any] = None
    rollNumber: Optional[Any] = None
    branch: Optional[Any] = None
    year: Optional[Any] = None
    interestedEvents: Optional[Any] = None
    phoneNumber: Optional[Any] = None

    model_config = ConfigDict(extra="ignore")

class StatusUpdate(BaseModel):
    status: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict
