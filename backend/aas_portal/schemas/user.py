from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from aas_portal.models.user import UserRole

class UserRegister(BaseModel):
    full_name: str
    phone_number: str
    pin: str
    car_number: str
    profile_image: Optional[str] = None
    driver_license: Optional[str] = None
    insurance_image: Optional[str] = None
    insurance_start: Optional[date] = None
    insurance_end: Optional[date] = None

class UserSummary(BaseModel):
    id: int
    full_name: str
    phone_number: str
    car_number: str

    class Config:
        from_attributes = True

class UserResponse(UserSummary):
    profile_image: Optional[str] = None
    driver_license: Optional[str] = None
    insurance_image: Optional[str] = None
    insurance_start: Optional[date] = None
    insurance_end: Optional[date] = None
    is_verified: bool
    role: UserRole
    version: int
    created_at: Optional[datetime] = None

class LoginRequest(BaseModel):
    phone_number: str
    pin: str

class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    redirect_to: str
    user: UserResponse
