from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ======================
# USER SCHEMAS
# ======================

class UserPublic(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: EmailStr
    role: str
    is_verified: bool
    is_suspended: bool
    onboarding_completed: bool
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    marital_status: Optional[str] = None
    nationality: Optional[str] = None
    average_rating: float = 0.0
    reviews_count: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClientOnboarding(BaseModel):
    date_of_birth: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    marital_status: Optional[str] = None
    nationality: Optional[str] = None
    phone: Optional[str] = None


class UserSettingsUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    marital_status: Optional[str] = None
    nationality: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)


# ======================
# ADMIN SCHEMAS
# ======================

class AdminUserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[str] = None
