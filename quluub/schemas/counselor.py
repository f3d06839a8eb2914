from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class CounselorOnboarding(BaseModel):
    nationality: Optional[str] = None
    country_of_residence: Optional[str] = None
    city_of_residence: Optional[str] = None
    marital_status: Optional[str] = None
    date_of_birth: Optional[str] = None
    university: Optional[str] = None
    license_number: Optional[str] = None
    field_of_specialization: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, ge=0)
    specializations: List[str] = []
    languages: List[str] = []
    bio: Optional[str] = None


class CounselorProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    nationality: Optional[str] = None
    country_of_residence: Optional[str] = None
    city_of_residence: Optional[str] = None
    marital_status: Optional[str] = None
    university: Optional[str] = None
    license_number: Optional[str] = None
    field_of_specialization: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, ge=0)
    specializations: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None


class RateUpdate(BaseModel):
    session_rate: Decimal
    ngn_session_rate: Decimal


class AvailabilityUpdate(BaseModel):
    # {"monday": ["09:00", "10:00"], ...}
    availability: Dict[str, List[str]]
