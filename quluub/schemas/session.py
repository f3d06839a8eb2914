from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionSchedule(BaseModel):
    date: str
    counselor_id: Optional[int] = None
    client_id: Optional[int] = None
    currency: Optional[str] = "usd"
    duration: int = Field(60, ge=15, le=240)
    notes: Optional[str] = Field(None, max_length=1000)


class SessionReschedule(BaseModel):
    # Optional here so a missing date answers 400 rather than 422
    date: Optional[str] = None


class SessionResponse(BaseModel):
    id: int
    client_id: int
    client_name: Optional[str] = None
    counselor_id: int
    counselor_name: Optional[str] = None
    date: datetime
    duration: int
    price: Decimal
    currency: str
    status: str
    is_rated: bool = False
    notes: Optional[str] = None
    video_call_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
