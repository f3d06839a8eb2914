"""Connection requests, messages and complaints."""

from typing import Optional

from pydantic import BaseModel, Field


class ConnectionRequestCreate(BaseModel):
    counselor_id: int


class ConnectionRequestUpdate(BaseModel):
    status: str


class MessageCreate(BaseModel):
    receiver_id: int
    content: str = Field(..., max_length=5000)


class ComplaintCreate(BaseModel):
    reported_user_id: int
    reason: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class ComplaintStatusUpdate(BaseModel):
    status: str
