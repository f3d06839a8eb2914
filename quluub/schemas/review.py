# quluub/schemas/review.py
"""
Review & Rating Pydantic Schemas
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RatingSubmit(BaseModel):
    """Star rating for a completed session; 0 means no star was picked."""
    rating: int = Field(0, description="Rating from 1 to 5 stars")
    comment: Optional[str] = Field(None, description="Review comment (max 1000 chars)")


class ReviewResponse(BaseModel):
    """Review response for API"""
    id: int = Field(..., description="Review identifier")
    session_id: int = Field(..., description="Session identifier")
    client_id: int = Field(..., description="Client user ID")
    client_name: Optional[str] = Field(None, description="Client name")
    counselor_id: int = Field(..., description="Counselor user ID")
    rating: int = Field(..., description="Rating (1-5)")
    comment: Optional[str] = Field(None, description="Review comment")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    model_config = ConfigDict(from_attributes=True)


class RatingSummary(BaseModel):
    """Aggregate rating for a counselor"""
    counselor_id: int
    average_rating: float = Field(..., ge=0, le=5)
    total_reviews: int = Field(..., ge=0)
    rating_distribution: Dict[int, int]
