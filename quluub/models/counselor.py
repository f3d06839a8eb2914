# quluub/models/counselor.py
from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, String, Text, Boolean, ForeignKey, TIMESTAMP, JSON, func
from sqlalchemy.orm import relationship
from quluub.database import Base


class Counselor(Base):
    """Professional profile attached one-to-one to a counselor user."""

    __tablename__ = "counselors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    # Personal information
    nationality = Column(String(100))
    country_of_residence = Column(String(100))
    city_of_residence = Column(String(100))
    marital_status = Column(String(30))
    date_of_birth = Column(String(20))

    # Qualifications
    university = Column(String(200))
    license_number = Column(String(100))
    field_of_specialization = Column(String(200))
    years_of_experience = Column(Integer)
    specializations = Column(JSON, default=list)
    languages = Column(JSON, default=list)
    bio = Column(Text)

    # Admin & system fields
    session_rate = Column(Numeric(12, 2), default=Decimal("50.00"), nullable=False)
    ngn_session_rate = Column(Numeric(12, 2), default=Decimal("25000.00"), nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)
    profile_picture = Column(String(255))
    # {"monday": ["09:00", "10:00"], ...}
    availability = Column(JSON, default=dict)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="counselor_profile")
