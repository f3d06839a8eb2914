from sqlalchemy import Column, Integer, String, Boolean, Float, TIMESTAMP, func
from sqlalchemy.orm import relationship
from quluub.database import Base

ROLE_CLIENT = "client"
ROLE_COUNSELOR = "counselor"
ROLE_ADMIN = "admin"
ROLES = (ROLE_CLIENT, ROLE_COUNSELOR, ROLE_ADMIN)


# ---------------- USER (AUTH TABLE) ----------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_CLIENT)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_suspended = Column(Boolean, default=False, nullable=False)
    onboarding_completed = Column(Boolean, default=False, nullable=False)
    phone = Column(String(30))

    # Client onboarding
    date_of_birth = Column(String(20))
    country = Column(String(100))
    city = Column(String(100))
    marital_status = Column(String(30))
    nationality = Column(String(100))

    # Counselor aggregates, kept in sync by the review service
    average_rating = Column(Float, default=0.0, nullable=False)
    reviews_count = Column(Integer, default=0, nullable=False)
    is_visible = Column(Boolean, default=True, nullable=False)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    counselor_profile = relationship(
        "Counselor", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    wallet = relationship("Wallet", back_populates="user", uselist=False, cascade="all, delete-orphan")
    bank_account = relationship("BankAccount", back_populates="user", uselist=False, cascade="all, delete-orphan")
    client_sessions = relationship(
        "Session", foreign_keys="Session.client_id", back_populates="client", cascade="all, delete-orphan"
    )
    counselor_sessions = relationship(
        "Session", foreign_keys="Session.counselor_id", back_populates="counselor", cascade="all, delete-orphan"
    )

    @property
    def name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
