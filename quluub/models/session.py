# quluub/models/session.py
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship
from quluub.database import Base

STATUS_PENDING_PAYMENT = "pending_payment"
STATUS_PAID = "paid"
STATUS_COMPLETED = "completed"
STATUS_CANCELED = "canceled"
SESSION_STATUSES = (STATUS_PENDING_PAYMENT, STATUS_PAID, STATUS_COMPLETED, STATUS_CANCELED)

CURRENCIES = ("usd", "ngn")


class Session(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    counselor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(TIMESTAMP, nullable=False)
    duration = Column(Integer, default=60, nullable=False)  # minutes
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="usd")
    status = Column(String(20), nullable=False, default=STATUS_PENDING_PAYMENT, index=True)
    # Checkout session id, used to find the session from the Stripe webhook
    stripe_checkout_session_id = Column(String(255), index=True)
    # Populated once Stripe reports the payment, needed for refunds
    payment_intent_id = Column(String(255))
    # Paystack transaction reference
    payment_reference = Column(String(255), index=True)
    notes = Column(String(1000))
    video_call_url = Column(String(500))
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    client = relationship("User", foreign_keys=[client_id], back_populates="client_sessions")
    counselor = relationship("User", foreign_keys=[counselor_id], back_populates="counselor_sessions")
    review = relationship("Review", back_populates="session", uselist=False, cascade="all, delete-orphan")
