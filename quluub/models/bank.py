# quluub/models/bank.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship
from quluub.database import Base

BANK_COUNTRIES = ("NG", "US")

WITHDRAWAL_PENDING = "pending"
WITHDRAWAL_PROCESSING = "processing"
WITHDRAWAL_COMPLETED = "completed"
WITHDRAWAL_FAILED = "failed"


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    bank_name = Column(String(150), nullable=False)
    account_number = Column(String(50), nullable=False)
    account_name = Column(String(150), nullable=False)
    bank_code = Column(String(20))
    country = Column(String(2), nullable=False)
    recipient_code = Column(String(100))
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="bank_account")
    withdrawals = relationship("Withdrawal", back_populates="bank_account")


class Withdrawal(Base):
    __tablename__ = "withdrawals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(String(20), nullable=False, default=WITHDRAWAL_PENDING)
    # Transfer code from the payment processor
    transaction_id = Column(String(100), index=True)
    failure_reason = Column(String(500))
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    bank_account = relationship("BankAccount", back_populates="withdrawals")
