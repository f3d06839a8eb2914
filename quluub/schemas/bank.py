from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BankAccountCreate(BaseModel):
    bank_name: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=6, max_length=20)
    account_name: str = Field(..., min_length=1)
    bank_code: Optional[str] = None
    country: str = "NG"


class BankAccountResponse(BaseModel):
    id: int
    bank_name: str
    account_number: str
    account_name: str
    bank_code: Optional[str] = None
    country: str
    is_verified: bool

    model_config = ConfigDict(from_attributes=True)


class WithdrawalRequest(BaseModel):
    amount: Decimal
    currency: Optional[str] = "NGN"


class WithdrawalResponse(BaseModel):
    id: int
    amount: Decimal
    currency: str
    status: str
    transaction_id: Optional[str] = None
    failure_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
