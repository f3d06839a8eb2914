from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class TransactionResponse(BaseModel):
    id: int
    type: str
    amount: Decimal
    description: str
    status: str
    reference: Optional[str] = None
    session_id: Optional[int] = None
    date: datetime

    model_config = ConfigDict(from_attributes=True)


class DepositRequest(BaseModel):
    # Optional so missing values answer 400 rather than 422
    reference: Optional[str] = None
    amount: Optional[Union[Decimal, float, int]] = None
