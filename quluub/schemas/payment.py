from typing import Optional

from pydantic import BaseModel


class CheckoutRequest(BaseModel):
    counselor_id: int
    currency: str = "usd"
    date: Optional[str] = None
    time: Optional[str] = None


class StripeVerifyRequest(BaseModel):
    session_id: Optional[str] = None


class PaystackVerifyRequest(BaseModel):
    reference: Optional[str] = None
