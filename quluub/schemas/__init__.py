# quluub/schemas/__init__.py

# Auth schemas
from .auth import SignupRequest, LoginRequest, Token

# User schemas
from .user import (
    UserPublic,
    ClientOnboarding,
    UserSettingsUpdate,
    ChangePasswordRequest,
    AdminUserUpdate,
)

# Counselor schemas
from .counselor import (
    CounselorOnboarding,
    CounselorProfileUpdate,
    RateUpdate,
    AvailabilityUpdate,
)

from .session import SessionSchedule, SessionReschedule, SessionResponse
from .review import RatingSubmit, ReviewResponse, RatingSummary
from .wallet import TransactionResponse, DepositRequest
from .bank import BankAccountCreate, BankAccountResponse, WithdrawalRequest, WithdrawalResponse
from .payment import CheckoutRequest, StripeVerifyRequest, PaystackVerifyRequest
from .social import (
    ConnectionRequestCreate,
    ConnectionRequestUpdate,
    MessageCreate,
    ComplaintCreate,
    ComplaintStatusUpdate,
)

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "Token",
    "UserPublic",
    "ClientOnboarding",
    "UserSettingsUpdate",
    "ChangePasswordRequest",
    "AdminUserUpdate",
    "CounselorOnboarding",
    "CounselorProfileUpdate",
    "RateUpdate",
    "AvailabilityUpdate",
    "SessionSchedule",
    "SessionReschedule",
    "SessionResponse",
    "RatingSubmit",
    "ReviewResponse",
    "RatingSummary",
    "TransactionResponse",
    "DepositRequest",
    "BankAccountCreate",
    "BankAccountResponse",
    "WithdrawalRequest",
    "WithdrawalResponse",
    "CheckoutRequest",
    "StripeVerifyRequest",
    "PaystackVerifyRequest",
    "ConnectionRequestCreate",
    "ConnectionRequestUpdate",
    "MessageCreate",
    "ComplaintCreate",
    "ComplaintStatusUpdate",
]
