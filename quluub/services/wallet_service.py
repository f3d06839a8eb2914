# quluub/services/wallet_service.py
"""
Wallet Service

Business rules for wallet balances: lazy creation, credits and debits with
a ledger entry each, Paystack-verified deposits and counselor earnings.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.orm import Session

from quluub import models
from quluub.crud import wallet as wallet_crud
from quluub.integrations import paystack
from quluub.models.wallet import TRANSACTION_CREDIT, TRANSACTION_DEBIT
from quluub.services.errors import ConflictError
from quluub.utils.dates import utcnow
from quluub.utils.money import Number, to_minor_units, to_money

logger = logging.getLogger(__name__)

EARNING_PERIODS = ("today", "week", "month", "year", "total")


# =====================================
# WALLET OPERATIONS
# =====================================

def get_or_create_wallet(db: Session, user_id: int) -> models.Wallet:
    """
    Return the user's wallet, creating an empty one on first use.

    The new wallet is flushed, not committed; callers own the transaction.
    """
    wallet = wallet_crud.get_wallet_by_user_id(db, user_id)
    if wallet is None:
        wallet = wallet_crud.create_wallet(db, user_id)
    return wallet


def credit_wallet(
    db: Session,
    wallet: models.Wallet,
    amount: Number,
    description: str,
    reference: Optional[str] = None,
    session_id: Optional[int] = None
) -> models.Transaction:
    """
    Add ``amount`` to the wallet and record a completed credit.

    Raises:
        ValueError: If the amount is not positive
    """
    value = to_money(amount)
    if value <= 0:
        raise ValueError("Amount must be greater than zero")

    wallet.balance = to_money(wallet.balance or 0) + value
    return wallet_crud.create_transaction(
        db=db,
        wallet_id=wallet.id,
        amount=value,
        transaction_type=TRANSACTION_CREDIT,
        description=description,
        reference=reference,
        session_id=session_id
    )


def debit_wallet(
    db: Session,
    wallet: models.Wallet,
    amount: Number,
    description: str,
    reference: Optional[str] = None
) -> models.Transaction:
    """
    Remove ``amount`` from the wallet and record a completed debit.

    Raises:
        ValueError: If the amount is not positive or exceeds the balance
    """
    value = to_money(amount)
    if value <= 0:
        raise ValueError("Amount must be greater than zero")

    balance = to_money(wallet.balance or 0)
    if value > balance:
        raise ValueError("Insufficient balance")

    wallet.balance = balance - value
    return wallet_crud.create_transaction(
        db=db,
        wallet_id=wallet.id,
        amount=value,
        transaction_type=TRANSACTION_DEBIT,
        description=description,
        reference=reference
    )


# =====================================
# DEPOSITS
# =====================================

def deposit(
    db: Session,
    user_id: int,
    reference: Optional[str],
    amount: Optional[Number],
    client: Optional[httpx.Client] = None
) -> Dict[str, Any]:
    """
    Credit a wallet after Paystack confirms the payment behind ``reference``.

    Args:
        db: Database session
        user_id: Wallet owner
        reference: Paystack transaction reference
        amount: Amount the client claims to have paid, in major units
        client: Optional httpx client for the provider call

    Returns:
        Dictionary with the new balance and the transaction id

    Raises:
        ValueError: Missing fields or failed verification
        ConflictError: The reference was already credited
        ProviderError: Paystack could not be reached
    """
    reference = (reference or "").strip()
    if not reference or amount is None:
        raise ValueError("Reference and amount are required")

    value = to_money(amount)
    if value <= 0:
        raise ValueError("Amount must be greater than zero")

    # Session checkouts share the Paystack reference space with deposits
    session_payment = db.query(models.Session).filter(
        models.Session.payment_reference == reference
    ).first()
    if session_payment or wallet_crud.get_transaction_by_reference(db, reference):
        raise ConflictError("Transaction already processed")

    data = paystack.verify_transaction(reference, client=client)
    if data.get("status") != "success" or int(data.get("amount") or 0) != to_minor_units(value):
        logger.warning("Deposit verification failed for reference %s", reference)
        raise ValueError("Payment verification failed")

    wallet = get_or_create_wallet(db, user_id)
    transaction = credit_wallet(
        db,
        wallet,
        value,
        description="Wallet deposit",
        reference=reference
    )
    db.commit()
    db.refresh(wallet)

    logger.info("Credited wallet %s with deposit %s", wallet.id, reference)
    return {
        "message": "Deposit successful",
        "balance": wallet.balance,
        "transaction_id": transaction.id,
    }


# =====================================
# EARNINGS
# =====================================

def period_start(period: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Start of a reporting period; weeks begin on Sunday. ``total`` has no start.

    Raises:
        ValueError: If the period is unknown
    """
    if period not in EARNING_PERIODS:
        raise ValueError(f"Period must be one of: {', '.join(EARNING_PERIODS)}")

    today = (now or utcnow()).replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "today":
        return today
    if period == "week":
        # Python weekday(): Monday=0 ... Sunday=6
        return today - timedelta(days=(today.weekday() + 1) % 7)
    if period == "month":
        return today.replace(day=1)
    if period == "year":
        return today.replace(month=1, day=1)
    return None


def get_earnings(db: Session, user_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Balance plus completed credits for every reporting period."""
    wallet = get_or_create_wallet(db, user_id)
    db.commit()

    earnings: Dict[str, Decimal] = {}
    for period in EARNING_PERIODS:
        earnings[period] = wallet_crud.sum_completed_credits(
            db, wallet.id, since=period_start(period, now)
        )

    return {
        "balance": wallet.balance,
        "currency": wallet.currency,
        "earnings": earnings,
    }
