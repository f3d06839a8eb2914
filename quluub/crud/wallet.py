# quluub/crud/wallet.py
"""
Wallet CRUD Operations

Database operations for wallets and their transaction ledger.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from quluub import models
from quluub.models.wallet import TRANSACTION_COMPLETED, TRANSACTION_CREDIT


# =====================================
# WALLET CRUD OPERATIONS
# =====================================

def get_wallet_by_user_id(db: Session, user_id: int) -> Optional[models.Wallet]:
    """
    Retrieve a user's wallet.

    Args:
        db: Database session
        user_id: User ID

    Returns:
        Wallet object or None if not found
    """
    return db.query(models.Wallet).filter(models.Wallet.user_id == user_id).first()


def create_wallet(db: Session, user_id: int, currency: str = "USD") -> models.Wallet:
    """
    Create an empty wallet for a user.

    Args:
        db: Database session
        user_id: User ID
        currency: Display currency of the wallet

    Returns:
        Created Wallet object
    """
    wallet = models.Wallet(user_id=user_id, balance=Decimal("0.00"), currency=currency)
    db.add(wallet)
    db.flush()  # Get wallet ID without committing
    return wallet


# =====================================
# TRANSACTION CRUD OPERATIONS
# =====================================

def create_transaction(
    db: Session,
    wallet_id: int,
    amount: Decimal,
    transaction_type: str,
    description: str,
    status: str = TRANSACTION_COMPLETED,
    reference: Optional[str] = None,
    session_id: Optional[int] = None
) -> models.Transaction:
    """
    Create a new ledger entry.

    Args:
        db: Database session
        wallet_id: Wallet ID
        amount: Positive amount; direction is given by transaction_type
        transaction_type: "credit" or "debit"
        description: Human readable description
        status: pending, completed or failed
        reference: Optional provider/idempotency reference
        session_id: Optional session ID

    Returns:
        Created Transaction object
    """
    transaction = models.Transaction(
        wallet_id=wallet_id,
        session_id=session_id,
        amount=amount,
        type=transaction_type,
        status=status,
        description=description,
        reference=reference
    )
    db.add(transaction)
    db.flush()  # Get transaction ID
    return transaction


def get_transaction_by_reference(db: Session, reference: str) -> Optional[models.Transaction]:
    """
    Look up a transaction by its unique reference.

    Args:
        db: Database session
        reference: Provider or settlement reference

    Returns:
        Transaction object or None if not found
    """
    return db.query(models.Transaction).filter(
        models.Transaction.reference == reference
    ).first()


def get_wallet_transactions(
    db: Session,
    wallet_id: int,
    skip: int = 0,
    limit: int = 100
) -> List[models.Transaction]:
    """
    Get transaction history for a wallet, newest first.

    Args:
        db: Database session
        wallet_id: Wallet ID
        skip: Number of records to skip (pagination)
        limit: Maximum number of records to return

    Returns:
        List of Transaction objects
    """
    return db.query(models.Transaction).filter(
        models.Transaction.wallet_id == wallet_id
    ).order_by(
        models.Transaction.date.desc(), models.Transaction.id.desc()
    ).offset(skip).limit(limit).all()


def sum_completed_credits(
    db: Session,
    wallet_id: int,
    since: Optional[datetime] = None
) -> Decimal:
    """
    Sum of completed credit transactions, optionally from ``since`` onwards.

    Args:
        db: Database session
        wallet_id: Wallet ID
        since: Inclusive lower bound on transaction date

    Returns:
        Total as a Decimal (0 when there are no matching rows)
    """
    query = db.query(func.coalesce(func.sum(models.Transaction.amount), 0)).filter(
        models.Transaction.wallet_id == wallet_id,
        models.Transaction.type == TRANSACTION_CREDIT,
        models.Transaction.status == TRANSACTION_COMPLETED
    )
    if since is not None:
        query = query.filter(models.Transaction.date >= since)
    return Decimal(str(query.scalar() or 0))
