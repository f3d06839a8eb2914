from typing import List, Optional

from sqlalchemy.orm import Session

from quluub import models


def get_account(db: Session, user_id: int) -> Optional[models.BankAccount]:
    return db.query(models.BankAccount).filter(models.BankAccount.user_id == user_id).first()


def create_withdrawal(
    db: Session,
    *,
    user_id: int,
    bank_account_id: Optional[int],
    amount,
    currency: str,
    status: str,
    transaction_id: Optional[str] = None,
) -> models.Withdrawal:
    withdrawal = models.Withdrawal(
        user_id=user_id,
        bank_account_id=bank_account_id,
        amount=amount,
        currency=currency,
        status=status,
        transaction_id=transaction_id,
    )
    db.add(withdrawal)
    db.flush()
    return withdrawal


def get_withdrawal_by_transfer(db: Session, transfer_code: str) -> Optional[models.Withdrawal]:
    return db.query(models.Withdrawal).filter(
        models.Withdrawal.transaction_id == transfer_code
    ).first()


def list_withdrawals(db: Session, user_id: int) -> List[models.Withdrawal]:
    return db.query(models.Withdrawal).filter(
        models.Withdrawal.user_id == user_id
    ).order_by(models.Withdrawal.created_at.desc(), models.Withdrawal.id.desc()).all()
