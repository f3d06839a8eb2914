from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from quluub import models
from quluub.api.errors import service_errors
from quluub.crud import wallet as wallet_crud
from quluub.database import get_db
from quluub.models.user import ROLE_COUNSELOR
from quluub.schemas.wallet import DepositRequest, TransactionResponse
from quluub.services import wallet_service
from quluub.utils.money import format_currency
from quluub.utils.security import get_current_user

router = APIRouter(prefix="/wallet", tags=["Wallet"])


# ==========================
# WALLET
# ==========================

@router.get("/")
def get_wallet(
    limit: int = Query(100, ge=1, le=500),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Balance and transaction history; the wallet is created on first use."""
    wallet = wallet_service.get_or_create_wallet(db, current_user.id)
    db.commit()

    transactions = wallet_crud.get_wallet_transactions(db, wallet.id, limit=limit)
    return {
        "balance": wallet.balance,
        "formatted_balance": format_currency(wallet.balance, wallet.currency),
        "currency": wallet.currency,
        "transactions": [TransactionResponse.model_validate(t) for t in transactions],
    }


@router.post("/deposit")
def deposit(
    payload: DepositRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        return wallet_service.deposit(db, current_user.id, payload.reference, payload.amount)


@router.get("/counselor")
def counselor_earnings(
    period: Optional[str] = Query(None, description="today, week, month, year or total"),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if current_user.role != ROLE_COUNSELOR:
        raise HTTPException(status_code=403, detail="User not authorized")

    result = wallet_service.get_earnings(db, current_user.id)
    if period:
        if period not in wallet_service.EARNING_PERIODS:
            raise HTTPException(status_code=400, detail="Invalid period")
        result["period"] = period
        result["period_earnings"] = result["earnings"][period]
    return result
