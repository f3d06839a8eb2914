from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quluub import models
from quluub.api.errors import service_errors
from quluub.database import get_db
from quluub.schemas.bank import (
    BankAccountCreate,
    BankAccountResponse,
    WithdrawalRequest,
    WithdrawalResponse,
)
from quluub.services import payout_service
from quluub.utils.security import get_current_user

router = APIRouter(prefix="/bank", tags=["Bank"])


@router.post("/account", response_model=BankAccountResponse)
def save_account(
    payload: BankAccountCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        return payout_service.save_bank_account(db, current_user, **payload.model_dump())


@router.get("/account", response_model=BankAccountResponse)
def get_account(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        return payout_service.get_bank_account(db, current_user)


@router.post("/withdraw")
def withdraw(
    payload: WithdrawalRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        result = payout_service.withdraw(db, current_user, payload.amount, payload.currency)
    return {
        "message": result["message"],
        "withdrawal": WithdrawalResponse.model_validate(result["withdrawal"]),
        "new_balance": result["new_balance"],
    }


@router.get("/withdrawals", response_model=List[WithdrawalResponse])
def list_withdrawals(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    with service_errors():
        return payout_service.list_withdrawals(db, current_user)
