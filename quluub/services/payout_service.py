# quluub/services/payout_service.py
"""
Payout Service

Counselor bank accounts and withdrawals to them through Paystack transfers.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.orm import Session

from quluub import models
from quluub.crud import bank as bank_crud
from quluub.integrations import ProviderError, paystack
from quluub.models.bank import (
    BANK_COUNTRIES,
    WITHDRAWAL_COMPLETED,
    WITHDRAWAL_FAILED,
    WITHDRAWAL_PENDING,
    WITHDRAWAL_PROCESSING,
)
from quluub.models.user import ROLE_COUNSELOR
from quluub.services import notification_service, wallet_service
from quluub.services.errors import NotFoundError, PermissionDeniedError, ServiceError
from quluub.utils.money import format_currency, to_minor_units, to_money

logger = logging.getLogger(__name__)

# Paystack transfer status -> withdrawal status
TRANSFER_STATUS = {
    "success": WITHDRAWAL_COMPLETED,
    "pending": WITHDRAWAL_PROCESSING,
    "otp": WITHDRAWAL_PENDING,
    "failed": WITHDRAWAL_FAILED,
}


def _require_counselor(user: models.User) -> None:
    if user.role != ROLE_COUNSELOR:
        raise PermissionDeniedError("Forbidden: Access is limited to counselors only.")


# ─────────────────────────────────────────────
# Bank accounts
# ─────────────────────────────────────────────

def save_bank_account(
    db: Session,
    user: models.User,
    *,
    bank_name: str,
    account_number: str,
    account_name: str,
    bank_code: Optional[str],
    country: str,
    client: Optional[httpx.Client] = None
) -> models.BankAccount:
    """
    Add or replace the counselor's bank account after Paystack resolves it.

    Raises:
        PermissionDeniedError: Caller is not a counselor
        ServiceError: Unsupported country or the resolved name does not match
        ProviderError: Paystack could not resolve the account
    """
    _require_counselor(user)

    country = (country or "").strip().upper()
    if country not in BANK_COUNTRIES:
        raise ServiceError("Country must be one of: NG, US")

    resolved = paystack.resolve_account(
        account_number=account_number,
        bank_code=bank_code or "",
        client=client
    )
    resolved_name = (resolved.get("account_name") or "").strip()
    if resolved_name.lower() != (account_name or "").strip().lower():
        raise ServiceError("Account name does not match the registered name with the bank.")

    account = bank_crud.get_account(db, user.id)
    if account is None:
        account = models.BankAccount(user_id=user.id)
        db.add(account)
    elif account.account_number != account_number or account.bank_code != bank_code:
        account.recipient_code = None

    account.bank_name = bank_name
    account.account_number = account_number
    account.account_name = resolved_name
    account.bank_code = bank_code
    account.country = country
    account.is_verified = True

    db.commit()
    db.refresh(account)
    logger.info("Bank account saved for counselor %s", user.id)
    return account


def get_bank_account(db: Session, user: models.User) -> models.BankAccount:
    _require_counselor(user)
    account = bank_crud.get_account(db, user.id)
    if account is None:
        raise NotFoundError("No bank account found for this user.")
    return account


# ─────────────────────────────────────────────
# Withdrawals
# ─────────────────────────────────────────────

def withdraw(
    db: Session,
    user: models.User,
    amount: Any,
    currency: Optional[str] = None,
    client: Optional[httpx.Client] = None
) -> Dict[str, Any]:
    """
    Move ``amount`` from the wallet to the counselor's bank account.

    The debit, withdrawal and ledger entry commit together only after
    Paystack accepts the transfer; on ProviderError everything is rolled
    back and the balance is untouched.
    """
    _require_counselor(user)

    try:
        value = to_money(amount)
    except (ArithmeticError, TypeError, ValueError):
        raise ServiceError("Amount must be a number")
    if value <= 0:
        raise ServiceError("Amount must be greater than zero")

    wallet = wallet_service.get_or_create_wallet(db, user.id)
    if to_money(wallet.balance or 0) < value:
        raise ServiceError("Insufficient funds.")

    account = bank_crud.get_account(db, user.id)
    if account is None:
        raise ServiceError("No bank account set up. Please add a bank account first.")

    currency = (currency or "NGN").strip().upper()

    try:
        debit = wallet_service.debit_wallet(db, wallet, value, description="Withdrawal to bank account")

        if not account.recipient_code:
            account.recipient_code = paystack.create_transfer_recipient(
                name=account.account_name,
                account_number=account.account_number,
                bank_code=account.bank_code or "",
                client=client
            )

        transfer = paystack.initiate_transfer(
            amount_kobo=to_minor_units(value),
            recipient=account.recipient_code,
            reason=f"Withdrawal for {user.email}",
            client=client
        )
    except ProviderError:
        db.rollback()
        logger.error("Withdrawal of %s for counselor %s failed at provider", value, user.id)
        raise

    transfer_code = transfer.get("transfer_code")
    debit.reference = transfer_code
    withdrawal = bank_crud.create_withdrawal(
        db,
        user_id=user.id,
        bank_account_id=account.id,
        amount=value,
        currency=currency,
        status=TRANSFER_STATUS.get(transfer.get("status"), WITHDRAWAL_PROCESSING),
        transaction_id=transfer_code,
    )
    db.commit()
    db.refresh(wallet)
    db.refresh(withdrawal)

    logger.info("Withdrawal %s of %s submitted for counselor %s", withdrawal.id, value, user.id)
    return {
        "message": "Withdrawal request submitted successfully.",
        "withdrawal": withdrawal,
        "new_balance": wallet.balance,
    }


def handle_transfer_event(db: Session, event_type: str, data: Dict[str, Any]) -> Optional[models.Withdrawal]:
    """
    Apply a Paystack transfer.* webhook to its withdrawal.

    Failed or reversed transfers refund the wallet once; repeated events for
    an already-final withdrawal change nothing.
    """
    transfer_code = data.get("transfer_code")
    withdrawal = bank_crud.get_withdrawal_by_transfer(db, transfer_code) if transfer_code else None
    if withdrawal is None:
        logger.error("Paystack webhook: withdrawal not found for transfer_code %s", transfer_code)
        return None

    if withdrawal.status in (WITHDRAWAL_COMPLETED, WITHDRAWAL_FAILED):
        logger.info("Withdrawal %s already %s", withdrawal.id, withdrawal.status)
        return withdrawal

    if event_type == "transfer.success":
        withdrawal.status = WITHDRAWAL_COMPLETED
        event, message = "withdrawal_completed", (
            f"Your withdrawal of {format_currency(withdrawal.amount, withdrawal.currency)} was completed."
        )
    else:
        withdrawal.status = WITHDRAWAL_FAILED
        withdrawal.failure_reason = data.get("reason") or data.get("failure_reason") or "Transfer was reversed by Paystack."
        wallet = wallet_service.get_or_create_wallet(db, withdrawal.user_id)
        wallet_service.credit_wallet(
            db,
            wallet,
            Decimal(withdrawal.amount),
            description="Refund for failed withdrawal",
            reference=f"refund-{transfer_code}"
        )
        event, message = "withdrawal_failed", (
            f"Your withdrawal of {format_currency(withdrawal.amount, withdrawal.currency)} failed "
            "and the amount was returned to your wallet."
        )

    notification = notification_service.create_notification(
        db,
        recipient_id=withdrawal.user_id,
        actor_id=None,
        session_id=None,
        event_type=event,
        message=message
    )
    db.commit()

    notification_service.dispatch_email_for_notification(db, notification)
    logger.info("Withdrawal %s updated to %s", withdrawal.id, withdrawal.status)
    return withdrawal


def list_withdrawals(db: Session, user: models.User):
    _require_counselor(user)
    return bank_crud.list_withdrawals(db, user.id)
