# app/services/credit_service.py
"""
Credit Ledger - Business Logic Service

Owns every change to a user's time-credit balance. Each change appends an
immutable CreditTransaction whose balance_after is the authoritative balance
at that point; User.time_credits is the materialized current value.
"""

import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from app import models
from app.crud import credit as credit_crud
from app.database import unit_of_work
from app.exceptions import (
    InsufficientCreditsError,
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    SkillForgeError,
)
from app.models.credit import CreditTransactionType
from app.services import notification_service

logger = logging.getLogger(__name__)


# =====================================
# CREDIT POLICY
# =====================================

class CreditPolicy:
    """Time credit economy rules."""
    CREDITS_PER_HOUR = 1
    MINIMUM_EXCHANGE_CREDITS = 1


def credits_for_duration(hours: float) -> int:
    """
    Whole credits owed for an exchange of the given length.

    Hours are converted through their decimal string form and rounded half-up,
    so 1.5 h costs 2 credits and 1.25 h costs 1. Any positive duration costs at
    least one credit.
    """
    if hours is None or not math.isfinite(hours) or hours <= 0:
        raise InvalidArgumentError("Duration must be a positive number of hours", details={"duration": hours})
    raw = Decimal(str(hours)) * CreditPolicy.CREDITS_PER_HOUR
    credits = int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(credits, CreditPolicy.MINIMUM_EXCHANGE_CREDITS)


def _validate_amount(amount: int) -> None:
    if amount is None or amount <= 0:
        raise InvalidArgumentError("Amount must be positive", details={"amount": amount})


# =====================================
# TRANSFERS
# =====================================

def _check_exchange_settlement(db: Session, exchange_id: int, from_user_id: int, to_user_id: int) -> None:
    """An exchange is paid once, by its learner, to its offerer."""
    exchange = db.query(models.SkillExchange).filter(models.SkillExchange.id == exchange_id).first()
    if exchange is None:
        raise NotFoundError("Exchange not found", details={"exchange_id": exchange_id})
    if (from_user_id, to_user_id) != (exchange.learner_id, exchange.offerer_id):
        raise InvalidOperationError(
            "Only the exchange learner can pay the exchange offerer",
            details={"exchange_id": exchange_id},
        )
    if credit_crud.get_exchange_transactions(db, exchange_id):
        raise InvalidOperationError(
            "Exchange credits have already been settled",
            details={"exchange_id": exchange_id},
        )


def record_transfer(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    amount: int,
    reason: str,
    exchange_id: Optional[int] = None,
) -> tuple[models.CreditTransaction, models.CreditTransaction]:
    """
    Validate and stage a transfer inside the caller's transaction.

    Nothing is committed here. Exchange completion uses this directly so the
    status change, its history row and both ledger rows share one commit.

    Returns:
        (debit transaction, credit transaction)

    Raises:
        InvalidArgumentError: self-transfer or non-positive amount
        NotFoundError: either user (or the given exchange) is missing
        InvalidOperationError: exchange_id names another pair or is already settled
        InsufficientCreditsError: sender balance below amount
    """
    if from_user_id == to_user_id:
        raise InvalidArgumentError(
            "Cannot transfer credits to yourself",
            details={"user_id": from_user_id},
        )
    _validate_amount(amount)

    users = credit_crud.get_users_for_update(db, [from_user_id, to_user_id])
    from_user = users.get(from_user_id)
    to_user = users.get(to_user_id)
    if from_user is None or to_user is None:
        raise NotFoundError(
            "One or both users not found",
            details={"from_user_id": from_user_id, "to_user_id": to_user_id},
        )

    if exchange_id is not None:
        _check_exchange_settlement(db, exchange_id, from_user_id, to_user_id)

    if from_user.time_credits < amount:
        raise InsufficientCreditsError(required=amount, available=from_user.time_credits)

    debit = credit_crud.apply_balance_change(
        db,
        from_user,
        -amount,
        CreditTransactionType.EXCHANGE_COMPLETION,
        reason,
        related_user_id=to_user.id,
        exchange_id=exchange_id,
    )
    credit = credit_crud.apply_balance_change(
        db,
        to_user,
        amount,
        CreditTransactionType.EXCHANGE_COMPLETION,
        reason,
        related_user_id=from_user.id,
        exchange_id=exchange_id,
    )
    return debit, credit


def transfer_credits(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    amount: int,
    reason: str,
    exchange_id: Optional[int] = None,
) -> bool:
    """
    Move credits between two users as one atomic unit.

    Both balance updates and both ledger rows commit together or not at all.
    """
    try:
        with unit_of_work(db):
            debit, credit = record_transfer(
                db, from_user_id, to_user_id, amount, reason, exchange_id=exchange_id
            )
    except SkillForgeError as exc:
        logger.warning(
            "Credit transfer %s -> %s of %s rejected: %s",
            from_user_id, to_user_id, amount, exc.message,
        )
        raise

    logger.info(
        "Transferred %s credits from user %s to user %s (exchange=%s)",
        amount, from_user_id, to_user_id, exchange_id,
    )
    notify_transfer(db, debit, credit)
    return True


def notify_transfer(
    db: Session,
    debit: models.CreditTransaction,
    credit: models.CreditTransaction,
) -> None:
    """Best-effort notice to both sides of a committed transfer."""
    amount = credit.amount
    notification_service.dispatch_notification(
        db,
        recipient_id=credit.user_id,
        actor_id=debit.user_id,
        exchange_id=credit.exchange_id,
        event_type="credits_transferred",
        message=f"You received {amount} credit(s). New balance: {credit.balance_after}.",
    )
    notification_service.dispatch_notification(
        db,
        recipient_id=debit.user_id,
        actor_id=credit.user_id,
        exchange_id=debit.exchange_id,
        event_type="credits_transferred",
        message=f"{amount} credit(s) were transferred from your balance. New balance: {debit.balance_after}.",
    )


# =====================================
# ADMIN ADJUSTMENTS
# =====================================

def _adjust(db: Session, user_id: int, signed_amount: int, reason: str) -> models.CreditTransaction:
    with unit_of_work(db):
        user = credit_crud.get_user(db, user_id, for_update=True)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        if signed_amount < 0 and user.time_credits < -signed_amount:
            raise InsufficientCreditsError(required=-signed_amount, available=user.time_credits)
        transaction = credit_crud.apply_balance_change(
            db,
            user,
            signed_amount,
            CreditTransactionType.ADMIN_ADJUSTMENT,
            reason,
        )
    logger.info(
        "Admin adjustment of %s credits for user %s (balance now %s)",
        signed_amount, user_id, transaction.balance_after,
    )
    notification_service.dispatch_notification(
        db,
        recipient_id=user_id,
        actor_id=None,
        exchange_id=None,
        event_type="credits_adjusted",
        message=f"Your credit balance was adjusted by {signed_amount}: {reason}",
    )
    return transaction


def add_credits(db: Session, user_id: int, amount: int, reason: str) -> bool:
    _validate_amount(amount)
    _adjust(db, user_id, amount, reason)
    return True


def deduct_credits(db: Session, user_id: int, amount: int, reason: str) -> bool:
    _validate_amount(amount)
    _adjust(db, user_id, -amount, reason)
    return True


# =====================================
# READ PATHS
# =====================================

def get_user_credits(db: Session, user_id: int) -> int:
    """Current balance; 0 for an unknown user rather than an error."""
    user = credit_crud.get_user(db, user_id)
    if user is None:
        return 0
    return user.time_credits


def get_user_credit_history(
    db: Session,
    user_id: int,
    limit: Optional[int] = None,
) -> List[models.CreditTransaction]:
    """Ledger entries newest first; empty for an unknown user or no history."""
    if limit is not None and limit <= 0:
        return []
    return credit_crud.get_user_transactions(db, user_id, limit=limit)
