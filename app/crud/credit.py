# app/crud/credit.py
"""
Credit Ledger - CRUD Operations

Database helpers for user balances and credit transactions. Nothing in here
commits: callers own the transaction boundary.
"""

from sqlalchemy.orm import Session
from typing import Iterable, List, Optional

from app import models


# =====================================
# BALANCE ACCESS
# =====================================

def get_user(db: Session, user_id: int, for_update: bool = False) -> Optional[models.User]:
    """
    Retrieve a user row, optionally locking it for the rest of the transaction.

    Args:
        db: Database session
        user_id: User ID
        for_update: Take a row lock (SELECT ... FOR UPDATE) where supported

    Returns:
        User object or None if not found
    """
    query = db.query(models.User).filter(models.User.id == user_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_users_for_update(db: Session, user_ids: Iterable[int]) -> dict[int, models.User]:
    """Lock several user rows in ascending id order and return them keyed by id."""
    ids = sorted(set(user_ids))
    rows = (
        db.query(models.User)
        .filter(models.User.id.in_(ids))
        .order_by(models.User.id.asc())
        .with_for_update()
        .all()
    )
    return {user.id: user for user in rows}


def apply_balance_change(
    db: Session,
    user: models.User,
    amount: int,
    transaction_type: str,
    reason: str,
    related_user_id: Optional[int] = None,
    exchange_id: Optional[int] = None,
) -> models.CreditTransaction:
    """
    Move a user's balance by a signed amount and append the matching ledger row.

    The caller has already validated the amount against the balance.
    """
    user.time_credits = user.time_credits + amount
    transaction = models.CreditTransaction(
        user_id=user.id,
        amount=amount,
        balance_after=user.time_credits,
        transaction_type=transaction_type,
        reason=reason,
        related_user_id=related_user_id,
        exchange_id=exchange_id,
    )
    db.add(transaction)
    db.flush()  # Get transaction ID without committing
    return transaction


# =====================================
# TRANSACTION QUERIES
# =====================================

def get_user_transactions(
    db: Session,
    user_id: int,
    limit: Optional[int] = None,
    offset: int = 0
) -> List[models.CreditTransaction]:
    """
    Retrieve a user's ledger entries, newest first.

    Args:
        db: Database session
        user_id: User ID
        limit: Maximum number of transactions to return (None = all)
        offset: Number of transactions to skip

    Returns:
        List of CreditTransaction objects
    """
    query = db.query(models.CreditTransaction).filter(
        models.CreditTransaction.user_id == user_id
    ).order_by(
        models.CreditTransaction.created_at.desc(),
        models.CreditTransaction.id.desc(),
    )
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_exchange_transactions(db: Session, exchange_id: int) -> List[models.CreditTransaction]:
    return db.query(models.CreditTransaction).filter(
        models.CreditTransaction.exchange_id == exchange_id
    ).order_by(models.CreditTransaction.id.asc()).all()

