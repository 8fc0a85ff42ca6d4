# app/api/credits.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.credit import CreditBalanceResponse, CreditTransactionResponse, CreditTransferRequest
from app.services import credit_service
from app.utils.security import get_current_user

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("/balance", response_model=CreditBalanceResponse)
def get_balance(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return CreditBalanceResponse(
        user_id=current_user.id,
        time_credits=credit_service.get_user_credits(db, current_user.id),
    )


@router.get("/history", response_model=List[CreditTransactionResponse])
def get_history(
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return credit_service.get_user_credit_history(db, current_user.id, limit=limit)


@router.post("/transfer", response_model=CreditBalanceResponse)
def transfer(
    payload: CreditTransferRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Send credits from the caller to another user. Exchange settlement happens on completion only."""
    credit_service.transfer_credits(
        db,
        current_user.id,
        payload.to_user_id,
        payload.amount,
        payload.reason,
    )
    return CreditBalanceResponse(
        user_id=current_user.id,
        time_credits=credit_service.get_user_credits(db, current_user.id),
    )
