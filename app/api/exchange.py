# app/api/exchange.py
"""
Exchange lifecycle API

Endpoints:
- POST /exchanges/ - Request an exchange (caller is the learner)
- GET /exchanges/ - Caller's exchanges, optionally by status
- GET /exchanges/{exchange_id} - One exchange
- GET /exchanges/{exchange_id}/history - Status history, oldest first
- POST /exchanges/{exchange_id}/accept|reject|cancel|no-show|complete
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.exchange import ExchangeStatus
from app.models.user import User
from app.schemas.exchange import (
    ExchangeCreate,
    ExchangeResponse,
    ExchangeStatusChange,
    ExchangeStatusHistoryResponse,
)
from app.services import exchange_service
from app.utils.security import get_current_user

router = APIRouter(prefix="/exchanges", tags=["exchanges"])


def _user_agent(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    return request.headers.get("user-agent")


def _reason(body: Optional[ExchangeStatusChange]) -> Optional[str]:
    return body.reason if body else None


def _get_participant_exchange(db: Session, exchange_id: int, user: User):
    exchange = exchange_service.get_exchange(db, exchange_id)
    if user.id not in (exchange.offerer_id, exchange.learner_id):
        raise HTTPException(status_code=403, detail="Not a participant in this exchange")
    return exchange


# ======================
# CREATE & LIST
# ======================
@router.post("/", response_model=ExchangeResponse, status_code=201)
def create_exchange(
    payload: ExchangeCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return exchange_service.create_exchange(
        db,
        learner_id=current_user.id,
        offerer_id=payload.offerer_id,
        skill_id=payload.skill_id,
        scheduled_at=payload.scheduled_at,
        duration=payload.duration,
        notes=payload.notes,
        meeting_link=payload.meeting_link,
        user_agent=_user_agent(request),
    )


@router.get("/", response_model=List[ExchangeResponse])
def list_my_exchanges(
    status: Optional[ExchangeStatus] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return exchange_service.get_user_exchanges(db, current_user.id, status=status)


@router.get("/{exchange_id}", response_model=ExchangeResponse)
def get_exchange(
    exchange_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _get_participant_exchange(db, exchange_id, current_user)


@router.get("/{exchange_id}/history", response_model=List[ExchangeStatusHistoryResponse])
def get_exchange_history(
    exchange_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _get_participant_exchange(db, exchange_id, current_user)
    return exchange_service.get_exchange_status_history(db, exchange_id)


# ======================
# TRANSITIONS
# ======================
@router.post("/{exchange_id}/accept", response_model=ExchangeResponse)
def accept_exchange(
    exchange_id: int,
    request: Request,
    body: Optional[ExchangeStatusChange] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return exchange_service.accept_exchange(
        db, exchange_id, current_user.id, reason=_reason(body), user_agent=_user_agent(request)
    )


@router.post("/{exchange_id}/reject", response_model=ExchangeResponse)
def reject_exchange(
    exchange_id: int,
    request: Request,
    body: Optional[ExchangeStatusChange] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return exchange_service.reject_exchange(
        db, exchange_id, current_user.id, reason=_reason(body), user_agent=_user_agent(request)
    )


@router.post("/{exchange_id}/cancel", response_model=ExchangeResponse)
def cancel_exchange(
    exchange_id: int,
    request: Request,
    body: Optional[ExchangeStatusChange] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return exchange_service.cancel_exchange(
        db, exchange_id, current_user.id, reason=_reason(body), user_agent=_user_agent(request)
    )


@router.post("/{exchange_id}/no-show", response_model=ExchangeResponse)
def mark_no_show(
    exchange_id: int,
    request: Request,
    body: Optional[ExchangeStatusChange] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return exchange_service.mark_as_no_show(
        db, exchange_id, current_user.id, reason=_reason(body), user_agent=_user_agent(request)
    )


@router.post("/{exchange_id}/complete", response_model=ExchangeResponse)
def complete_exchange(
    exchange_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Offerer confirms the exchange; the learner's credits move to the offerer."""
    return exchange_service.complete_exchange(
        db, exchange_id, current_user.id, user_agent=_user_agent(request)
    )
