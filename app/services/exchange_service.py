# app/services/exchange_service.py
"""
Exchange lifecycle - Business Logic Service

Every status change goes through one transition table and appends exactly
one ExchangeStatusHistory row in the same transaction. Completion also moves
credits from learner to offerer inside that transaction.

Flow:
1. Learner requests -> Pending
2. Offerer accepts / rejects
3. Either party cancels or reports a no-show
4. Offerer completes -> credits transferred
"""

import enum
import logging
import math
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional, Tuple

from sqlalchemy.orm import Session

from app import models
from app.crud import credit as credit_crud
from app.crud import exchange as exchange_crud
from app.database import unit_of_work
from app.exceptions import (
    ExchangeAuthorizationError,
    InvalidArgumentError,
    InvalidTransitionError,
    NotFoundError,
    SkillForgeError,
)
from app.models.exchange import ExchangeStatus
from app.services import credit_service, notification_service

logger = logging.getLogger(__name__)


class ExchangeAction(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
    COMPLETE = "complete"
    NO_SHOW = "no_show"


class ExchangeRole(str, enum.Enum):
    OFFERER = "offerer"
    LEARNER = "learner"


BOTH_PARTIES = frozenset({ExchangeRole.OFFERER, ExchangeRole.LEARNER})
OFFERER_ONLY = frozenset({ExchangeRole.OFFERER})

TRANSITIONS: Dict[Tuple[ExchangeStatus, ExchangeAction], Tuple[ExchangeStatus, FrozenSet[ExchangeRole]]] = {
    (ExchangeStatus.PENDING, ExchangeAction.ACCEPT): (ExchangeStatus.ACCEPTED, OFFERER_ONLY),
    (ExchangeStatus.PENDING, ExchangeAction.REJECT): (ExchangeStatus.REJECTED, OFFERER_ONLY),
    (ExchangeStatus.PENDING, ExchangeAction.CANCEL): (ExchangeStatus.CANCELLED, BOTH_PARTIES),
    (ExchangeStatus.ACCEPTED, ExchangeAction.CANCEL): (ExchangeStatus.CANCELLED, BOTH_PARTIES),
    (ExchangeStatus.ACCEPTED, ExchangeAction.COMPLETE): (ExchangeStatus.COMPLETED, OFFERER_ONLY),
    (ExchangeStatus.ACCEPTED, ExchangeAction.NO_SHOW): (ExchangeStatus.NO_SHOW, BOTH_PARTIES),
}

# Status each action aims for, used to name the target in rejection messages
ACTION_TARGETS: Dict[ExchangeAction, ExchangeStatus] = {
    ExchangeAction.ACCEPT: ExchangeStatus.ACCEPTED,
    ExchangeAction.REJECT: ExchangeStatus.REJECTED,
    ExchangeAction.CANCEL: ExchangeStatus.CANCELLED,
    ExchangeAction.COMPLETE: ExchangeStatus.COMPLETED,
    ExchangeAction.NO_SHOW: ExchangeStatus.NO_SHOW,
}

TERMINAL_STATUSES = frozenset({
    ExchangeStatus.COMPLETED,
    ExchangeStatus.CANCELLED,
    ExchangeStatus.NO_SHOW,
    ExchangeStatus.REJECTED,
})

DEFAULT_REASONS = {
    ExchangeAction.ACCEPT: "Exchange accepted",
    ExchangeAction.REJECT: "Exchange rejected",
    ExchangeAction.CANCEL: "Exchange cancelled",
    ExchangeAction.NO_SHOW: "Marked as no-show",
}


# ======================
# TRANSITION RULES
# ======================

def is_terminal(status: ExchangeStatus) -> bool:
    return ExchangeStatus(status) in TERMINAL_STATUSES


def resolve_transition(
    status: ExchangeStatus,
    action: ExchangeAction,
    role: Optional[ExchangeRole],
) -> ExchangeStatus:
    """
    Next status for `action` taken by `role` on an exchange in `status`.

    A role of None means the acting user is not a participant; that is
    rejected before the table is consulted.

    Raises:
        ExchangeAuthorizationError: non-participant, or role not allowed
        InvalidTransitionError: no such (status, action) pair
    """
    status = ExchangeStatus(status)
    action = ExchangeAction(action)
    if role is None:
        raise ExchangeAuthorizationError(
            "Only the offerer or learner can change this exchange",
            details={"action": action.value},
        )
    rule = TRANSITIONS.get((status, action))
    if rule is None:
        raise InvalidTransitionError(status.value, ACTION_TARGETS[action].value)
    next_status, allowed_roles = rule
    if ExchangeRole(role) not in allowed_roles:
        raise ExchangeAuthorizationError(
            f"The {ExchangeRole(role).value} cannot {action.value.replace('_', '-')} this exchange",
            details={"action": action.value, "role": ExchangeRole(role).value},
        )
    return next_status


def role_of(exchange: models.SkillExchange, user_id: int) -> Optional[ExchangeRole]:
    if exchange.offerer_id == user_id:
        return ExchangeRole.OFFERER
    if exchange.learner_id == user_id:
        return ExchangeRole.LEARNER
    return None


def _counterparty_id(exchange: models.SkillExchange, user_id: int) -> int:
    return exchange.offerer_id if exchange.learner_id == user_id else exchange.learner_id


def _skill_name(exchange: models.SkillExchange) -> str:
    return exchange.skill.name if exchange.skill else f"skill #{exchange.skill_id}"


# ======================
# QUERIES
# ======================

def get_exchange(db: Session, exchange_id: int) -> models.SkillExchange:
    exchange = exchange_crud.get_exchange(db, exchange_id)
    if exchange is None:
        raise NotFoundError("Exchange not found", details={"exchange_id": exchange_id})
    return exchange


def get_user_exchanges(
    db: Session,
    user_id: int,
    status: Optional[ExchangeStatus] = None,
) -> List[models.SkillExchange]:
    if status is not None:
        status = ExchangeStatus(status)
    return exchange_crud.get_user_exchanges(db, user_id, status=status)


def get_exchange_status_history(db: Session, exchange_id: int) -> List[models.ExchangeStatusHistory]:
    """History rows for an exchange, oldest first."""
    return exchange_crud.get_status_history(db, exchange_id)


# ======================
# CREATE
# ======================

def create_exchange(
    db: Session,
    learner_id: int,
    offerer_id: int,
    skill_id: int,
    scheduled_at: datetime,
    duration: float,
    notes: Optional[str] = None,
    meeting_link: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> models.SkillExchange:
    """Request an exchange as the learner. Starts Pending with one history row."""
    if learner_id == offerer_id:
        raise InvalidArgumentError(
            "Cannot request an exchange with yourself",
            details={"user_id": learner_id},
        )
    if duration is None or not math.isfinite(duration) or duration <= 0:
        raise InvalidArgumentError(
            "Duration must be a positive number of hours", details={"duration": duration}
        )

    with unit_of_work(db):
        if credit_crud.get_user(db, learner_id) is None:
            raise NotFoundError("Learner not found", details={"user_id": learner_id})
        if credit_crud.get_user(db, offerer_id) is None:
            raise NotFoundError("Offerer not found", details={"user_id": offerer_id})
        skill = db.query(models.Skill).filter(models.Skill.id == skill_id).first()
        if skill is None:
            raise NotFoundError("Skill not found", details={"skill_id": skill_id})

        exchange = exchange_crud.create_exchange(
            db,
            learner_id=learner_id,
            offerer_id=offerer_id,
            skill_id=skill_id,
            scheduled_at=scheduled_at,
            duration=duration,
            notes=notes,
            meeting_link=meeting_link,
        )
        exchange_crud.append_status_history(
            db,
            exchange_id=exchange.id,
            from_status=None,
            to_status=ExchangeStatus.PENDING,
            changed_by=learner_id,
            reason="Exchange created",
            user_agent=user_agent,
        )

    logger.info(
        "Exchange %s requested by learner %s from offerer %s for skill %s",
        exchange.id, learner_id, offerer_id, skill_id,
    )
    notification_service.notify_exchange_status_changed(
        db,
        recipient_id=offerer_id,
        actor_id=learner_id,
        exchange_id=exchange.id,
        status=ExchangeStatus.PENDING.value,
        message=f"New exchange request for {skill.name}.",
    )
    return exchange


# ======================
# TRANSITIONS
# ======================

def _apply_action(
    db: Session,
    exchange_id: int,
    acting_user_id: int,
    action: ExchangeAction,
    reason: Optional[str],
    user_agent: Optional[str],
) -> models.SkillExchange:
    try:
        with unit_of_work(db):
            exchange = exchange_crud.get_exchange(db, exchange_id, for_update=True)
            if exchange is None:
                raise NotFoundError("Exchange not found", details={"exchange_id": exchange_id})
            previous = ExchangeStatus(exchange.status)
            next_status = resolve_transition(previous, action, role_of(exchange, acting_user_id))

            exchange.status = next_status
            exchange_crud.append_status_history(
                db,
                exchange_id=exchange.id,
                from_status=previous,
                to_status=next_status,
                changed_by=acting_user_id,
                reason=reason or DEFAULT_REASONS[action],
                user_agent=user_agent,
            )
    except SkillForgeError as exc:
        logger.warning(
            "Exchange %s: %s by user %s rejected: %s",
            exchange_id, action.value, acting_user_id, exc.message,
        )
        raise

    logger.info(
        "Exchange %s moved %s -> %s by user %s",
        exchange.id, previous.value, next_status.value, acting_user_id,
    )
    notification_service.notify_exchange_status_changed(
        db,
        recipient_id=_counterparty_id(exchange, acting_user_id),
        actor_id=acting_user_id,
        exchange_id=exchange.id,
        status=next_status.value,
        message=f"Your exchange for {_skill_name(exchange)} is now {next_status.value}.",
    )
    return exchange


def accept_exchange(db: Session, exchange_id: int, acting_user_id: int,
                    reason: Optional[str] = None, user_agent: Optional[str] = None) -> models.SkillExchange:
    return _apply_action(db, exchange_id, acting_user_id, ExchangeAction.ACCEPT, reason, user_agent)


def reject_exchange(db: Session, exchange_id: int, acting_user_id: int,
                    reason: Optional[str] = None, user_agent: Optional[str] = None) -> models.SkillExchange:
    return _apply_action(db, exchange_id, acting_user_id, ExchangeAction.REJECT, reason, user_agent)


def cancel_exchange(db: Session, exchange_id: int, acting_user_id: int,
                    reason: Optional[str] = None, user_agent: Optional[str] = None) -> models.SkillExchange:
    return _apply_action(db, exchange_id, acting_user_id, ExchangeAction.CANCEL, reason, user_agent)


def mark_as_no_show(db: Session, exchange_id: int, acting_user_id: int,
                    reason: Optional[str] = None, user_agent: Optional[str] = None) -> models.SkillExchange:
    return _apply_action(db, exchange_id, acting_user_id, ExchangeAction.NO_SHOW, reason, user_agent)


def complete_exchange(
    db: Session,
    exchange_id: int,
    acting_user_id: int,
    user_agent: Optional[str] = None,
) -> models.SkillExchange:
    """
    Offerer confirms the exchange took place.

    The learner pays credits_for_duration(duration) to the offerer. The
    transfer, the status change and the history row commit together; if the
    learner cannot pay, nothing changes.
    """
    try:
        with unit_of_work(db):
            exchange = exchange_crud.get_exchange(db, exchange_id, for_update=True)
            if exchange is None:
                raise NotFoundError("Exchange not found", details={"exchange_id": exchange_id})
            previous = ExchangeStatus(exchange.status)
            next_status = resolve_transition(
                previous, ExchangeAction.COMPLETE, role_of(exchange, acting_user_id)
            )

            amount = credit_service.credits_for_duration(exchange.duration)
            debit, credit = credit_service.record_transfer(
                db,
                exchange.learner_id,
                exchange.offerer_id,
                amount,
                f"Exchange completion: {_skill_name(exchange)}",
                exchange_id=exchange.id,
            )

            exchange.status = next_status
            exchange_crud.append_status_history(
                db,
                exchange_id=exchange.id,
                from_status=previous,
                to_status=next_status,
                changed_by=acting_user_id,
                reason=f"Exchange completed with credit transfer of {amount} credit(s)",
                user_agent=user_agent,
            )
    except SkillForgeError as exc:
        logger.warning(
            "Exchange %s: complete by user %s rejected: %s",
            exchange_id, acting_user_id, exc.message,
        )
        raise

    logger.info(
        "Exchange %s completed by user %s; %s credit(s) moved from %s to %s",
        exchange.id, acting_user_id, amount, exchange.learner_id, exchange.offerer_id,
    )
    notification_service.notify_exchange_status_changed(
        db,
        recipient_id=exchange.learner_id,
        actor_id=acting_user_id,
        exchange_id=exchange.id,
        status=ExchangeStatus.COMPLETED.value,
        message=f"Your exchange for {_skill_name(exchange)} is complete. {amount} credit(s) were transferred.",
    )
    credit_service.notify_transfer(db, debit, credit)
    return exchange
