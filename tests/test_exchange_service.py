"""
Exchange lifecycle tests: status history on every change, role checks,
and completion paying the offerer in the same transaction.
"""

from datetime import datetime, timedelta

import pytest

from app.crud import credit as credit_crud
from app.exceptions import (
    ExchangeAuthorizationError,
    InsufficientCreditsError,
    InvalidArgumentError,
    InvalidOperationError,
    InvalidTransitionError,
    NotFoundError,
)
from app.models.credit import CreditTransaction
from app.models.exchange import ExchangeStatus, ExchangeStatusHistory
from app.models.notification import Notification
from app.models.skill import Skill
from app.models.user import User
from app.services import credit_service, exchange_service, notification_service


def _create_user(db, email: str, credits: int = 10) -> User:
    user = User(
        name=email.split("@")[0].title(),
        email=email,
        password_hash="hash",
        time_credits=credits,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _create_skill(db, name: str = "Python", category: str = "Programming") -> Skill:
    skill = Skill(name=name, category=category, description=f"{name} basics")
    db.add(skill)
    db.commit()
    db.refresh(skill)
    return skill


@pytest.fixture
def parties(db_session):
    """Offerer teaches, learner pays."""
    offerer = _create_user(db_session, "offerer@test.com", credits=5)
    learner = _create_user(db_session, "learner@test.com", credits=10)
    outsider = _create_user(db_session, "outsider@test.com", credits=10)
    skill = _create_skill(db_session)
    return {"offerer": offerer, "learner": learner, "outsider": outsider, "skill": skill}


def _request(db, parties, duration: float = 2.0):
    return exchange_service.create_exchange(
        db,
        learner_id=parties["learner"].id,
        offerer_id=parties["offerer"].id,
        skill_id=parties["skill"].id,
        scheduled_at=datetime.now() + timedelta(days=1),
        duration=duration,
        notes="Looking forward to it",
    )


def _accepted(db, parties, duration: float = 2.0):
    exchange = _request(db, parties, duration=duration)
    return exchange_service.accept_exchange(db, exchange.id, parties["offerer"].id)


def _history_count(db, exchange) -> int:
    return db.query(ExchangeStatusHistory).filter(
        ExchangeStatusHistory.exchange_id == exchange.id
    ).count()


# ======================
# CREATE
# ======================

def test_create_exchange_starts_pending_with_creation_history(db_session, parties):
    exchange = _request(db_session, parties)

    assert exchange.status == ExchangeStatus.PENDING
    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert len(history) == 1
    assert history[0].from_status is None
    assert history[0].to_status == ExchangeStatus.PENDING
    assert history[0].changed_by == parties["learner"].id
    assert history[0].reason == "Exchange created"


def test_create_exchange_notifies_offerer(db_session, parties):
    exchange = _request(db_session, parties)

    notes = db_session.query(Notification).filter(
        Notification.recipient_id == parties["offerer"].id
    ).all()
    assert len(notes) == 1
    assert notes[0].event_type == "exchange_requested"
    assert notes[0].exchange_id == exchange.id


def test_create_exchange_records_user_agent(db_session, parties):
    exchange = exchange_service.create_exchange(
        db_session,
        learner_id=parties["learner"].id,
        offerer_id=parties["offerer"].id,
        skill_id=parties["skill"].id,
        scheduled_at=datetime.now(),
        duration=1.0,
        user_agent="pytest-agent/1.0",
    )
    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert history[0].user_agent == "pytest-agent/1.0"


def test_create_exchange_with_self_is_rejected(db_session, parties):
    with pytest.raises(InvalidArgumentError):
        exchange_service.create_exchange(
            db_session,
            learner_id=parties["offerer"].id,
            offerer_id=parties["offerer"].id,
            skill_id=parties["skill"].id,
            scheduled_at=datetime.now(),
            duration=1.0,
        )


@pytest.mark.parametrize("duration", [0, -1.5, float("inf"), float("nan")])
def test_create_exchange_requires_positive_finite_duration(db_session, parties, duration):
    with pytest.raises(InvalidArgumentError):
        _request(db_session, parties, duration=duration)


def test_create_exchange_with_unknown_skill_or_user(db_session, parties):
    with pytest.raises(NotFoundError):
        exchange_service.create_exchange(
            db_session,
            learner_id=parties["learner"].id,
            offerer_id=parties["offerer"].id,
            skill_id=999,
            scheduled_at=datetime.now(),
            duration=1.0,
        )
    with pytest.raises(NotFoundError):
        exchange_service.create_exchange(
            db_session,
            learner_id=parties["learner"].id,
            offerer_id=999,
            skill_id=parties["skill"].id,
            scheduled_at=datetime.now(),
            duration=1.0,
        )
    assert exchange_service.get_user_exchanges(db_session, parties["learner"].id) == []


# ======================
# TRANSITIONS
# ======================

def test_accept_records_history_with_reason(db_session, parties):
    exchange = _request(db_session, parties)

    result = exchange_service.accept_exchange(
        db_session, exchange.id, parties["offerer"].id, reason="Accepted with notes"
    )

    assert result.status == ExchangeStatus.ACCEPTED
    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert len(history) == 2
    assert history[-1].from_status == ExchangeStatus.PENDING
    assert history[-1].to_status == ExchangeStatus.ACCEPTED
    assert history[-1].changed_by == parties["offerer"].id
    assert history[-1].reason == "Accepted with notes"


def test_accept_uses_default_reason(db_session, parties):
    exchange = _accepted(db_session, parties)

    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert history[-1].reason == "Exchange accepted"


def test_learner_cannot_accept(db_session, parties):
    exchange = _request(db_session, parties)

    with pytest.raises(ExchangeAuthorizationError):
        exchange_service.accept_exchange(db_session, exchange.id, parties["learner"].id)

    assert exchange_service.get_exchange(db_session, exchange.id).status == ExchangeStatus.PENDING
    assert _history_count(db_session, exchange) == 1


def test_outsider_cannot_change_exchange(db_session, parties):
    exchange = _request(db_session, parties)

    with pytest.raises(ExchangeAuthorizationError):
        exchange_service.cancel_exchange(db_session, exchange.id, parties["outsider"].id)

    assert _history_count(db_session, exchange) == 1


def test_reject_pending_exchange(db_session, parties):
    exchange = _request(db_session, parties)

    result = exchange_service.reject_exchange(
        db_session, exchange.id, parties["offerer"].id, reason="Not available at that time"
    )

    assert result.status == ExchangeStatus.REJECTED
    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert history[-1].from_status == ExchangeStatus.PENDING
    assert history[-1].reason == "Not available at that time"


def test_learner_cancels_accepted_exchange(db_session, parties):
    exchange = _accepted(db_session, parties)

    result = exchange_service.cancel_exchange(
        db_session, exchange.id, parties["learner"].id,
        reason="Had to cancel due to scheduling conflict",
    )

    assert result.status == ExchangeStatus.CANCELLED
    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert len(history) == 3
    assert history[-1].from_status == ExchangeStatus.ACCEPTED
    assert history[-1].changed_by == parties["learner"].id
    assert history[-1].reason == "Had to cancel due to scheduling conflict"


def test_cancel_does_not_touch_credits(db_session, parties):
    exchange = _accepted(db_session, parties)
    exchange_service.cancel_exchange(db_session, exchange.id, parties["offerer"].id)

    assert db_session.query(CreditTransaction).count() == 0
    assert credit_crud.get_user(db_session, parties["learner"].id).time_credits == 10


def test_mark_as_no_show(db_session, parties):
    exchange = _accepted(db_session, parties)

    result = exchange_service.mark_as_no_show(
        db_session, exchange.id, parties["offerer"].id, reason="Other party didn't show up"
    )

    assert result.status == ExchangeStatus.NO_SHOW
    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert history[-1].from_status == ExchangeStatus.ACCEPTED
    assert history[-1].to_status == ExchangeStatus.NO_SHOW
    assert history[-1].reason == "Other party didn't show up"
    assert db_session.query(CreditTransaction).count() == 0


def test_counterparty_is_notified_of_status_change(db_session, parties):
    exchange = _accepted(db_session, parties)

    notes = db_session.query(Notification).filter(
        Notification.recipient_id == parties["learner"].id,
        Notification.exchange_id == exchange.id,
    ).all()
    assert [n.event_type for n in notes] == ["exchange_accepted"]


# ======================
# COMPLETION
# ======================

def test_complete_transfers_credits_from_learner_to_offerer(db_session):
    learner = _create_user(db_session, "a@test.com", credits=10)
    offerer = _create_user(db_session, "b@test.com", credits=5)
    skill = _create_skill(db_session, name="Guitar", category="Music")
    exchange = exchange_service.create_exchange(
        db_session,
        learner_id=learner.id,
        offerer_id=offerer.id,
        skill_id=skill.id,
        scheduled_at=datetime.now() - timedelta(hours=3),
        duration=2.0,
    )
    exchange_service.accept_exchange(db_session, exchange.id, offerer.id)

    result = exchange_service.complete_exchange(db_session, exchange.id, offerer.id)

    assert result.status == ExchangeStatus.COMPLETED
    db_session.refresh(learner)
    db_session.refresh(offerer)
    assert (learner.time_credits, offerer.time_credits) == (8, 7)

    rows = credit_crud.get_exchange_transactions(db_session, exchange.id)
    assert [(r.user_id, r.amount) for r in rows] == [(learner.id, -2), (offerer.id, 2)]
    assert all(r.reason == "Exchange completion: Guitar" for r in rows)

    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert len(history) == 3
    assert history[-1].from_status == ExchangeStatus.ACCEPTED
    assert history[-1].to_status == ExchangeStatus.COMPLETED
    assert history[-1].changed_by == offerer.id
    assert "credit transfer" in history[-1].reason.lower()
    assert history[-1].reason == "Exchange completed with credit transfer of 2 credit(s)"


def test_completed_exchange_cannot_be_paid_again(db_session, parties):
    exchange = _accepted(db_session, parties, duration=2.0)
    exchange_service.complete_exchange(db_session, exchange.id, parties["offerer"].id)

    with pytest.raises(InvalidOperationError, match="already been settled"):
        credit_service.transfer_credits(
            db_session, parties["learner"].id, parties["offerer"].id, 2, "again",
            exchange_id=exchange.id,
        )

    rows = credit_crud.get_exchange_transactions(db_session, exchange.id)
    assert [(r.user_id, r.amount) for r in rows] == [
        (parties["learner"].id, -2),
        (parties["offerer"].id, 2),
    ]
    assert credit_crud.get_user(db_session, parties["learner"].id).time_credits == 8


@pytest.mark.parametrize("payer, payee", [("outsider", "learner"), ("offerer", "learner"), ("outsider", "offerer")])
def test_transfer_tagged_with_exchange_must_be_learner_to_offerer(db_session, parties, payer, payee):
    exchange = _accepted(db_session, parties)

    with pytest.raises(InvalidOperationError, match="Only the exchange learner"):
        credit_service.transfer_credits(
            db_session, parties[payer].id, parties[payee].id, 3, "x", exchange_id=exchange.id
        )

    assert credit_crud.get_exchange_transactions(db_session, exchange.id) == []
    assert db_session.query(CreditTransaction).count() == 0


def test_transfer_tagged_with_unknown_exchange(db_session, parties):
    with pytest.raises(NotFoundError):
        credit_service.transfer_credits(
            db_session, parties["learner"].id, parties["offerer"].id, 1, "x", exchange_id=404
        )


def test_complete_rounds_duration_to_whole_credits(db_session, parties):
    exchange = _accepted(db_session, parties, duration=1.5)

    exchange_service.complete_exchange(db_session, exchange.id, parties["offerer"].id)

    assert credit_crud.get_user(db_session, parties["learner"].id).time_credits == 8
    assert credit_crud.get_user(db_session, parties["offerer"].id).time_credits == 7


def test_complete_with_insufficient_credits_rolls_everything_back(db_session, parties):
    parties["learner"].time_credits = 1
    db_session.commit()
    exchange = _accepted(db_session, parties, duration=3.0)

    with pytest.raises(InsufficientCreditsError):
        exchange_service.complete_exchange(db_session, exchange.id, parties["offerer"].id)

    assert exchange_service.get_exchange(db_session, exchange.id).status == ExchangeStatus.ACCEPTED
    assert _history_count(db_session, exchange) == 2
    assert db_session.query(CreditTransaction).count() == 0
    assert credit_crud.get_user(db_session, parties["learner"].id).time_credits == 1
    assert credit_crud.get_user(db_session, parties["offerer"].id).time_credits == 5


def test_learner_cannot_complete(db_session, parties):
    exchange = _accepted(db_session, parties)

    with pytest.raises(ExchangeAuthorizationError):
        exchange_service.complete_exchange(db_session, exchange.id, parties["learner"].id)
    assert db_session.query(CreditTransaction).count() == 0


def test_completing_pending_exchange_is_invalid(db_session, parties):
    exchange = _request(db_session, parties)

    with pytest.raises(InvalidTransitionError):
        exchange_service.complete_exchange(db_session, exchange.id, parties["offerer"].id)


def test_completed_exchange_cannot_change_again(db_session, parties):
    exchange = _accepted(db_session, parties)
    exchange_service.complete_exchange(db_session, exchange.id, parties["offerer"].id)

    with pytest.raises(InvalidTransitionError) as exc_info:
        exchange_service.accept_exchange(db_session, exchange.id, parties["offerer"].id)
    assert exc_info.value.message == "Cannot change exchange status from Completed to Accepted"

    with pytest.raises(InvalidTransitionError):
        exchange_service.complete_exchange(db_session, exchange.id, parties["offerer"].id)

    assert _history_count(db_session, exchange) == 3
    assert db_session.query(CreditTransaction).count() == 2


def test_notification_failure_does_not_undo_completion(db_session, parties, monkeypatch):
    exchange = _accepted(db_session, parties)

    def _boom(*args, **kwargs):
        raise RuntimeError("notification store down")

    monkeypatch.setattr(notification_service, "create_notification", _boom)

    result = exchange_service.complete_exchange(db_session, exchange.id, parties["offerer"].id)

    assert result.status == ExchangeStatus.COMPLETED
    db_session.expire_all()
    assert exchange_service.get_exchange(db_session, exchange.id).status == ExchangeStatus.COMPLETED
    assert credit_crud.get_user(db_session, parties["offerer"].id).time_credits == 7
    assert _history_count(db_session, exchange) == 3


# ======================
# QUERIES
# ======================

def test_get_exchange_unknown_raises_not_found(db_session):
    with pytest.raises(NotFoundError):
        exchange_service.get_exchange(db_session, 424242)


def test_get_user_exchanges_filters_by_status(db_session, parties):
    first = _request(db_session, parties)
    second = _accepted(db_session, parties)

    all_for_learner = exchange_service.get_user_exchanges(db_session, parties["learner"].id)
    assert {e.id for e in all_for_learner} == {first.id, second.id}

    accepted = exchange_service.get_user_exchanges(
        db_session, parties["offerer"].id, status=ExchangeStatus.ACCEPTED
    )
    assert [e.id for e in accepted] == [second.id]

    assert exchange_service.get_user_exchanges(db_session, parties["outsider"].id) == []


def test_history_is_chronological(db_session, parties):
    exchange = _accepted(db_session, parties)
    exchange_service.complete_exchange(db_session, exchange.id, parties["offerer"].id)

    history = exchange_service.get_exchange_status_history(db_session, exchange.id)
    assert [(h.from_status, h.to_status) for h in history] == [
        (None, ExchangeStatus.PENDING),
        (ExchangeStatus.PENDING, ExchangeStatus.ACCEPTED),
        (ExchangeStatus.ACCEPTED, ExchangeStatus.COMPLETED),
    ]
    for earlier, later in zip(history, history[1:]):
        assert later.from_status == earlier.to_status
