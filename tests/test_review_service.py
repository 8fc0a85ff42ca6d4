"""Review tests: only participants of completed exchanges may review."""

from datetime import datetime

import pytest

from app.exceptions import ConflictError, InvalidArgumentError, InvalidOperationError, NotFoundError
from app.models.exchange import ExchangeStatus, SkillExchange
from app.models.notification import Notification
from app.models.skill import Skill
from app.models.user import User
from app.services import review_service


def _create_user(db, email: str) -> User:
    user = User(name=email.split("@")[0].title(), email=email, password_hash="hash", time_credits=5)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def setup_exchange(db_session):
    offerer = _create_user(db_session, "offerer@test.com")
    learner = _create_user(db_session, "learner@test.com")
    outsider = _create_user(db_session, "outsider@test.com")
    skill = Skill(name="Chess", category="Games", description="")
    db_session.add(skill)
    db_session.commit()

    def make(status=ExchangeStatus.COMPLETED):
        exchange = SkillExchange(
            offerer_id=offerer.id,
            learner_id=learner.id,
            skill_id=skill.id,
            scheduled_at=datetime(2025, 3, 1, 18, 0),
            duration=1.0,
            status=status,
        )
        db_session.add(exchange)
        db_session.commit()
        return exchange

    return {"offerer": offerer, "learner": learner, "outsider": outsider, "make": make}


def test_learner_reviews_offerer(db_session, setup_exchange):
    exchange = setup_exchange["make"]()

    review = review_service.submit_review(
        db_session, exchange.id, setup_exchange["learner"].id, 5, "Great lesson"
    )

    assert review.reviewed_user_id == setup_exchange["offerer"].id
    assert review.rating == 5
    note = db_session.query(Notification).filter(
        Notification.recipient_id == setup_exchange["offerer"].id
    ).one()
    assert note.event_type == "review_received"


def test_offerer_reviews_learner(db_session, setup_exchange):
    exchange = setup_exchange["make"]()

    review = review_service.submit_review(db_session, exchange.id, setup_exchange["offerer"].id, 4)

    assert review.reviewed_user_id == setup_exchange["learner"].id


@pytest.mark.parametrize(
    "status",
    [ExchangeStatus.PENDING, ExchangeStatus.ACCEPTED, ExchangeStatus.CANCELLED, ExchangeStatus.NO_SHOW],
)
def test_only_completed_exchanges_can_be_reviewed(db_session, setup_exchange, status):
    exchange = setup_exchange["make"](status)

    with pytest.raises(InvalidOperationError):
        review_service.submit_review(db_session, exchange.id, setup_exchange["learner"].id, 5)


def test_outsider_cannot_review(db_session, setup_exchange):
    exchange = setup_exchange["make"]()

    with pytest.raises(InvalidOperationError):
        review_service.submit_review(db_session, exchange.id, setup_exchange["outsider"].id, 5)


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_must_be_in_range(db_session, setup_exchange, rating):
    exchange = setup_exchange["make"]()

    with pytest.raises(InvalidArgumentError):
        review_service.submit_review(db_session, exchange.id, setup_exchange["learner"].id, rating)


def test_duplicate_review_conflicts(db_session, setup_exchange):
    exchange = setup_exchange["make"]()
    review_service.submit_review(db_session, exchange.id, setup_exchange["learner"].id, 5)

    with pytest.raises(ConflictError):
        review_service.submit_review(db_session, exchange.id, setup_exchange["learner"].id, 1)


def test_unknown_exchange(db_session, setup_exchange):
    with pytest.raises(NotFoundError):
        review_service.submit_review(db_session, 999, setup_exchange["learner"].id, 5)


def test_reviews_for_user_newest_first(db_session, setup_exchange):
    first = setup_exchange["make"]()
    second = setup_exchange["make"]()
    review_service.submit_review(db_session, first.id, setup_exchange["learner"].id, 3)
    review_service.submit_review(db_session, second.id, setup_exchange["learner"].id, 5)

    reviews = review_service.get_reviews_for_user(db_session, setup_exchange["offerer"].id)

    assert [r.rating for r in reviews] == [5, 3]
    assert review_service.get_reviews_for_user(db_session, setup_exchange["outsider"].id) == []
