# app/services/review_service.py
"""
Review Service Layer

Participants of a completed exchange rate the other party. Ratings feed the
matching service's average_rating aggregation.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import models
from app.crud import exchange as exchange_crud
from app.crud import review as review_crud
from app.database import unit_of_work
from app.exceptions import ConflictError, InvalidArgumentError, InvalidOperationError, NotFoundError
from app.models.exchange import ExchangeStatus
from app.services import notification_service

logger = logging.getLogger(__name__)


def submit_review(
    db: Session,
    exchange_id: int,
    reviewer_id: int,
    rating: int,
    comment: Optional[str] = None,
) -> models.Review:
    """
    Review the counterparty of a completed exchange.

    Raises:
        InvalidArgumentError: rating outside 1-5 or comment too long
        NotFoundError: unknown exchange
        InvalidOperationError: exchange not completed, or reviewer not a participant
        ConflictError: reviewer already reviewed this exchange
    """
    if rating is None or not (1 <= rating <= 5):
        raise InvalidArgumentError("Rating must be between 1 and 5", details={"rating": rating})
    if comment and len(comment) > 1000:
        raise InvalidArgumentError("Comment must be 1000 characters or less")

    try:
        with unit_of_work(db):
            exchange = exchange_crud.get_exchange(db, exchange_id)
            if exchange is None:
                raise NotFoundError("Exchange not found", details={"exchange_id": exchange_id})
            if reviewer_id not in (exchange.offerer_id, exchange.learner_id):
                raise InvalidOperationError("Only participants can review this exchange")
            if ExchangeStatus(exchange.status) != ExchangeStatus.COMPLETED:
                raise InvalidOperationError(
                    "Only completed exchanges can be reviewed",
                    details={"current_status": ExchangeStatus(exchange.status).value},
                )
            if review_crud.get_review_for_exchange(db, exchange_id, reviewer_id):
                raise ConflictError("You have already reviewed this exchange")

            reviewed_user_id = (
                exchange.learner_id if reviewer_id == exchange.offerer_id else exchange.offerer_id
            )
            review = review_crud.create_review(
                db,
                exchange_id=exchange_id,
                reviewer_id=reviewer_id,
                reviewed_user_id=reviewed_user_id,
                rating=rating,
                comment=comment,
            )
    except IntegrityError:
        raise ConflictError("You have already reviewed this exchange")

    logger.info(
        "User %s reviewed user %s for exchange %s (rating=%s)",
        reviewer_id, reviewed_user_id, exchange_id, rating,
    )
    notification_service.dispatch_notification(
        db,
        recipient_id=reviewed_user_id,
        actor_id=reviewer_id,
        exchange_id=exchange_id,
        event_type="review_received",
        message=f"You received a {rating}-star review.",
    )
    return review


def get_reviews_for_user(db: Session, user_id: int) -> List[models.Review]:
    """Reviews received by a user, newest first."""
    return review_crud.get_reviews_for_user(db, user_id)
