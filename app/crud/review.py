from typing import List, Optional

from sqlalchemy.orm import Session

from app import models


def get_review_for_exchange(db: Session, exchange_id: int, reviewer_id: int) -> Optional[models.Review]:
    return db.query(models.Review).filter(
        models.Review.exchange_id == exchange_id,
        models.Review.reviewer_id == reviewer_id,
    ).first()


def get_reviews_for_user(db: Session, user_id: int) -> List[models.Review]:
    return db.query(models.Review).filter(
        models.Review.reviewed_user_id == user_id
    ).order_by(models.Review.created_at.desc(), models.Review.id.desc()).all()


def create_review(
    db: Session,
    exchange_id: int,
    reviewer_id: int,
    reviewed_user_id: int,
    rating: int,
    comment: Optional[str],
) -> models.Review:
    review = models.Review(
        exchange_id=exchange_id,
        reviewer_id=reviewer_id,
        reviewed_user_id=reviewed_user_id,
        rating=rating,
        comment=comment,
    )
    db.add(review)
    db.flush()
    return review
