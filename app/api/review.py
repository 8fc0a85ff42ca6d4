# app/api/review.py
"""
Review & Rating API Router

Endpoints:
- POST /reviews/ - Review the other party of a completed exchange
- GET /reviews/user/{user_id} - Reviews a user has received
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewResponse
from app.services import review_service
from app.utils.security import get_current_user

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("/", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    review: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return review_service.submit_review(
        db,
        exchange_id=review.exchange_id,
        reviewer_id=current_user.id,
        rating=review.rating,
        comment=review.comment,
    )


@router.get("/user/{user_id}", response_model=List[ReviewResponse])
def get_user_reviews(user_id: int, db: Session = Depends(get_db)):
    return review_service.get_reviews_for_user(db, user_id)
