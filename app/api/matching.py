# app/api/matching.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.matching import PagedResult, UserMatch
from app.services import matching_service
from app.utils.security import get_current_user

router = APIRouter(prefix="/matching", tags=["matching"])


@router.get("/browse", response_model=PagedResult[UserMatch])
def browse_users(
    category: Optional[str] = None,
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    is_online: Optional[bool] = None,
    skill_name: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Browse other users; limit above the maximum page size is capped."""
    return matching_service.browse_users(
        db,
        current_user.id,
        category=category,
        min_rating=min_rating,
        is_online=is_online,
        skill_name=skill_name,
        page=page,
        limit=limit,
    )


@router.get("/users/{user_id}", response_model=UserMatch)
def get_user_details(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    match = matching_service.get_user_match_details(db, user_id, current_user.id)
    if match is None:
        raise HTTPException(status_code=404, detail="User not found")
    return match


@router.get("/recommended", response_model=List[UserMatch])
def get_recommended(
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return matching_service.get_recommended_matches(db, current_user.id, limit=limit)


@router.get("/top-rated", response_model=List[UserMatch])
def get_top_rated(
    category: Optional[str] = None,
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db)
):
    return matching_service.get_top_rated_users(db, category=category, limit=limit)
