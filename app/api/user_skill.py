from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.skill import UserSkillCreate, UserSkillSummary, UserSkillUpdate
from app.services import skill_service
from app.utils.security import get_current_user

router = APIRouter(prefix="/user-skills", tags=["User Skills"])


@router.get("/", response_model=List[UserSkillSummary])
def list_my_skills(
    is_offering: Optional[bool] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return skill_service.get_user_skills(db, current_user.id, is_offering=is_offering)


@router.get("/user/{user_id}", response_model=List[UserSkillSummary])
def list_user_skills(
    user_id: int,
    is_offering: Optional[bool] = None,
    db: Session = Depends(get_db)
):
    return skill_service.get_user_skills(db, user_id, is_offering=is_offering)


@router.post("/", response_model=UserSkillSummary, status_code=status.HTTP_201_CREATED)
def add_my_skill(
    payload: UserSkillCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a skill to the caller's list; re-adding updates the existing entry."""
    return skill_service.add_user_skill(
        db,
        current_user.id,
        payload.skill_id,
        proficiency_level=payload.proficiency_level,
        is_offering=payload.is_offering,
        description=payload.description,
    )


@router.put("/{user_skill_id}", response_model=UserSkillSummary)
def update_my_skill(
    user_skill_id: int,
    payload: UserSkillUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return skill_service.update_user_skill(
        db,
        current_user.id,
        user_skill_id,
        proficiency_level=payload.proficiency_level,
        is_offering=payload.is_offering,
        description=payload.description,
    )


@router.delete("/{user_skill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_my_skill(
    user_skill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    skill_service.delete_user_skill(db, current_user.id, user_skill_id)
