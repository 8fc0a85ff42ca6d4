from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.skill import SkillCreate, SkillResponse, SkillUpdate
from app.services import skill_service
from app.utils.security import get_current_user

router = APIRouter(prefix="/skills", tags=["Skills"])


@router.get("/", response_model=List[SkillResponse])
def list_skills(db: Session = Depends(get_db)):
    return skill_service.get_all_skills(db)


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    return skill_service.get_categories(db)


@router.get("/category/{category}", response_model=List[SkillResponse])
def list_skills_by_category(category: str, db: Session = Depends(get_db)):
    return skill_service.get_skills_by_category(db, category)


@router.get("/search", response_model=List[SkillResponse])
def search_skills(q: Optional[str] = None, db: Session = Depends(get_db)):
    return skill_service.search_skills(db, q)


@router.get("/{skill_id}", response_model=SkillResponse)
def get_skill(skill_id: int, db: Session = Depends(get_db)):
    skill = skill_service.get_skill_by_id(db, skill_id)
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")
    return skill


@router.post("/", response_model=SkillResponse, status_code=status.HTTP_201_CREATED)
def create_skill(
    payload: SkillCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return skill_service.create_skill(
        db, name=payload.name, category=payload.category, description=payload.description
    )


@router.put("/{skill_id}", response_model=SkillResponse)
def update_skill(
    skill_id: int,
    payload: SkillUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return skill_service.update_skill(
        db,
        skill_id,
        name=payload.name,
        category=payload.category,
        description=payload.description,
    )


@router.delete("/{skill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_skill(
    skill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    skill_service.delete_skill(db, skill_id)
