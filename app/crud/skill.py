from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from app import models


# ============================
# SKILL TABLE
# ============================

def get_skill(db: Session, skill_id: int) -> Optional[models.Skill]:
    return db.query(models.Skill).filter(models.Skill.id == skill_id).first()


def get_skill_by_name(db: Session, name: str) -> Optional[models.Skill]:
    return db.query(models.Skill).filter(
        func.lower(models.Skill.name) == func.lower(name)
    ).first()


def get_skills(db: Session) -> List[models.Skill]:
    return db.query(models.Skill).order_by(models.Skill.category, models.Skill.name).all()


def get_categories(db: Session) -> List[str]:
    rows = db.query(models.Skill.category).distinct().order_by(models.Skill.category).all()
    return [category for (category,) in rows]


def get_skills_by_category(db: Session, category: str) -> List[models.Skill]:
    return db.query(models.Skill).filter(
        func.lower(models.Skill.category) == category.strip().lower()
    ).order_by(models.Skill.name).all()


def search_skills(db: Session, term: str) -> List[models.Skill]:
    term = term.strip()
    return db.query(models.Skill).filter(
        or_(
            models.Skill.name.icontains(term, autoescape=True),
            models.Skill.description.icontains(term, autoescape=True),
            models.Skill.category.icontains(term, autoescape=True),
        )
    ).order_by(models.Skill.name).all()


def create_skill(db: Session, name: str, category: str, description: Optional[str]) -> models.Skill:
    skill = models.Skill(name=name, category=category, description=description or "")
    db.add(skill)
    db.flush()
    return skill


def count_skill_usage(db: Session, skill_id: int) -> int:
    return db.query(models.UserSkill).filter(models.UserSkill.skill_id == skill_id).count()


# ============================
# USER SKILLS (OFFER / LEARN)
# ============================

def get_user_skill(db: Session, user_id: int, skill_id: int) -> Optional[models.UserSkill]:
    return db.query(models.UserSkill).filter(
        models.UserSkill.user_id == user_id,
        models.UserSkill.skill_id == skill_id,
    ).first()


def get_owned_user_skill(db: Session, user_skill_id: int, user_id: int) -> Optional[models.UserSkill]:
    return db.query(models.UserSkill).filter(
        models.UserSkill.id == user_skill_id,
        models.UserSkill.user_id == user_id,
    ).first()


def get_user_skills(db: Session, user_id: int, is_offering: Optional[bool] = None) -> List[models.UserSkill]:
    query = db.query(models.UserSkill).options(
        selectinload(models.UserSkill.skill)
    ).filter(models.UserSkill.user_id == user_id)
    if is_offering is not None:
        query = query.filter(models.UserSkill.is_offering.is_(is_offering))
    return query.order_by(models.UserSkill.id).all()


def insert_user_skill(
    db: Session,
    user_id: int,
    skill_id: int,
    proficiency_level: int,
    is_offering: bool,
    description: Optional[str],
) -> models.UserSkill:
    user_skill = models.UserSkill(
        user_id=user_id,
        skill_id=skill_id,
        proficiency_level=proficiency_level,
        is_offering=is_offering,
        description=description,
    )
    db.add(user_skill)
    db.flush()
    return user_skill
