# app/services/skill_service.py
"""
Skill catalog and per-user skill lists.

A user holds at most one UserSkill per skill; adding a skill the user already
has updates that row instead of creating a second one.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import models
from app.crud import skill as skill_crud
from app.crud import user as user_crud
from app.database import unit_of_work
from app.exceptions import ConflictError, InvalidArgumentError, InvalidOperationError, NotFoundError

logger = logging.getLogger(__name__)

MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 5


# ============================
# SKILL CATALOG
# ============================

def get_all_skills(db: Session) -> List[models.Skill]:
    return skill_crud.get_skills(db)


def get_skill_by_id(db: Session, skill_id: int) -> Optional[models.Skill]:
    return skill_crud.get_skill(db, skill_id)


def get_categories(db: Session) -> List[str]:
    return skill_crud.get_categories(db)


def get_skills_by_category(db: Session, category: str) -> List[models.Skill]:
    if not category or not category.strip():
        return []
    return skill_crud.get_skills_by_category(db, category)


def search_skills(db: Session, term: Optional[str]) -> List[models.Skill]:
    """Case-insensitive match on name, description or category; blank term returns all."""
    if not term or not term.strip():
        return skill_crud.get_skills(db)
    return skill_crud.search_skills(db, term)


def create_skill(
    db: Session,
    name: str,
    category: str = "General",
    description: Optional[str] = None,
) -> models.Skill:
    if not name or not name.strip():
        raise InvalidArgumentError("Skill name is required")
    name = name.strip()
    category = (category or "General").strip() or "General"
    if skill_crud.get_skill_by_name(db, name):
        raise ConflictError(f"Skill '{name}' already exists", details={"name": name})

    try:
        with unit_of_work(db):
            skill = skill_crud.create_skill(db, name=name, category=category, description=description)
    except IntegrityError:
        raise ConflictError(f"Skill '{name}' already exists", details={"name": name})

    logger.info("Created skill %s (%s / %s)", skill.id, skill.name, skill.category)
    return skill


def update_skill(
    db: Session,
    skill_id: int,
    name: Optional[str] = None,
    category: Optional[str] = None,
    description: Optional[str] = None,
) -> models.Skill:
    try:
        with unit_of_work(db):
            skill = skill_crud.get_skill(db, skill_id)
            if skill is None:
                raise NotFoundError("Skill not found", details={"skill_id": skill_id})
            if name is not None:
                name = name.strip()
                if not name:
                    raise InvalidArgumentError("Skill name cannot be empty")
                clash = skill_crud.get_skill_by_name(db, name)
                if clash is not None and clash.id != skill.id:
                    raise ConflictError(f"Skill '{name}' already exists", details={"name": name})
                skill.name = name
            if category is not None and category.strip():
                skill.category = category.strip()
            if description is not None:
                skill.description = description
    except IntegrityError:
        raise ConflictError(f"Skill '{name}' already exists", details={"name": name})
    return skill


def delete_skill(db: Session, skill_id: int) -> bool:
    """Delete a skill nobody lists. Skills still in use are refused."""
    with unit_of_work(db):
        skill = skill_crud.get_skill(db, skill_id)
        if skill is None:
            raise NotFoundError("Skill not found", details={"skill_id": skill_id})
        in_use = skill_crud.count_skill_usage(db, skill_id)
        if in_use:
            raise InvalidOperationError(
                "Cannot delete a skill that users have listed",
                details={"skill_id": skill_id, "user_skill_count": in_use},
            )
        db.delete(skill)
    logger.info("Deleted skill %s", skill_id)
    return True


# ============================
# USER SKILLS
# ============================

def _validate_proficiency(level: int) -> None:
    if level is None or not (MIN_PROFICIENCY <= level <= MAX_PROFICIENCY):
        raise InvalidArgumentError(
            f"Proficiency level must be between {MIN_PROFICIENCY} and {MAX_PROFICIENCY}",
            details={"proficiency_level": level},
        )


def get_user_skills(db: Session, user_id: int, is_offering: Optional[bool] = None) -> List[models.UserSkill]:
    return skill_crud.get_user_skills(db, user_id, is_offering=is_offering)


def _upsert_user_skill(
    db: Session,
    user_id: int,
    skill_id: int,
    proficiency_level: int,
    is_offering: bool,
    description: Optional[str],
) -> models.UserSkill:
    with unit_of_work(db):
        if user_crud.get_user(db, user_id) is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        if skill_crud.get_skill(db, skill_id) is None:
            raise NotFoundError("Skill not found", details={"skill_id": skill_id})

        user_skill = skill_crud.get_user_skill(db, user_id, skill_id)
        if user_skill is None:
            user_skill = skill_crud.insert_user_skill(
                db,
                user_id=user_id,
                skill_id=skill_id,
                proficiency_level=proficiency_level,
                is_offering=is_offering,
                description=description,
            )
        else:
            user_skill.proficiency_level = proficiency_level
            user_skill.is_offering = is_offering
            if description is not None:
                user_skill.description = description
    return user_skill


def add_user_skill(
    db: Session,
    user_id: int,
    skill_id: int,
    proficiency_level: int = 1,
    is_offering: bool = True,
    description: Optional[str] = None,
) -> models.UserSkill:
    """
    Add a skill to a user's list, or update the existing entry for it.

    A concurrent insert of the same (user, skill) pair trips the unique
    constraint; the loser retries once and lands on the update path.
    """
    _validate_proficiency(proficiency_level)
    try:
        user_skill = _upsert_user_skill(
            db, user_id, skill_id, proficiency_level, is_offering, description
        )
    except IntegrityError:
        logger.info("User skill (%s, %s) inserted concurrently; retrying as update", user_id, skill_id)
        user_skill = _upsert_user_skill(
            db, user_id, skill_id, proficiency_level, is_offering, description
        )
    logger.info(
        "User %s %s skill %s at level %s",
        user_id, "offers" if is_offering else "wants to learn", skill_id, proficiency_level,
    )
    return user_skill


def update_user_skill(
    db: Session,
    user_id: int,
    user_skill_id: int,
    proficiency_level: Optional[int] = None,
    is_offering: Optional[bool] = None,
    description: Optional[str] = None,
) -> models.UserSkill:
    if proficiency_level is not None:
        _validate_proficiency(proficiency_level)
    with unit_of_work(db):
        user_skill = skill_crud.get_owned_user_skill(db, user_skill_id, user_id)
        if user_skill is None:
            raise NotFoundError("User skill not found", details={"user_skill_id": user_skill_id})
        if proficiency_level is not None:
            user_skill.proficiency_level = proficiency_level
        if is_offering is not None:
            user_skill.is_offering = is_offering
        if description is not None:
            user_skill.description = description
    return user_skill


def delete_user_skill(db: Session, user_id: int, user_skill_id: int) -> bool:
    with unit_of_work(db):
        user_skill = skill_crud.get_owned_user_skill(db, user_skill_id, user_id)
        if user_skill is None:
            raise NotFoundError("User skill not found", details={"user_skill_id": user_skill_id})
        db.delete(user_skill)
    return True
