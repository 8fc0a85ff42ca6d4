# app/services/user_service.py
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import models
from app.config import settings
from app.crud import user as user_crud
from app.database import unit_of_work
from app.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from app.utils.security import get_password_hash

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "bio", "profile_image_url")


def get_user_by_id(db: Session, user_id: int) -> Optional[models.User]:
    return user_crud.get_user(db, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    if not email:
        return None
    return user_crud.get_user_by_email(db, email)


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    bio: Optional[str] = None,
) -> models.User:
    """Register a user with the starting credit balance."""
    if not name or not name.strip():
        raise InvalidArgumentError("Name is required")
    if not password:
        raise InvalidArgumentError("Password is required")
    if user_crud.get_user_by_email(db, email):
        raise ConflictError("Email already registered", details={"email": email})

    try:
        with unit_of_work(db):
            user = user_crud.create_user(
                db,
                name=name.strip(),
                email=email,
                password_hash=get_password_hash(password),
                time_credits=settings.INITIAL_TIME_CREDITS,
                bio=bio,
            )
    except IntegrityError:
        raise ConflictError("Email already registered", details={"email": email})

    logger.info("Registered user %s with %s starting credits", user.id, user.time_credits)
    return user


def update_user_profile(db: Session, user_id: int, **changes) -> models.User:
    """
    Update profile text fields. Unknown keys (including time_credits) are
    rejected; balances only change through the credit ledger.
    """
    unknown = set(changes) - set(PROFILE_FIELDS)
    if unknown:
        raise InvalidArgumentError(
            "Only name, bio and profile_image_url can be updated",
            details={"fields": sorted(unknown)},
        )
    if "name" in changes and (changes["name"] is None or not changes["name"].strip()):
        raise InvalidArgumentError("Name cannot be empty")

    with unit_of_work(db):
        user = user_crud.get_user(db, user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        for key, value in changes.items():
            setattr(user, key, value.strip() if key == "name" else value)
    return user
