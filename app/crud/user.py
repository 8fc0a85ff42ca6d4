from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app import models


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(
        func.lower(models.User.email) == email.strip().lower()
    ).first()


def create_user(
    db: Session,
    name: str,
    email: str,
    password_hash: str,
    time_credits: int,
    bio: Optional[str] = None,
) -> models.User:
    db_user = models.User(
        name=name,
        email=email.strip().lower(),
        password_hash=password_hash,
        time_credits=time_credits,
        bio=bio,
    )
    db.add(db_user)
    db.flush()
    return db_user
