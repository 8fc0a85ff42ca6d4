# app/models/user.py
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, CheckConstraint, func
from sqlalchemy.orm import relationship

from app.config import settings
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(450), unique=True, index=True, nullable=False)
    password_hash = Column(String(500), nullable=False)
    bio = Column(Text)
    profile_image_url = Column(String(500))
    # Materialized balance; only the credit ledger writes to it.
    time_credits = Column(Integer, nullable=False, default=settings.INITIAL_TIME_CREDITS)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("time_credits >= 0", name="check_time_credits_non_negative"),
    )

    user_skills = relationship("UserSkill", back_populates="user", cascade="all, delete-orphan")
    offered_exchanges = relationship(
        "SkillExchange", foreign_keys="SkillExchange.offerer_id", back_populates="offerer"
    )
    learned_exchanges = relationship(
        "SkillExchange", foreign_keys="SkillExchange.learner_id", back_populates="learner"
    )
    reviews_given = relationship(
        "Review", foreign_keys="Review.reviewer_id", back_populates="reviewer"
    )
    reviews_received = relationship(
        "Review", foreign_keys="Review.reviewed_user_id", back_populates="reviewed_user"
    )
