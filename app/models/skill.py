# app/models/skill.py
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from app.database import Base


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    category = Column(String(100), nullable=False, default="General", index=True)
    description = Column(Text, nullable=False, default="")
    created_at = Column(TIMESTAMP, server_default=func.now())

    user_skills = relationship("UserSkill", back_populates="skill", cascade="all, delete-orphan")
    exchanges = relationship("SkillExchange", back_populates="skill")


class UserSkill(Base):
    __tablename__ = "user_skills"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False, index=True)
    proficiency_level = Column(Integer, nullable=False, default=1)
    # True = teaching this skill, False = wants to learn it
    is_offering = Column(Boolean, nullable=False, default=True)
    description = Column(Text)
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "skill_id", name="uq_user_skill_user_id_skill_id"),
        CheckConstraint(
            "proficiency_level >= 1 AND proficiency_level <= 5",
            name="check_proficiency_level_range",
        ),
        Index("ix_user_skill_is_offering_skill_id", "is_offering", "skill_id"),
        Index("ix_user_skill_user_id_is_offering", "user_id", "is_offering"),
    )

    skill = relationship("Skill", back_populates="user_skills")
    user = relationship("User", back_populates="user_skills")
