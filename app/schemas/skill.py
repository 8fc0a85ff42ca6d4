# app/schemas/skill.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ======================
# SKILL SCHEMAS
# ======================

class SkillBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field("General", min_length=1, max_length=100)
    description: Optional[str] = ""

    @field_validator("name", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        if v.strip() == "":
            raise ValueError("Value cannot be empty or just whitespace")
        return v.strip()


class SkillCreate(SkillBase):
    pass


class SkillUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class SkillSummary(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SkillResponse(SkillSummary):
    created_at: Optional[datetime] = None


# ======================
# USER_SKILL SCHEMAS
# ======================

class UserSkillCreate(BaseModel):
    skill_id: int
    proficiency_level: int = Field(1, ge=1, le=5)
    # True = teaching, False = wants to learn
    is_offering: bool = True
    description: Optional[str] = Field(None, max_length=1000)


class UserSkillUpdate(BaseModel):
    proficiency_level: Optional[int] = Field(None, ge=1, le=5)
    is_offering: Optional[bool] = None
    description: Optional[str] = Field(None, max_length=1000)


class UserSkillSummary(BaseModel):
    id: int
    user_id: int
    skill_id: int
    proficiency_level: int
    is_offering: bool
    description: Optional[str] = None
    skill: SkillSummary

    model_config = ConfigDict(from_attributes=True)
