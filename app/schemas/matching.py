# app/schemas/matching.py
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from app.schemas.skill import UserSkillSummary

T = TypeVar("T")


class UserMatch(BaseModel):
    """A browsable user profile with aggregated rating and presence."""
    id: int
    name: str
    email: str
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    time_credits: int
    rating: float = 0.0
    review_count: int = 0
    is_online: bool = False
    skills: List[UserSkillSummary] = []

    model_config = ConfigDict(from_attributes=True)


class PagedResult(BaseModel, Generic[T]):
    items: List[T]
    total_count: int
    page: int
    page_size: int
    total_pages: int
