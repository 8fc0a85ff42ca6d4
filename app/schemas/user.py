# app/schemas/user.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8)
    bio: Optional[str] = None


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    bio: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, max_length=500)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    time_credits: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
