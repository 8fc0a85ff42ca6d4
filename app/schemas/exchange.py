# app/schemas/exchange.py
"""
Exchange request/response models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.exchange import ExchangeStatus


class ExchangeCreate(BaseModel):
    offerer_id: int
    skill_id: int
    scheduled_at: datetime
    duration: float = Field(..., gt=0, allow_inf_nan=False, description="Length in hours")
    notes: Optional[str] = Field(None, max_length=2000)
    meeting_link: Optional[str] = Field(None, max_length=500)


class ExchangeStatusChange(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class ExchangeResponse(BaseModel):
    id: int
    offerer_id: int
    learner_id: int
    skill_id: int
    scheduled_at: datetime
    duration: float
    status: ExchangeStatus
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ExchangeStatusHistoryResponse(BaseModel):
    id: int
    exchange_id: int
    from_status: Optional[ExchangeStatus] = None
    to_status: ExchangeStatus
    changed_by: int
    changed_at: datetime
    reason: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
