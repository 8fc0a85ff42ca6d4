# app/schemas/credit.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreditBalanceResponse(BaseModel):
    user_id: int
    time_credits: int


class CreditTransferRequest(BaseModel):
    to_user_id: int
    amount: int = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=500)


class CreditTransactionResponse(BaseModel):
    id: int
    user_id: int
    amount: int
    balance_after: int
    transaction_type: str
    reason: str
    related_user_id: Optional[int] = None
    exchange_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
