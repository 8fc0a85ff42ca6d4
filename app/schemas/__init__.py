# app/schemas/__init__.py
from app.schemas.credit import (
    CreditBalanceResponse,
    CreditTransactionResponse,
    CreditTransferRequest,
)
from app.schemas.exchange import (
    ExchangeCreate,
    ExchangeResponse,
    ExchangeStatusChange,
    ExchangeStatusHistoryResponse,
)
from app.schemas.matching import PagedResult, UserMatch
from app.schemas.notification import NotificationResponse, UnreadCountResponse
from app.schemas.review import ReviewCreate, ReviewResponse
from app.schemas.skill import (
    SkillCreate,
    SkillResponse,
    SkillSummary,
    SkillUpdate,
    UserSkillCreate,
    UserSkillSummary,
    UserSkillUpdate,
)
from app.schemas.user import UserCreate, UserProfileUpdate, UserResponse
