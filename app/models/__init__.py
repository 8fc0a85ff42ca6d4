# app/models/__init__.py
# Import models in dependency order
from .user import User
from .skill import Skill, UserSkill
from .exchange import ExchangeStatus, SkillExchange, ExchangeStatusHistory
from .credit import CreditTransaction, CreditTransactionType
from .review import Review
from .notification import Notification

__all__ = [
    "User",
    "Skill",
    "UserSkill",
    "ExchangeStatus",
    "SkillExchange",
    "ExchangeStatusHistory",
    "CreditTransaction",
    "CreditTransactionType",
    "Review",
    "Notification",
]
