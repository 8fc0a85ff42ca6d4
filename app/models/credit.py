# app/models/credit.py
from sqlalchemy import Column, ForeignKey, Integer, String, TIMESTAMP, func
from sqlalchemy.orm import relationship

from app.database import Base


class CreditTransactionType:
    """Ledger entry kinds (stored as plain strings)."""
    EXCHANGE_COMPLETION = "exchange-completion"
    ADMIN_ADJUSTMENT = "admin-adjustment"


class CreditTransaction(Base):
    __tablename__ = "credit_transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # negative = debit, positive = credit
    balance_after = Column(Integer, nullable=False)
    transaction_type = Column(String(50), nullable=False, index=True)
    reason = Column(String(500), nullable=False)
    related_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    exchange_id = Column(Integer, ForeignKey("skill_exchanges.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False, index=True)

    user = relationship("User", foreign_keys=[user_id])
    related_user = relationship("User", foreign_keys=[related_user_id])
    exchange = relationship("SkillExchange", foreign_keys=[exchange_id])
