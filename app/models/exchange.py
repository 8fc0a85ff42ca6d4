# app/models/exchange.py
import enum
from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
    func,
)
from sqlalchemy.orm import relationship

from app.database import Base


class ExchangeStatus(str, enum.Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"
    REJECTED = "Rejected"


def _status_column_type():
    # Persist the display values ("NoShow"), not the member names.
    return Enum(
        ExchangeStatus,
        name="exchange_status",
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )


class SkillExchange(Base):
    __tablename__ = "skill_exchanges"

    id = Column(Integer, primary_key=True, index=True)
    offerer_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    learner_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id", ondelete="RESTRICT"), nullable=False, index=True)
    scheduled_at = Column(TIMESTAMP, nullable=False)
    duration = Column(Float, nullable=False, default=1.0)  # hours
    status = Column(_status_column_type(), nullable=False, default=ExchangeStatus.PENDING, index=True)
    meeting_link = Column(String(500))
    notes = Column(Text)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    offerer = relationship("User", foreign_keys=[offerer_id], back_populates="offered_exchanges")
    learner = relationship("User", foreign_keys=[learner_id], back_populates="learned_exchanges")
    skill = relationship("Skill", back_populates="exchanges")
    status_history = relationship(
        "ExchangeStatusHistory",
        back_populates="exchange",
        order_by="ExchangeStatusHistory.id",
    )
    reviews = relationship("Review", back_populates="exchange")


class ExchangeStatusHistory(Base):
    """Append-only audit trail; one row per status change, including creation."""

    __tablename__ = "exchange_status_history"

    id = Column(Integer, primary_key=True, index=True)
    exchange_id = Column(Integer, ForeignKey("skill_exchanges.id", ondelete="CASCADE"), nullable=False)
    from_status = Column(_status_column_type(), nullable=True)  # None only for the creation record
    to_status = Column(_status_column_type(), nullable=False)
    changed_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    changed_at = Column(TIMESTAMP, nullable=False, default=lambda: datetime.now(UTC))
    reason = Column(String(1000))
    user_agent = Column(String(500))

    __table_args__ = (
        Index("ix_exchange_status_history_exchange_id_changed_at", "exchange_id", "changed_at"),
    )

    exchange = relationship("SkillExchange", back_populates="status_history")
    changed_by_user = relationship("User", foreign_keys=[changed_by])
