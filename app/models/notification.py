from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, TIMESTAMP, Index, func
from sqlalchemy.orm import relationship
from app.database import Base


class Notification(Base):
    """
    In-app notice for one recipient, optionally tied to the exchange and the
    user that triggered it. Rows are written by dispatch_notification only.
    """
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notification_recipient_id_is_read", "recipient_id", "is_read"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    exchange_id = Column(Integer, ForeignKey("skill_exchanges.id", ondelete="SET NULL"), nullable=True, index=True)
    # exchange_requested, exchange_accepted, credits_transferred, review_received, ...
    event_type = Column(String(50), nullable=False, index=True)
    message = Column(String(500), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)

    recipient = relationship("User", foreign_keys=[recipient_id])
    actor = relationship("User", foreign_keys=[actor_id])
    exchange = relationship("SkillExchange")

    def __repr__(self):
        return f"<Notification(id={self.id}, recipient_id={self.recipient_id}, event_type='{self.event_type}')>"
