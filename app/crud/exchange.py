# app/crud/exchange.py
from datetime import UTC, datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app import models
from app.models.exchange import ExchangeStatus


def get_exchange(db: Session, exchange_id: int, for_update: bool = False) -> Optional[models.SkillExchange]:
    query = db.query(models.SkillExchange).filter(models.SkillExchange.id == exchange_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_user_exchanges(
    db: Session,
    user_id: int,
    status: Optional[ExchangeStatus] = None,
) -> List[models.SkillExchange]:
    query = db.query(models.SkillExchange).filter(
        (models.SkillExchange.learner_id == user_id) |
        (models.SkillExchange.offerer_id == user_id)
    )
    if status is not None:
        query = query.filter(models.SkillExchange.status == status)
    return query.order_by(
        models.SkillExchange.scheduled_at.desc(),
        models.SkillExchange.id.desc(),
    ).all()


def create_exchange(
    db: Session,
    *,
    learner_id: int,
    offerer_id: int,
    skill_id: int,
    scheduled_at: datetime,
    duration: float,
    notes: Optional[str] = None,
    meeting_link: Optional[str] = None,
) -> models.SkillExchange:
    exchange = models.SkillExchange(
        learner_id=learner_id,
        offerer_id=offerer_id,
        skill_id=skill_id,
        scheduled_at=scheduled_at,
        duration=duration,
        status=ExchangeStatus.PENDING,
        notes=notes,
        meeting_link=meeting_link,
    )
    db.add(exchange)
    db.flush()
    return exchange


def append_status_history(
    db: Session,
    *,
    exchange_id: int,
    from_status: Optional[ExchangeStatus],
    to_status: ExchangeStatus,
    changed_by: int,
    reason: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> models.ExchangeStatusHistory:
    record = models.ExchangeStatusHistory(
        exchange_id=exchange_id,
        from_status=from_status,
        to_status=to_status,
        changed_by=changed_by,
        changed_at=datetime.now(UTC),
        reason=reason[:1000] if reason else reason,
        user_agent=user_agent[:500] if user_agent else user_agent,
    )
    db.add(record)
    db.flush()
    return record


def get_status_history(db: Session, exchange_id: int) -> List[models.ExchangeStatusHistory]:
    return db.query(models.ExchangeStatusHistory).filter(
        models.ExchangeStatusHistory.exchange_id == exchange_id
    ).order_by(
        models.ExchangeStatusHistory.changed_at.asc(),
        models.ExchangeStatusHistory.id.asc(),
    ).all()

