from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.notification import Notification

logger = logging.getLogger(__name__)


EXCHANGE_EVENT_BY_STATUS = {
    "Pending": "exchange_requested",
    "Accepted": "exchange_accepted",
    "Rejected": "exchange_rejected",
    "Cancelled": "exchange_cancelled",
    "Completed": "exchange_completed",
    "NoShow": "exchange_no_show",
}


def list_user_notifications(
    db: Session,
    *,
    user_id: int,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_notification_read(
    db: Session,
    *,
    user_id: int,
    notification_id: int,
) -> Optional[Notification]:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == user_id,
    ).first()
    if not notification:
        return None
    notification.is_read = True
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, *, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return int(updated)


def get_unread_count(db: Session, *, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).count()


def create_notification(
    db: Session,
    *,
    recipient_id: int,
    actor_id: Optional[int],
    exchange_id: Optional[int],
    event_type: str,
    message: str,
) -> Notification:
    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        exchange_id=exchange_id,
        event_type=event_type,
        message=message[:500],
    )
    db.add(notification)
    db.flush()
    return notification


def dispatch_notification(
    db: Session,
    *,
    recipient_id: int,
    event_type: str,
    message: str,
    actor_id: Optional[int] = None,
    exchange_id: Optional[int] = None,
) -> Optional[Notification]:
    """
    Best-effort in-app notification for an event that has already committed.

    Runs in its own commit after the core transaction. This function never
    raises: failures are logged and None is returned.
    """
    if not settings.NOTIFICATIONS_ENABLED:
        return None
    try:
        notification = create_notification(
            db,
            recipient_id=recipient_id,
            actor_id=actor_id,
            exchange_id=exchange_id,
            event_type=event_type,
            message=message,
        )
        db.commit()
        return notification
    except Exception as exc:
        db.rollback()
        logger.warning(
            "Notification dispatch failed (recipient_id=%s, event=%s): %s",
            recipient_id,
            event_type,
            exc,
        )
        return None


def notify_exchange_status_changed(
    db: Session,
    *,
    recipient_id: int,
    actor_id: int,
    exchange_id: int,
    status: str,
    message: str,
) -> Optional[Notification]:
    event_type = EXCHANGE_EVENT_BY_STATUS.get(status, "exchange_updated")
    return dispatch_notification(
        db,
        recipient_id=recipient_id,
        actor_id=actor_id,
        exchange_id=exchange_id,
        event_type=event_type,
        message=message,
    )
