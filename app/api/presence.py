# app/api/presence.py
"""
Presence transport.

A client keeps GET /presence/ws open while it is online. Each socket is one
connection id in the presence registry, so a user with two tabs stays online
until both close. Browsers cannot set headers on a WebSocket handshake, so
the bearer token travels as the `token` query parameter.
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.services import user_service
from app.services.presence_service import UserPresenceService, get_presence_service
from app.utils.security import decode_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/presence", tags=["Presence"])


@router.get("/online", response_model=List[int])
def list_online_users(
    current_user: User = Depends(get_current_user),
    presence: UserPresenceService = Depends(get_presence_service),
):
    return presence.get_online_user_ids()


@router.websocket("/ws")
async def presence_socket(
    websocket: WebSocket,
    token: str = Query(...),
    db: Session = Depends(get_db),
    presence: UserPresenceService = Depends(get_presence_service),
):
    user_id = decode_access_token(token)
    if user_id is None or user_service.get_user_by_id(db, user_id) is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    connection_id = uuid.uuid4().hex
    await websocket.accept()
    presence.user_connected(user_id, connection_id)
    try:
        # Client messages are heartbeats only
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect as exc:
        logger.debug("Presence socket %s for user %s closed (code=%s)", connection_id, user_id, exc.code)
    finally:
        presence.user_disconnected(connection_id)
