from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, Query
from typing import Optional
from datetime import datetime, timezone
import json
import logging
from pydantic import BaseModel
from db import SessionLocal
from models.auth.user_models import User
from services.activity_feed import USER_ACTIVITY_UPDATE, activity_feeds
from services.current_user import get_current_user
from services.performance_service import performance_service
from services.ws_manager import manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Activity"])


class UserActivity(BaseModel):
    action: str
    details: Optional[str] = None
    target: Optional[str] = None


class LiveUpdates(BaseModel):
    enabled: bool


def feed_state(feed):
    return {
        "isConnected": feed.is_connected,
        "liveUpdates": feed.live_updates,
        "maxItems": feed.max_items,
        "activities": feed.items,
    }


@router.get("/api/activity/feed", response_model=dict)
def get_feed(current_user: User = Depends(get_current_user)):
    return feed_state(activity_feeds.feed_for(current_user.id))


# Refresh: drop everything the caller has collected so far
@router.delete("/api/activity/feed", response_model=dict)
def clear_feed(current_user: User = Depends(get_current_user)):
    feed = activity_feeds.feed_for(current_user.id)
    feed.clear()
    return feed_state(feed)


@router.put("/api/activity/live", response_model=dict)
def set_live_updates(payload: LiveUpdates, current_user: User = Depends(get_current_user)):
    feed = activity_feeds.feed_for(current_user.id)
    feed.set_live_updates(payload.enabled)
    return feed_state(feed)


@router.post("/api/activity/user-activity", response_model=dict)
def report_user_activity(payload: UserActivity, current_user: User = Depends(get_current_user)):
    event = {
        "userId": current_user.id,
        "action": payload.action,
        "details": payload.details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    performance_service.record_user_interaction(payload.action, payload.target)
    manager.publish(USER_ACTIVITY_UPDATE, event)
    return {"detail": "Activity recorded", "event": event}


@router.websocket("/ws/activity")
async def activity_ws(websocket: WebSocket, user_id: Optional[int] = Query(None)):
    """Push channel for activity events.

    Clients receive ``{"event": ..., "data": ...}`` frames and may send
    ``{"action": "join" | "leave", "room": ...}`` or ``{"action": "ping"}``.
    """
    if user_id is None:
        await websocket.close(code=4001)
        return

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.id == user_id).first()
        role = user.role.value if user else None
        active = bool(user and user.active)
    finally:
        db.close()

    await websocket.accept()
    if not active:
        await websocket.send_json({"type": "error", "code": 403, "detail": "Unknown or inactive user"})
        await websocket.close(code=4003)
        return

    activity_feeds.feed_for(user_id)
    conn = await manager.connect(websocket, user_id, role)
    await websocket.send_json({"type": "connected", "rooms": sorted(conn.rooms)})
    try:
        while True:
            data = await websocket.receive_text()
            try:
                payload = json.loads(data)
            except ValueError:
                await websocket.send_json({"type": "error", "detail": "Invalid JSON"})
                continue

            action = payload.get("action") if isinstance(payload, dict) else None
            if action == "join" and payload.get("room"):
                await manager.join(conn, str(payload["room"]))
                await websocket.send_json({"type": "joined", "room": payload["room"]})
            elif action == "leave" and payload.get("room"):
                await manager.leave(conn, str(payload["room"]))
                await websocket.send_json({"type": "left", "room": payload["room"]})
            elif action == "ping":
                await websocket.send_json({"type": "pong"})
            else:
                await websocket.send_json({"type": "error", "detail": "Unknown action"})
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(conn)
