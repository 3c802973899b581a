from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
import logging
import threading

from config import ACTIVITY_FEED_MAX_ITEMS
from services.theme import palette_color

logger = logging.getLogger(__name__)

USER_ACTIVITY_UPDATE = "user_activity_update"
APPLICATION_STATUS_CHANGED = "application_status_changed"
DOCUMENT_UPLOADED = "document_uploaded"
DASHBOARD_UPDATE = "dashboard_update"

FEED_CHANNELS = (
    USER_ACTIVITY_UPDATE,
    APPLICATION_STATUS_CHANGED,
    DOCUMENT_UPLOADED,
    DASHBOARD_UPDATE,
)

ACTIVITY_ICONS = {
    "user_activity": "person",
    "application": "assignment",
    "document": "description",
    "system": "check_circle",
}

ACTIVITY_COLORS = {
    "user_activity": "primary",
    "application": "info",
    "document": "success",
    "system": "success",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def activity_record(activity_type: str, description: str, timestamp: Optional[str] = None) -> Dict[str, str]:
    return {
        "type": activity_type,
        "description": description,
        "timestamp": timestamp or _now_iso(),
        "icon": ACTIVITY_ICONS.get(activity_type, "info"),
        "color": palette_color(ACTIVITY_COLORS.get(activity_type, "grey.500")),
    }


def from_user_activity(data: dict) -> Dict[str, str]:
    return activity_record(
        "user_activity",
        f"{data.get('action')}: {data.get('details') or ''}",
        data.get("timestamp"),
    )


def from_application_status(data: dict) -> Dict[str, str]:
    return activity_record(
        "application",
        f"Application {data.get('applicationId')} status changed to {data.get('status')}",
        data.get("timestamp"),
    )


def from_document_upload(data: dict) -> Dict[str, str]:
    return activity_record("document", f"Document uploaded: {data.get('fileName')}", data.get("timestamp"))


def from_dashboard_update(data: dict) -> Dict[str, str]:
    return activity_record("system", "Dashboard updated")


RECORD_BUILDERS = {
    USER_ACTIVITY_UPDATE: from_user_activity,
    APPLICATION_STATUS_CHANGED: from_application_status,
    DOCUMENT_UPLOADED: from_document_upload,
    DASHBOARD_UPDATE: from_dashboard_update,
}


class ActivityFeed:
    """Most-recent-first list of activity records, capped at ``max_items``.

    Listens on the four feed channels of a hub while attached and live.
    Nothing is replayed after a reconnect.
    """

    def __init__(self, max_items: int = 10):
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self.max_items = max_items
        self.live_updates = True
        self._activities: List[Dict[str, str]] = []
        self._lock = threading.Lock()
        self._hub = None
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def items(self) -> List[Dict[str, str]]:
        with self._lock:
            return list(self._activities)

    @property
    def is_connected(self) -> bool:
        return self._hub is not None

    @property
    def is_listening(self) -> bool:
        return bool(self._unsubscribers)

    def add_activity(self, activity: Dict[str, str]):
        with self._lock:
            self._activities = [activity] + self._activities[: self.max_items - 1]

    def handle_event(self, event: str, data: dict):
        builder = RECORD_BUILDERS.get(event)
        if builder is None:
            logger.debug(f"Ignoring event {event} in activity feed")
            return
        self.add_activity(builder(data or {}))

    def clear(self):
        with self._lock:
            self._activities = []

    def attach(self, hub):
        if self._hub is not None and self._hub is not hub:
            self.detach()
        self._hub = hub
        self._sync_subscriptions()

    def detach(self):
        self._hub = None
        self._sync_subscriptions()

    def set_live_updates(self, enabled: bool):
        self.live_updates = enabled
        self._sync_subscriptions()

    def _sync_subscriptions(self):
        should_listen = self._hub is not None and self.live_updates
        if should_listen and not self._unsubscribers:
            for channel in FEED_CHANNELS:
                self._unsubscribers.append(
                    self._hub.subscribe(channel, lambda data, channel=channel: self.handle_event(channel, data))
                )
        elif not should_listen and self._unsubscribers:
            for unsubscribe in self._unsubscribers:
                unsubscribe()
            self._unsubscribers = []


class ActivityFeeds:
    """One ``ActivityFeed`` per viewer, all listening on the same hub.

    A viewer's feed is created on first use and only collects events from
    then on. Pausing or clearing it leaves every other viewer untouched.
    """

    def __init__(self, max_items: int = 10):
        self.max_items = max_items
        self._feeds: Dict[int, ActivityFeed] = {}
        self._hub = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._hub is not None

    def feed_for(self, user_id: int) -> ActivityFeed:
        with self._lock:
            feed = self._feeds.get(user_id)
            if feed is None:
                feed = ActivityFeed(max_items=self.max_items)
                if self._hub is not None:
                    feed.attach(self._hub)
                self._feeds[user_id] = feed
            return feed

    def attach(self, hub):
        with self._lock:
            self._hub = hub
            for feed in self._feeds.values():
                feed.attach(hub)

    def detach(self):
        with self._lock:
            self._hub = None
            for feed in self._feeds.values():
                feed.detach()

    def reset(self):
        with self._lock:
            for feed in self._feeds.values():
                feed.detach()
            self._feeds = {}


activity_feeds = ActivityFeeds(max_items=ACTIVITY_FEED_MAX_ITEMS)
