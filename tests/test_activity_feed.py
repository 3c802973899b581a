import threading

import pytest

from services.activity_feed import (
    APPLICATION_STATUS_CHANGED,
    DASHBOARD_UPDATE,
    DOCUMENT_UPLOADED,
    FEED_CHANNELS,
    USER_ACTIVITY_UPDATE,
    ActivityFeed,
    ActivityFeeds,
)
from services.ws_manager import ConnectionManager


@pytest.fixture
def hub():
    return ConnectionManager()


def test_max_items_must_be_positive():
    with pytest.raises(ValueError):
        ActivityFeed(max_items=0)


def test_records_from_each_channel(hub):
    feed = ActivityFeed()
    feed.attach(hub)
    hub.publish(USER_ACTIVITY_UPDATE, {"action": "login", "details": "from dashboard", "timestamp": "t1"})
    hub.publish(APPLICATION_STATUS_CHANGED, {"applicationId": 7, "status": "Interview", "timestamp": "t2"})
    hub.publish(DOCUMENT_UPLOADED, {"fileName": "passport.pdf", "timestamp": "t3"})
    hub.publish(DASHBOARD_UPDATE, {})

    descriptions = [item["description"] for item in feed.items]
    assert descriptions == [
        "Dashboard updated",
        "Document uploaded: passport.pdf",
        "Application 7 status changed to Interview",
        "login: from dashboard",
    ]
    assert feed.items[1]["icon"] == "description"
    assert feed.items[1]["color"] == "#4caf50"
    assert feed.items[3]["timestamp"] == "t1"


def test_feed_is_capped_newest_first(hub):
    feed = ActivityFeed(max_items=10)
    feed.attach(hub)
    for i in range(12):
        hub.publish(DOCUMENT_UPLOADED, {"fileName": f"doc{i}.pdf"})

    items = feed.items
    assert len(items) == 10
    assert items[0]["description"] == "Document uploaded: doc11.pdf"
    assert items[-1]["description"] == "Document uploaded: doc2.pdf"


def test_live_updates_toggle_unsubscribes(hub):
    feed = ActivityFeed()
    feed.attach(hub)
    assert all(hub.listener_count(channel) == 1 for channel in FEED_CHANNELS)

    feed.set_live_updates(False)
    assert not feed.is_listening
    assert all(hub.listener_count(channel) == 0 for channel in FEED_CHANNELS)
    hub.publish(DOCUMENT_UPLOADED, {"fileName": "ignored.pdf"})
    assert feed.items == []

    feed.set_live_updates(True)
    hub.publish(DOCUMENT_UPLOADED, {"fileName": "seen.pdf"})
    assert len(feed.items) == 1


def test_detach_stops_listening(hub):
    feed = ActivityFeed()
    feed.attach(hub)
    assert feed.is_connected
    feed.detach()
    assert not feed.is_connected
    assert hub.listener_count(DASHBOARD_UPDATE) == 0


def test_attach_to_new_hub_moves_subscriptions(hub):
    other = ConnectionManager()
    feed = ActivityFeed()
    feed.attach(hub)
    feed.attach(other)
    assert hub.listener_count(DASHBOARD_UPDATE) == 0
    assert other.listener_count(DASHBOARD_UPDATE) == 1


def test_clear(hub):
    feed = ActivityFeed()
    feed.attach(hub)
    hub.publish(DASHBOARD_UPDATE, {})
    feed.clear()
    assert feed.items == []


def test_unknown_event_is_ignored():
    feed = ActivityFeed()
    feed.handle_event("something_else", {"x": 1})
    assert feed.items == []


def test_failing_listener_does_not_block_others(hub):
    seen = []

    def broken(data):
        raise RuntimeError("boom")

    hub.subscribe("ping", broken)
    hub.subscribe("ping", seen.append)
    hub.publish("ping", {"n": 1})
    assert seen == [{"n": 1}]


def test_unsubscribe_is_idempotent(hub):
    unsubscribe = hub.subscribe("ping", lambda data: None)
    unsubscribe()
    unsubscribe()
    assert hub.listener_count("ping") == 0


def test_palette_lookup():
    from services.theme import get_theme, palette_color

    assert palette_color("info") == "#2196f3"
    assert palette_color("grey.700") == "#616161"
    assert palette_color("nope") == "#9e9e9e"
    assert get_theme()["shape"] == {"borderRadius": 8}


def test_concurrent_events_are_all_kept():
    feed = ActivityFeed(max_items=1000)

    def worker(n):
        for i in range(200):
            feed.add_activity({"description": f"{n}-{i}"})

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(feed.items) == 800


def test_each_viewer_gets_own_feed(hub):
    feeds = ActivityFeeds()
    feeds.attach(hub)
    first = feeds.feed_for(1)
    second = feeds.feed_for(2)
    assert feeds.feed_for(1) is first

    first.set_live_updates(False)
    hub.publish(DASHBOARD_UPDATE, {})
    assert first.items == []
    assert len(second.items) == 1

    second.clear()
    assert second.items == []
    assert first.live_updates is False and second.live_updates is True


def test_feeds_created_before_attach_start_listening(hub):
    feeds = ActivityFeeds()
    feed = feeds.feed_for(5)
    assert not feed.is_connected
    feeds.attach(hub)
    hub.publish(DOCUMENT_UPLOADED, {"fileName": "offer.pdf"})
    assert feed.items[0]["description"] == "Document uploaded: offer.pdf"

    feeds.detach()
    assert hub.listener_count(DOCUMENT_UPLOADED) == 0


def test_reset_drops_viewers(hub):
    feeds = ActivityFeeds()
    feeds.attach(hub)
    old = feeds.feed_for(1)
    feeds.reset()
    assert hub.listener_count(DASHBOARD_UPDATE) == 0
    assert feeds.feed_for(1) is not old
    assert feeds.feed_for(1).is_listening
