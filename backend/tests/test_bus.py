"""Tests for the SSE event bus, the stream endpoint and service publishing."""
import json
import queue
import threading
import time

import pytest

from olympiad.bus import EventBus, event_bus
from olympiad.errors import ValidationError
from olympiad.services.bracket_generator import generate_bracket
from olympiad.services.match_service import update_match
from olympiad.models.match import Match


# ── EventBus unit tests ─────────────────────────────────────────────────────


class TestEventBus:
    def test_subscribe_creates_queue(self):
        bus = EventBus()
        q = bus.subscribe()
        assert isinstance(q, queue.Queue)
        assert bus.subscriber_count == 1
        bus.unsubscribe(q)

    def test_publish_delivers_to_subscriber(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.publish("test_event", {"key": "value"})
        msg = json.loads(q.get_nowait())
        assert msg["type"] == "test_event"
        assert msg["data"]["key"] == "value"
        assert "timestamp" in msg

    def test_unsubscribe_removes_queue(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.unsubscribe(q)
        assert bus.subscriber_count == 0
        bus.publish("after_unsub", {})
        assert q.empty()

    def test_full_queue_is_dropped(self):
        bus = EventBus(maxsize=3)
        bus.subscribe()
        for i in range(3):
            bus.publish("fill", {"i": i})
        assert bus.subscriber_count == 1
        bus.publish("overflow", {})
        assert bus.subscriber_count == 0

    def test_messages_are_numbered(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.publish("a", {})
        bus.publish("b", {})
        ids = [json.loads(q.get_nowait())["id"] for _ in range(2)]
        assert ids[1] == ids[0] + 1

    def test_subscriber_can_follow_one_event(self):
        bus = EventBus()
        everything = bus.subscribe()
        only_seven = bus.subscribe(event_id=7)

        bus.publish("match_updated", {"event_id": 7})
        bus.publish("match_updated", {"event_id": 8})
        bus.publish("heartbeat", {})

        assert everything.qsize() == 3
        seen = [json.loads(only_seven.get_nowait())["data"] for _ in range(only_seven.qsize())]
        assert seen == [{"event_id": 7}, {}]

    def test_thread_safety(self):
        bus = EventBus()
        received = []
        errors = []

        def sub_and_read():
            try:
                q = bus.subscribe()
                received.append(json.loads(q.get(timeout=2)))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=sub_and_read) for _ in range(5)]
        for t in threads:
            t.start()
        time.sleep(0.1)
        bus.publish("thread_test", {"ok": True})
        for t in threads:
            t.join(timeout=3)
        assert not errors
        assert len(received) == 5


# ── Services publish after commit ───────────────────────────────────────────


class TestServicesPublish:
    @pytest.fixture(autouse=True)
    def _clean_bus(self):
        event_bus.clear()
        yield
        event_bus.clear()

    @pytest.fixture
    def listener(self):
        q = event_bus.subscribe()
        yield q
        event_bus.unsubscribe(q)

    def _drain(self, q):
        messages = []
        while not q.empty():
            messages.append(json.loads(q.get_nowait()))
        return messages

    def test_generate_publishes_bracket_generated(self, grant, make_teams, make_event, seeds_for, listener):
        event = make_event()
        generate_bracket(grant, event.id, seeds_for(make_teams(4)))

        messages = self._drain(listener)
        assert [m["type"] for m in messages] == ["bracket_generated"]
        assert messages[0]["data"] == {"event_id": event.id, "teams": 4, "matches": 7}

    def test_completion_publishes_propagated_ids(self, grant, make_teams, make_event, seeds_for, listener):
        event = make_event()
        generate_bracket(grant, event.id, seeds_for(make_teams(4)))
        self._drain(listener)

        first = Match.query.filter_by(event_id=event.id, match_number=1).one()
        result = update_match(grant, first.id, [3, 1], completed=True)

        messages = self._drain(listener)
        assert messages[0]["type"] == "match_updated"
        assert messages[0]["data"]["status"] == "completed"
        assert sorted(messages[0]["data"]["propagated"]) == sorted(m.id for m in result["propagated"])

    def test_failed_update_publishes_nothing(self, grant, make_teams, make_event, seeds_for, listener):
        event = make_event()
        generate_bracket(grant, event.id, seeds_for(make_teams(4)))
        self._drain(listener)

        first = Match.query.filter_by(event_id=event.id, match_number=1).one()
        with pytest.raises(ValidationError):
            update_match(grant, first.id, [2, 2], completed=True)
        assert listener.empty()


# ── Stream endpoint ─────────────────────────────────────────────────────────


def test_stream_delivers_published_event(client):
    event_bus.clear()
    resp = client.get("/api/stream")
    assert resp.status_code == 200
    assert "text/event-stream" in resp.content_type

    def publish_later():
        time.sleep(0.2)
        event_bus.publish("test_sse", {"msg": "hello"})

    t = threading.Thread(target=publish_later)
    t.start()
    chunk = next(iter(resp.response))
    t.join(timeout=3)
    resp.close()

    if isinstance(chunk, bytes):
        chunk = chunk.decode()
    id_line, data_line = chunk.strip().split("\n")
    assert id_line.startswith("id: ")
    payload = json.loads(data_line.removeprefix("data: "))
    assert payload["id"] == int(id_line.removeprefix("id: "))
    assert payload["type"] == "test_sse"
    assert payload["data"]["msg"] == "hello"
    event_bus.clear()
