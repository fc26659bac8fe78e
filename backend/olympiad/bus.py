import itertools
import json
import logging
import queue
import threading
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


class EventBus:
    """In-memory fan-out of bracket and event changes to SSE listeners.

    A subscriber may follow every sporting event or a single one; messages
    whose ``data`` carries a different ``event_id`` are not delivered to it.
    Every message gets a monotonically increasing ``id`` so a stream can
    label its frames.
    """

    def __init__(self, maxsize=50):
        self._subscribers = {}
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._sequence = itertools.count(1)

    def subscribe(self, event_id=None):
        q = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers[q] = event_id
        return q

    def unsubscribe(self, q):
        with self._lock:
            self._subscribers.pop(q, None)

    def publish(self, message_type, data):
        """Deliver to every interested subscriber; full queues are dropped."""
        with self._lock:
            message = json.dumps({
                "id": next(self._sequence),
                "type": message_type,
                "data": data,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            })
            target = data.get("event_id") if isinstance(data, dict) else None

            dropped = []
            for q, follows in self._subscribers.items():
                if follows is not None and target is not None and follows != target:
                    continue
                try:
                    q.put_nowait(message)
                except queue.Full:
                    dropped.append(q)
            for q in dropped:
                del self._subscribers[q]

        if dropped:
            logger.warning("Dropped %d slow stream subscriber(s)", len(dropped))

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def clear(self):
        with self._lock:
            self._subscribers.clear()


def sse_frame(message):
    """Render a published message as one Server-Sent Events frame."""
    message_id = json.loads(message)["id"]
    return f"id: {message_id}\ndata: {message}\n\n"


event_bus = EventBus()
