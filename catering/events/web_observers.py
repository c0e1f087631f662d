"""Web-facing observer for pricing events.

EventFeed subscribes to one or more session buses for:
  - updated
  - error
  - cache_cleared

and stores a lightweight in-memory ring buffer of recent events that the web
layer (FastAPI endpoint) can poll to refresh totals without re-fetching the
whole pricing result.

Design:
  * Each event stored with an auto-increment integer id (cursor) so clients
    can request only newer events (since=<last_id_seen>).
  * A Lock guards the buffer; uvicorn serves sync endpoints from a thread pool.
  * A max_events cap prevents unbounded memory growth.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from .Event_Bus import EventBus, PRICING_UPDATED, PRICING_ERROR, PRICING_CACHE_CLEARED
from .event_helpers import describe_event

logger = logging.getLogger(__name__)

MAX_EVENTS = 300  # keep a few hundred recent events
FEED_EVENTS = (PRICING_UPDATED, PRICING_ERROR, PRICING_CACHE_CLEARED)


class EventFeed:
    def __init__(self, max_events: int = MAX_EVENTS):
        self.max_events = max_events
        self._lock = Lock()
        self._events: List[Dict[str, Any]] = []
        self._next_id = 1

    def attach(self, bus: EventBus, source: Optional[str] = None) -> Callable[[], None]:
        """Subscribe the feed to a bus; events are tagged with `source` (e.g. a session id).

        Returns a function that detaches every subscription made here.
        """

        def _record(event_name: str, payload: Any):  # signature expected by EventBus
            self.record(event_name, payload, source)

        unsubscribers = [bus.subscribe(name, _record) for name in FEED_EVENTS]

        def _detach():
            for unsubscribe in unsubscribers:
                unsubscribe()

        return _detach

    def record(self, event_name: str, payload: Any, source: Optional[str] = None) -> Dict[str, Any]:
        with self._lock:
            evt = {
                'id': self._next_id,
                'type': event_name,
                'ts': datetime.now(timezone.utc).isoformat(),
            }
            if source is not None:
                evt['source'] = source
            evt.update(describe_event(event_name, payload))
            self._events.append(evt)
            self._next_id += 1
            # Trim buffer
            if len(self._events) > self.max_events:
                del self._events[: len(self._events) - self.max_events]
        logger.debug(f"[EventFeed] recorded {event_name} #{evt['id']}")
        return evt

    def get_events(self, since: Optional[int] = None) -> Dict[str, Any]:
        """Return events newer than 'since' (exclusive).

        If since is None, returns the last N (up to max_events) events.
        Response includes next_cursor (largest id) so client can poll with since=next_cursor.
        """
        with self._lock:
            if since is None:
                data = list(self._events)
            else:
                data = [e for e in self._events if e['id'] > since]
            next_cursor = self._events[-1]['id'] if self._events else since or 0
        return {'events': data, 'next_cursor': next_cursor}


__all__ = ['EventFeed', 'MAX_EVENTS', 'FEED_EVENTS']
