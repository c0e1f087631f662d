"""In-process registry of live catering sessions for the HTTP layer.

Sessions hold a store subscription and an event-feed subscription, so they are
closed explicitly (DELETE) or evicted once idle for longer than idle_seconds.
"""
import logging
import time
from pathlib import Path
from threading import Lock
from typing import Callable, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.events.Event_Bus import EventBus
from catering.events.event_helpers import attach_debug_listener
from catering.events.web_observers import EventFeed
from catering.infra.Catalog_Repository import CatalogCache
from catering.infra.Package_Repository import reading_from_packages, get_package
from catering.infra.Session_Repository import SessionRepository
from catering.logic.session import CateringSession
from catering.utilities.config import DEBUG, SESSION_IDLE_SECONDS

logger = logging.getLogger("catering_app")


class SessionRegistry:
    def __init__(self, packages_path: Path, catalog: CatalogCache, repository: SessionRepository,
                 feed: Optional[EventFeed] = None, debug: bool = DEBUG,
                 idle_seconds: float = SESSION_IDLE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.packages_path = packages_path
        self.catalog = catalog
        self.repository = repository
        self.feed = feed or EventFeed()
        self.debug = debug
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._sessions: Dict[str, CateringSession] = {}
        self._detach: Dict[str, List[Callable[[], None]]] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = Lock()

    def packages(self) -> Dict[str, Package]:
        return reading_from_packages(self.packages_path)

    def package(self, package_id: str) -> Package:
        return get_package(package_id, self.packages_path)

    def create(self, package_id: str, *, guest_count: Optional[int] = None,
               percentages: Optional[Mapping[str, float]] = None,
               restore: bool = False) -> Tuple[str, CateringSession]:
        '''Open a session for a package. Restores the saved config when asked and one exists.'''
        self.evict_idle()
        package = self.package(package_id)
        config = None
        if restore:
            saved = self.repository.load(package_id)
            if saved is not None:
                config = CurrentConfig.from_dict(saved)
        session_id = uuid4().hex
        bus = EventBus()
        detach = [self.feed.attach(bus, source=session_id)]
        if self.debug:
            detach.append(attach_debug_listener(bus))
        session = CateringSession(package, config=config, catalog=self.catalog, event_bus=bus)
        if percentages is not None:
            session.apply_smart_defaults(percentages)
        if guest_count is not None:
            session.set_guest_count(guest_count)
        with self._lock:
            self._sessions[session_id] = session
            self._detach[session_id] = detach
            self._last_seen[session_id] = self._clock()
        logger.info(f"Session {session_id} opened for package {package_id} (restored={config is not None})")
        return session_id, session

    def get(self, session_id: str) -> CateringSession:
        with self._lock:
            session = self._sessions[session_id]
            self._last_seen[session_id] = self._clock()
            return session

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def save(self, session_id: str) -> None:
        session = self.get(session_id)
        self.repository.save(session.package.id, session.to_dict())

    def switch_package(self, session_id: str, package_id: str) -> CateringSession:
        session = self.get(session_id)
        session.switch_package(self.package(package_id))
        return session

    def close(self, session_id: str) -> None:
        '''Stop a session's pricing, detach it from the feed and forget it. Raises KeyError if unknown.'''
        with self._lock:
            session = self._sessions.pop(session_id)
            detach = self._detach.pop(session_id, [])
            self._last_seen.pop(session_id, None)
        session.close()
        for unsubscribe in detach:
            unsubscribe()
        logger.info(f"Session {session_id} closed")

    def evict_idle(self) -> List[str]:
        '''Close every session not read or written for longer than idle_seconds.'''
        cutoff = self._clock() - self.idle_seconds
        with self._lock:
            stale = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for session_id in stale:
            try:
                self.close(session_id)
            except KeyError:
                continue
        if stale:
            logger.info(f"Evicted {len(stale)} idle session(s)")
        return stale

    def invalidate_catalog(self) -> int:
        '''Drop cached catalog reads and schedule a recompute in every live session.'''
        self.catalog.invalidate()
        with self._lock:
            sessions = list(self._sessions.values())
        for session in sessions:
            session.pricing_service.clear_pricing_cache()
        return len(sessions)


__all__ = ['SessionRegistry']
