"""Configuration state store: the single source of truth for a catering session.

Snapshot layout:
    {
      "package_id": str,
      "config": { distribution, unit_style, assignments, pack_selections,
                  skip, add_ons, guest_count, locked_baseline }
    }

Writes go through update_state(path, value), which deep-merges dicts at the
dotted path (lists and scalars replace). A write to "config.distribution.boneless"
therefore never touches "config.locked_baseline" or any other sibling.

Numeric leaves are clamped at this boundary: negative, NaN and infinite values
become 0 before they are stored.

Subscribers registered with on_state_change(pattern, callback) are called
synchronously in registration order after every committed write, each with its
own copy of the same post-write snapshot. Writes made from inside a callback are
queued and committed once the current notification round has finished.
"""
from __future__ import annotations
import copy
import logging
import math
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Tuple

from catering.events.Event_Bus import EventBus

logger = logging.getLogger(__name__)

StateCallback = Callable[[str, Dict[str, Any]], None]


def _split(path: Optional[str]):
    return [p for p in (path or '').split('.') if p]


def clamp_quantities(value: Any, path: str = '') -> Any:
    """Return a copy of value with every negative / NaN / infinite number replaced by 0."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            logger.warning(f"Clamped non-finite quantity at '{path}' to 0")
            return 0
        if value < 0:
            logger.warning(f"Clamped negative quantity {value} at '{path}' to 0")
            return 0
        return value
    if isinstance(value, dict):
        return {k: clamp_quantities(v, f"{path}.{k}" if path else str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [clamp_quantities(v, f"{path}[{i}]") for i, v in enumerate(value)]
    return copy.deepcopy(value)


def deep_merge(target: Dict[str, Any], value: Dict[str, Any]) -> Dict[str, Any]:
    """Merge value into target in place: dicts recurse, everything else replaces."""
    for key, incoming in value.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(incoming, dict):
            deep_merge(current, incoming)
        else:
            target[key] = copy.deepcopy(incoming)
    return target


class StateStore:
    def __init__(self, initial: Optional[Dict[str, Any]] = None, *, event_bus: Optional[EventBus] = None):
        self._state: Dict[str, Any] = clamp_quantities(initial or {})
        self._bus = event_bus or EventBus()
        self._pending: Deque[Tuple[str, Any, bool]] = deque()
        self._notifying = False
        self.version = 0

    # --- Reads ---
    def get_state(self, path: Optional[str] = None, default: Any = None) -> Any:
        '''Deep copy of the whole snapshot, or of the subtree at a dotted path (default if missing).'''
        node: Any = self._state
        for part in _split(path):
            if not isinstance(node, dict) or part not in node:
                return copy.deepcopy(default)
            node = node[part]
        return copy.deepcopy(node)

    # --- Writes ---
    def update_state(self, path: Optional[str], value: Any) -> None:
        '''Deep-merge value at the dotted path, then notify subscribers.'''
        self._enqueue(path or '', value, False)

    def replace_state(self, path: Optional[str], value: Any) -> None:
        '''Replace the subtree at the dotted path outright (used to drop keys).'''
        self._enqueue(path or '', value, True)

    def reset(self, state: Dict[str, Any]) -> None:
        self.replace_state('', state)

    def _enqueue(self, path: str, value: Any, replace: bool) -> None:
        self._pending.append((path, value, replace))
        if self._notifying:
            # Nested write from a subscriber: committed after the current round.
            return
        self._drain()

    def _drain(self) -> None:
        while self._pending:
            path, value, replace = self._pending.popleft()
            self._commit(path, value, replace)
            self._notify(path)

    def _commit(self, path: str, value: Any, replace: bool) -> None:
        clean = clamp_quantities(value, path)
        parts = _split(path)
        if not parts:
            if not isinstance(clean, dict):
                raise TypeError("Root state must be a dict")
            if replace:
                self._state = clean
            else:
                deep_merge(self._state, clean)
        else:
            node = self._state
            for part in parts[:-1]:
                child = node.get(part)
                if not isinstance(child, dict):
                    child = {}
                    node[part] = child
                node = child
            leaf = parts[-1]
            if not replace and isinstance(node.get(leaf), dict) and isinstance(clean, dict):
                deep_merge(node[leaf], clean)
            else:
                node[leaf] = clean
        self.version += 1
        logger.debug(f"State write #{self.version} at '{path or '<root>'}'")

    def _notify(self, path: str) -> None:
        snapshot = copy.deepcopy(self._state)
        payload = {
            "path": path,
            "value": self.get_state(path),
            "state": snapshot,
            "version": self.version,
        }
        self._notifying = True
        try:
            self._bus.publish(path, payload)
        finally:
            self._notifying = False

    # --- Subscriptions ---
    def on_state_change(self, pattern: str, callback: StateCallback) -> Callable[[], None]:
        '''Subscribe to writes matching pattern ("config.*", "config.distribution", "*").

        The callback receives (path, change) where change holds path, value, state and version.
        Returns an unsubscribe function.
        '''
        def _deliver(event_name: str, payload: Dict[str, Any]):
            callback(event_name, copy.deepcopy(payload))
        return self._bus.subscribe(pattern, _deliver)

    def subscriber_count(self) -> int:
        return self._bus.subscriber_count()


__all__ = ['StateStore', 'clamp_quantities', 'deep_merge']
