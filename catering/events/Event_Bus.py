"""Simple Event Bus / Observer implementation for state and pricing notifications.

Event names used so far:
  config.<path>      -> published by StateStore after each committed write
                        payload {"path": str, "value": Any, "state": dict}
  updated            -> PricingService, payload PricingResult
  error              -> PricingService, payload {"error": str}
  cache_cleared      -> PricingService, payload None

Subscriptions take a pattern: an exact name, a prefix ending in ".*", or "*".
Callbacks are delivered in registration order, regardless of pattern.
"""
from __future__ import annotations
import logging
from typing import Callable, Any, List, Tuple

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PRICING_UPDATED = "updated"
PRICING_ERROR = "error"
PRICING_CACHE_CLEARED = "cache_cleared"
WILDCARD = "*"

Callback = Callable[[str, Any], None]


def pattern_matches(pattern: str, event_name: str) -> bool:
	"""True when a write/event at `event_name` concerns subscribers of `pattern`.

	Dotted names are hierarchical: a pattern matches events at, below, or above it
	("config.*" sees "config.distribution.boneless" and a whole-"config" write).
	"""
	if pattern == WILDCARD or not event_name:
		return True
	prefix = pattern[:-2] if pattern.endswith(".*") else pattern
	if event_name == prefix:
		return True
	if event_name.startswith(prefix + "."):
		return True
	return prefix.startswith(event_name + ".")


class EventBus:
	def __init__(self):
		self._subscribers: List[Tuple[str, Callback]] = []

	def subscribe(self, pattern: str, callback: Callback) -> Callable[[], None]:
		'''Register a callback; returns a function that removes it.'''
		entry = (pattern, callback)
		if entry not in self._subscribers:
			self._subscribers.append(entry)
		return lambda: self.unsubscribe(pattern, callback)

	def unsubscribe(self, pattern: str, callback: Callback):
		try:
			self._subscribers.remove((pattern, callback))
		except ValueError:
			pass

	def subscriber_count(self) -> int:
		return len(self._subscribers)

	def publish(self, event_name: str, payload: Any):
		for pattern, cb in list(self._subscribers):
			if not pattern_matches(pattern, event_name):
				continue
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception(f"[EventBus] Error delivering {event_name} to {cb}")


__all__ = [
	'EventBus', 'pattern_matches',
	'PRICING_UPDATED', 'PRICING_ERROR', 'PRICING_CACHE_CLEARED', 'WILDCARD'
]
