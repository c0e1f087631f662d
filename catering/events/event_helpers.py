"""Event helper utilities.

Helpers that turn pricing-bus payloads into small JSON-friendly dicts for the
web feed and logs, plus a debug listener that can be attached to any bus.

Quick import:
    from catering.events.event_helpers import (
        describe_event, attach_debug_listener,
        PRICING_UPDATED, PRICING_ERROR, PRICING_CACHE_CLEARED
    )
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict

from catering.domain.PricingResult import PricingResult
from catering.utilities.constants import WARNING
from catering.utilities.money import round_currency
from .Event_Bus import (
    EventBus, WILDCARD,
    PRICING_UPDATED, PRICING_ERROR, PRICING_CACHE_CLEARED
)

logger = logging.getLogger(__name__)

__all__ = [
    'describe_event', 'describe_pricing', 'attach_debug_listener',
    'PRICING_UPDATED', 'PRICING_ERROR', 'PRICING_CACHE_CLEARED'
]


def describe_pricing(result: PricingResult) -> Dict[str, Any]:
    """Compact view of a PricingResult: totals plus warning labels."""
    return {
        'subtotal': round_currency(result.totals.subtotal),
        'total': round_currency(result.totals.total),
        'per_person_cost': round_currency(result.totals.per_person_cost),
        'warnings': [m.label for m in result.modifiers_of(WARNING)],
    }


def describe_event(event_name: str, payload: Any) -> Dict[str, Any]:
    """Normalize a bus payload for the web feed.

    Payload structure:
        updated        -> {subtotal, total, per_person_cost, warnings}
        error          -> {error}
        cache_cleared  -> {}
        config.<path>  -> {path, version}
    """
    if isinstance(payload, PricingResult):
        return describe_pricing(payload)
    if isinstance(payload, dict):
        if 'error' in payload:
            return {'error': str(payload['error'])}
        if 'path' in payload:
            return {'path': payload.get('path'), 'version': payload.get('version')}
    return {}


def attach_debug_listener(bus: EventBus, pattern: str = WILDCARD) -> Callable[[], None]:
    """Log every matching event at DEBUG level. Returns the unsubscribe function."""

    def _debug_listener(event_name: str, payload: Any):
        logger.debug(f"[EVENT DEBUG] {event_name}: {describe_event(event_name, payload)}")

    return bus.subscribe(pattern, _debug_listener)
