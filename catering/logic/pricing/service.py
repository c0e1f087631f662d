"""Reactive pricing: recompute on state changes, cache the latest result, notify listeners.

PricingService subscribes to "config.*" on a StateStore. Each write restarts a
debounce timer; when it elapses the service reads the latest snapshot, loads the
catalog through a CatalogCache (a failed read degrades to "no items" for that
category), recalculates, and publishes "updated" with the PricingResult.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional

from catering.domain.Category import Category
from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.domain.PricingResult import PricingResult
from catering.events.Event_Bus import EventBus, PRICING_UPDATED, PRICING_ERROR, PRICING_CACHE_CLEARED
from catering.infra.Catalog_Repository import CatalogCache
from catering.infra.State_Store import StateStore
from catering.logic.pricing.aggregator import recalculate, get_pricing_summary
from catering.logic.pricing.scheduler import Debouncer
from catering.utilities.config import DEBOUNCE_MS, TAX_RATE
from catering.utilities.errors import CatalogError, CateringError

logger = logging.getLogger(__name__)

# Categories read from the catalog for each recompute
CATALOG_CATEGORIES = tuple(Category)


class PricingService:
    def __init__(self, package: Package, store: StateStore, catalog: Optional[CatalogCache] = None, *,
                 event_bus: Optional[EventBus] = None, delay: float = DEBOUNCE_MS / 1000,
                 tax_rate: float = TAX_RATE):
        self.package = package
        self.store = store
        self.catalog = catalog
        self.tax_rate = tax_rate
        self.bus = event_bus or EventBus()
        self.debouncer = Debouncer(self._scheduled_recompute, delay)
        self._current: Optional[PricingResult] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    # --- Lifecycle ---
    def start(self) -> None:
        '''Subscribe to config changes (idempotent) and schedule a first calculation.'''
        if self._unsubscribe is None:
            self._unsubscribe = self.store.on_state_change("config.*", self._on_config_change)
        self.debouncer.trigger()

    def stop(self) -> None:
        '''Unsubscribe from the store and drop any scheduled recalculation.'''
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.debouncer.cancel()

    def _on_config_change(self, path: str, change: Dict[str, Any]) -> None:
        self.debouncer.trigger()

    # --- Observer helpers ---
    def on_pricing_change(self, topic: str, callback: Callable[[str, Any], None]) -> Callable[[], None]:
        '''Listen for "updated", "error", "cache_cleared" (or "*"). Returns an unsubscribe function.'''
        return self.bus.subscribe(topic, callback)

    # --- Calculation ---
    def load_catalog(self) -> Dict[Category, List[dict]]:
        catalog: Dict[Category, List[dict]] = {}
        if self.catalog is None:
            return catalog
        for category in CATALOG_CATEGORIES:
            try:
                catalog[category] = self.catalog.get_items_by_category(category, self.package.tier)
            except CatalogError as e:
                logger.warning(f"Catalog read failed for {category.value}: {e}; items unavailable")
            except Exception:
                logger.exception(f"Catalog source error for {category.value}; items unavailable")
        return catalog

    def recompute(self) -> PricingResult:
        config = CurrentConfig.from_dict(self.store.get_state("config", {}))
        result = recalculate(self.package, config, self.load_catalog(), tax_rate=self.tax_rate)
        self._current = result
        logger.info(f"Pricing updated for {self.package.id}: total {result.totals.to_dict()['total']}")
        self.bus.publish(PRICING_UPDATED, result)
        return result

    def _scheduled_recompute(self) -> None:
        try:
            self.recompute()
        except (CateringError, ValueError) as e:
            self.report_error(e)

    def flush(self) -> Optional[PricingResult]:
        '''Run any pending (debounced) recalculation now and return the current result.'''
        self.debouncer.flush()
        return self._current

    def get_current_pricing(self) -> Optional[PricingResult]:
        return self._current

    def get_pricing_summary(self) -> Dict[str, Any]:
        return get_pricing_summary(self._current)

    def clear_pricing_cache(self) -> None:
        '''Drop the cached result and catalog entries; the next flush recomputes from scratch.'''
        self._current = None
        if self.catalog is not None:
            self.catalog.invalidate()
        self.bus.publish(PRICING_CACHE_CLEARED, None)
        self.debouncer.trigger()

    def set_package(self, package: Package) -> None:
        '''Switch package: invalidates the catalog cache and schedules a recompute.'''
        self.package = package
        if self.catalog is not None:
            self.catalog.invalidate()
        self._current = None
        self.debouncer.trigger()

    def report_error(self, error: Exception) -> None:
        logger.error(f"Pricing error for {self.package.id}: {error}")
        self.bus.publish(PRICING_ERROR, {"error": str(error)})


__all__ = ['PricingService']
