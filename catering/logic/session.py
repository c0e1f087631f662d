"""Catering session: one package, one state store, one pricing service.

Every customer action is a store write; detection, breakdown and pricing are
always derived from the current snapshot. Multi-field actions (skipping a
category clears its selections) are committed as a single merge so no
subscriber can observe a half-applied update.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from catering.domain.Category import Category
from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.domain.PricingResult import PricingResult
from catering.events.Event_Bus import EventBus
from catering.infra.Catalog_Repository import CatalogCache
from catering.infra.State_Store import StateStore
from catering.logic.breakdown.assembler import build_breakdown
from catering.logic.defaults.smart_defaults import lock_baseline, rebalance_split
from catering.logic.modifications.detector import ModificationRecord, detect_modifications
from catering.logic.pricing.service import PricingService
from catering.utilities.config import DEBOUNCE_MS
from catering.utilities.constants import UNIT_STYLES

logger = logging.getLogger(__name__)


class CateringSession:
    def __init__(self, package: Package, *, config: Optional[CurrentConfig] = None,
                 store: Optional[StateStore] = None, catalog: Optional[CatalogCache] = None,
                 event_bus: Optional[EventBus] = None, delay: float = DEBOUNCE_MS / 1000):
        self.package = package
        initial = config if config is not None else CurrentConfig.from_package(package)
        self.store = store or StateStore({"package_id": package.id, "config": initial.to_dict()})
        self.pricing_service = PricingService(package, self.store, catalog, event_bus=event_bus, delay=delay)
        self.pricing_service.start()

    @staticmethod
    def new_config(package: Package) -> CurrentConfig:
        return CurrentConfig.from_package(package)

    # --- Reads ---
    @property
    def config(self) -> CurrentConfig:
        return CurrentConfig.from_dict(self.store.get_state("config", {}))

    def baseline_package(self, config: Optional[CurrentConfig] = None) -> Package:
        '''Package defaults with the locked smart-default distribution applied, if one was derived.'''
        config = config or self.config
        return self.package.with_baseline(config.locked_distribution)

    def modifications(self) -> Dict[Category, ModificationRecord]:
        config = self.config
        return detect_modifications(self.baseline_package(config), config)

    def breakdown(self) -> Dict[str, Dict[str, Any]]:
        config = self.config
        baseline = self.baseline_package(config)
        return build_breakdown(baseline, config, detect_modifications(baseline, config),
                               self.pricing_service.load_catalog())

    def pricing(self) -> PricingResult:
        '''Latest pricing, running any debounced recalculation first.'''
        result = self.pricing_service.flush()
        return result if result is not None else self.pricing_service.recompute()

    # --- Customer actions ---
    def apply_smart_defaults(self, percentages: Optional[Mapping[str, float]] = None) -> Dict[str, int]:
        '''Derive the baseline split once and lock it into the snapshot.'''
        locked = lock_baseline(self.package.total_units, percentages)
        self.store.update_state("config", {"distribution": locked["distribution"], "locked_baseline": locked})
        logger.info(f"Smart defaults locked for {self.package.id}: {locked['distribution']}")
        return locked["distribution"]

    def set_distribution(self, distribution: Mapping[str, int]) -> None:
        self.store.update_state("config.distribution", dict(distribution))

    def adjust_split(self, unit_type: str, value: int) -> Dict[str, int]:
        '''Change one unit type; its sibling absorbs the difference within the locked group total.'''
        config = self.config
        distribution = rebalance_split(config.distribution, config.locked_baseline, unit_type, value)
        self.store.update_state("config.distribution", distribution)
        return distribution

    def set_unit_style(self, style: str) -> None:
        if style not in UNIT_STYLES:
            raise ValueError(f"Unknown unit style: {style!r}")
        self.store.update_state("config.unit_style", style)

    def set_assignments(self, assignments: List[dict]) -> None:
        self.store.update_state("config.assignments", [dict(a) for a in assignments])

    def set_pack_selections(self, category, selections: List[dict]) -> None:
        category = Category.parse(category)
        self.store.update_state("config", {
            "pack_selections": {category.value: [dict(s) for s in selections]},
            "skip": {category.value: False},
        })

    def toggle_skip(self, category, skip: Optional[bool] = None) -> bool:
        '''Skip (or restore) a pack category. Skipping clears its selections in the same write.'''
        category = Category.parse(category)
        new_value = (not self.config.is_skipped(category)) if skip is None else bool(skip)
        if new_value:
            selections: List[dict] = []
        else:
            pack = self.package.included_pack(category)
            selections = [dict(s) for s in pack.default_selections] if pack else []
        self.store.update_state("config", {
            "skip": {category.value: new_value},
            "pack_selections": {category.value: selections},
        })
        return new_value

    def set_add_ons(self, category, lines: List[dict]) -> None:
        category = Category.parse(category)
        self.store.update_state("config.add_ons", {category.value: [dict(line) for line in lines]})

    def set_guest_count(self, guest_count: Optional[int]) -> None:
        self.store.update_state("config.guest_count", guest_count)

    def switch_package(self, package: Package) -> None:
        '''Start over on another package. Its defaults replace the config; the guest count is kept.'''
        guest_count = self.config.guest_count
        config = CurrentConfig.from_package(package)
        config.guest_count = guest_count
        self.package = package
        self.pricing_service.set_package(package)
        self.store.reset({"package_id": package.id, "config": config.to_dict()})
        logger.info(f"Session switched to package {package.id}")

    # --- Persistence ---
    def to_dict(self) -> Dict[str, Any]:
        return self.config.to_dict()

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_json(cls, package: Package, text: str, **kwargs) -> "CateringSession":
        return cls(package, config=CurrentConfig.from_json(text), **kwargs)

    def close(self) -> None:
        self.pricing_service.stop()


__all__ = ['CateringSession']
