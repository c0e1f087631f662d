"""Sauce pricing: included sauce slots, extra-sauce upcharges, over-assignment warnings."""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional

from catering.domain.Category import Category
from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.domain.PricingResult import LineItem, PricingResult
from catering.logic.packaging.containers import classify_sauce, compute_containers
from catering.utilities.constants import EXTRA_SAUCE_PRICE, UNIT_TYPE_LABELS, UPCHARGE, WARNING
from catering.utilities.money import format_price_delta

logger = logging.getLogger(__name__)

SOURCE = "sauces"


def find_catalog_item(items: Optional[List[Dict[str, Any]]], item_id) -> Optional[Dict[str, Any]]:
    for item in items or []:
        if str(item.get("id")) == str(item_id) and item.get("active", True):
            return item
    return None


def resolve_variant_info(assignment: Mapping[str, Any],
                         sauces_catalog: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    '''Catalog variant_info for the assigned sauce, overridden by any inline variant_info.'''
    entry = find_catalog_item(sauces_catalog, assignment.get("variant_id"))
    info = dict((entry or {}).get("variant_info") or {})
    info.update(assignment.get("variant_info") or {})
    return info


def price_sauces(package: Package, config: CurrentConfig, catalog: Mapping[Category, List[dict]],
                 result: PricingResult) -> None:
    sauces_catalog = catalog.get(Category.SAUCES)
    assigned_per_type: Dict[str, int] = defaultdict(int)
    included_variants: List[str] = []
    extra_variants: List[str] = []

    for assignment in config.assignments:
        variant_id = str(assignment.get("variant_id", ""))
        unit_type = str(assignment.get("unit_type", ""))
        count = max(0, int(assignment.get("count", 0) or 0))
        if not count:
            continue
        entry = find_catalog_item(sauces_catalog, variant_id)
        if entry is None:
            logger.warning(f"Sauce '{variant_id}' not found in catalog; skipping from pricing")
            continue
        assigned_per_type[unit_type] += count

        if variant_id not in included_variants and variant_id not in extra_variants:
            if len(included_variants) < package.sauce_slots:
                included_variants.append(variant_id)
            else:
                extra_variants.append(variant_id)

        method = assignment.get("application_method") or "tossed"
        metadata = {"unit_type": unit_type, "variant_id": variant_id, "application_method": method}
        if method == "on_the_side":
            packaging_key = classify_sauce(resolve_variant_info(assignment, sauces_catalog))
            metadata["containers"] = compute_containers(count, packaging_key).count
        result.add_item(f"sauce-{unit_type}-{variant_id}", LineItem(
            type="sauce", quantity=count, unit_price=0.0,
            name=entry.get("name", variant_id), included=variant_id in included_variants,
            metadata=metadata,
        ))

    for variant_id in extra_variants:
        result.add_modifier(f"sauce-extra-{variant_id}", UPCHARGE, EXTRA_SAUCE_PRICE,
                            f"Extra sauce: {variant_id} ({format_price_delta(EXTRA_SAUCE_PRICE)})", SOURCE)
        logger.info(f"Applied extra sauce upcharge for {variant_id}")

    for unit_type, assigned in assigned_per_type.items():
        available = max(0, int(config.distribution.get(unit_type, 0) or 0))
        if assigned > available:
            result.add_modifier("sauces", WARNING, 0,
                                f"{assigned} {UNIT_TYPE_LABELS.get(unit_type, unit_type)} wings sauced but only {available} ordered",
                                SOURCE)

    result.completion_status[Category.SAUCES.value] = bool(included_variants)


__all__ = ['price_sauces', 'find_catalog_item', 'resolve_variant_info']
