"""Pricing aggregator.

recalculate(package, config, catalog) combines the wing, sauce, pack-item,
add-on and removal calculators into one PricingResult and computes totals:

    items_subtotal  = sum(item.unit_price * item.quantity)   (package base + add-on lines)
    upcharges       = sum(upcharge modifiers)
    discounts       = sum(discount + removal-credit modifiers)
    subtotal        = items_subtotal + upcharges - discounts
    tax             = subtotal * tax_rate
    total           = subtotal + tax
    per_person_cost = total / guest_count

Amounts stay unrounded here; PricingTotals.to_dict rounds them for output.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from catering.domain.Category import Category
from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.domain.PricingResult import LineItem, Modifier, PricingResult, PricingTotals
from catering.logic.pricing.items import price_items
from catering.logic.pricing.removals import apply_removal_credits
from catering.logic.pricing.sauces import price_sauces
from catering.logic.pricing.wings import price_wings
from catering.utilities.config import TAX_RATE
from catering.utilities.constants import (
    DISCOUNT, MINIMUM_ORDER_VALUES, REMOVAL_CREDIT, UPCHARGE, WARNING,
)
from catering.utilities.money import format_price

logger = logging.getLogger(__name__)

PACKAGE_BASE_ID = "package-base"


def resolve_guest_count(guest_count: Optional[int], fallback: Optional[int] = None) -> int:
    """Unset guest count falls back to the package minimum; anything <= 0 counts as 1."""
    value = guest_count if guest_count is not None else fallback
    try:
        value = int(value)
    except (TypeError, ValueError):
        return 1
    return value if value > 0 else 1


def normalize_catalog(catalog: Optional[Mapping[Any, Iterable[dict]]]) -> Dict[Category, List[dict]]:
    """Key a raw catalog by Category and drop inactive items; unknown categories are logged and ignored."""
    normalized: Dict[Category, List[dict]] = {}
    for key, items in (catalog or {}).items():
        try:
            category = Category.parse(key)
        except ValueError:
            logger.warning(f"Ignoring catalog entries for unknown category {key!r}")
            continue
        normalized[category] = [dict(i) for i in (items or []) if i.get("active", True)]
    return normalized


def calculate_totals(items: Mapping[str, LineItem], modifiers: Iterable[Modifier], *,
                     tax_rate: float = TAX_RATE, guest_count: int = 1) -> PricingTotals:
    modifiers = list(modifiers)
    items_subtotal = sum(item.unit_price * item.quantity for item in items.values())
    upcharges = sum(m.amount for m in modifiers if m.kind == UPCHARGE)
    discounts = sum(m.amount for m in modifiers if m.kind in (DISCOUNT, REMOVAL_CREDIT))
    subtotal = items_subtotal + upcharges - discounts
    tax = subtotal * tax_rate
    total = subtotal + tax
    guests = resolve_guest_count(guest_count)
    return PricingTotals(
        items_subtotal=items_subtotal,
        upcharges=upcharges,
        discounts=discounts,
        subtotal=subtotal,
        tax=tax,
        tax_rate=tax_rate,
        total=total,
        per_person_cost=total / guests,
        guest_count=guests,
    )


def recalculate(package: Package, config: CurrentConfig, catalog: Optional[Mapping[Any, Iterable[dict]]] = None, *,
                tax_rate: float = TAX_RATE) -> PricingResult:
    """Compute the full itemized price for a configuration.

    Args:
        package: The package being customized (its defaults are the pricing baseline).
        config: Current customer configuration.
        catalog: Mapping category -> catalog items ({id, name, unit_price, active, ...}).
            Missing categories or items are treated as unavailable.
        tax_rate: Tax applied to the subtotal.

    Returns:
        PricingResult with items, modifiers and unrounded totals.
    """
    result = PricingResult()
    catalog_by_category = normalize_catalog(catalog)

    result.add_item(PACKAGE_BASE_ID, LineItem(
        type="package", quantity=1, unit_price=package.base_price,
        name=package.name or package.id, included=False,
        metadata={"tier": package.tier},
    ))

    credits = price_wings(package, config, result)
    price_sauces(package, config, catalog_by_category, result)
    credits.extend(price_items(package, config, catalog_by_category, result))
    apply_removal_credits(package, credits, result)

    result.totals = calculate_totals(
        result.items, result.modifiers, tax_rate=tax_rate,
        guest_count=resolve_guest_count(config.guest_count, package.min_servings),
    )

    minimum = MINIMUM_ORDER_VALUES.get(package.tier)
    if minimum is not None and result.totals.subtotal < minimum:
        result.add_modifier(PACKAGE_BASE_ID, WARNING, 0,
                            f"Order subtotal {format_price(result.totals.subtotal)} is below the "
                            f"tier {package.tier} minimum of {format_price(minimum)}", "totals")

    logger.debug(f"Recalculated pricing for {package.id}: total {format_price(result.totals.total)}")
    return result


def get_pricing_summary(result: Optional[PricingResult]) -> Dict[str, Any]:
    """Counts and completeness for a pricing result (empty summary when nothing is priced yet)."""
    if result is None:
        return {
            "item_count": 0, "upcharge_count": 0, "discount_count": 0, "warning_count": 0,
            "warnings": [], "total": 0.0, "per_person_cost": 0.0,
            "completion_status": {}, "is_complete": False,
        }
    totals = result.totals.to_dict()
    warnings = [m.label for m in result.modifiers_of(WARNING)]
    return {
        "item_count": len(result.items),
        "upcharge_count": len(result.modifiers_of(UPCHARGE)),
        "discount_count": len(result.modifiers_of(DISCOUNT)) + len(result.modifiers_of(REMOVAL_CREDIT)),
        "warning_count": len(warnings),
        "warnings": warnings,
        "total": totals["total"],
        "per_person_cost": totals["per_person_cost"],
        "completion_status": dict(result.completion_status),
        "is_complete": bool(result.completion_status) and all(result.completion_status.values()),
    }


__all__ = ['recalculate', 'calculate_totals', 'resolve_guest_count', 'normalize_catalog',
           'get_pricing_summary', 'PACKAGE_BASE_ID']
