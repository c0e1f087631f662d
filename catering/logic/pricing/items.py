"""Pack-category and add-on pricing (dips, chips, sides, desserts, beverages).

Each pack category has an included unit count (packs x units per pack). Selections
above it are upcharged at the pack's add-on price; selections below it (or skipping
the category) earn a removal credit at the margin-tier share of the base price.
Add-on lines are charged at the catalog's unit price.
"""
from __future__ import annotations
import logging
from typing import List, Mapping

from catering.domain.Category import Category, PACK_CATEGORIES
from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.domain.PricingResult import LineItem, PricingResult
from catering.logic.packaging.containers import compute_pack_bundle
from catering.logic.pricing.sauces import find_catalog_item
from catering.logic.pricing.wings import CreditRequest
from catering.utilities.constants import INCLUDED, UPCHARGE, WARNING
from catering.utilities.money import format_price, format_price_delta

logger = logging.getLogger(__name__)


def _count(value) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def price_pack_category(package: Package, config: CurrentConfig, category: Category,
                        result: PricingResult) -> List[CreditRequest]:
    credits: List[CreditRequest] = []
    source = category.value
    pack = package.included_pack(category)
    label = category.label

    if config.is_skipped(category):
        if pack and pack.included_units:
            credits.append((category, source, pack.removal_credit_value,
                            f"Skipped {label} ({pack.included_units}) - credit {format_price(pack.removal_credit_value)}"))
        result.completion_status[source] = True
        return credits

    selections = config.selections_for(category, package)
    total = 0
    for selection in selections:
        count = _count(selection.get("count"))
        if not count:
            continue
        total += count
        result.add_item(f"{source}-{selection.get('id')}", LineItem(
            type=source, quantity=count, unit_price=0.0,
            name=selection.get("name", str(selection.get("id"))),
        ))

    if pack is None:
        if total:
            result.add_modifier(source, WARNING, 0, f"{label} are not included in this package; add them as add-ons", source)
        result.completion_status[source] = not total
        return credits

    included = pack.included_units
    bundle = compute_pack_bundle(total, pack.units_per_pack)
    if included and total >= included:
        result.add_modifier(source, INCLUDED, 0, f"{included} {label} included - $0.00", source,
                            {"packs_needed": bundle.packs_needed, "extras": bundle.extras})
    extra = max(0, total - included)
    if extra:
        result.add_modifier(source, UPCHARGE, extra * pack.add_on_price,
                            f"Extra {label} ({extra}) ({format_price_delta(pack.add_on_price)} each)", source,
                            {"extra_units": extra, "packs_needed": bundle.packs_needed, "extras": bundle.extras})
    short = max(0, included - total)
    if short:
        credits.append((category, source, short * pack.removal_credit_rate,
                        f"Removed {label} ({short}) - credit {format_price(pack.removal_credit_rate)} each"))
    result.completion_status[source] = total >= included
    return credits


def price_add_ons(package: Package, config: CurrentConfig, catalog: Mapping[Category, list],
                  result: PricingResult) -> None:
    for category, lines in config.add_ons.items():
        if not lines:
            continue
        if category not in package.allowed_add_on_categories:
            result.add_modifier(f"addon-{category.value}", WARNING, 0,
                                f"{category.label} add-ons are not available for this package", "add_ons")
            continue
        available = catalog.get(category)
        for line in lines:
            count = _count(line.get("count"))
            if not count:
                continue
            entry = find_catalog_item(available, line.get("id"))
            if entry is None:
                logger.warning(f"Add-on '{line.get('id')}' ({category.value}) not found in catalog; skipping from pricing")
                continue
            unit_price = float(entry.get("unit_price", 0) or 0)
            result.add_item(f"addon-{category.value}-{line.get('id')}", LineItem(
                type="add_on", quantity=count, unit_price=unit_price,
                name=entry.get("name", str(line.get("id"))), included=False,
                metadata={"category": category.value},
            ))


def price_items(package: Package, config: CurrentConfig, catalog: Mapping[Category, list],
                result: PricingResult) -> List[CreditRequest]:
    credits: List[CreditRequest] = []
    for category in PACK_CATEGORIES:
        if package.included_pack(category) is None and not config.selections_for(category, package) \
                and not config.is_skipped(category):
            continue
        credits.extend(price_pack_category(package, config, category, result))
    price_add_ons(package, config, catalog, result)
    return credits


__all__ = ['price_pack_category', 'price_add_ons', 'price_items']
