"""Removal credits: caps and emission.

Calculators return credit requests (category, target_id, amount, label). Two caps
apply, in order:
- per category: credits never exceed what removing every included unit would earn
- overall: credits never exceed MAX_REMOVAL_CREDIT_PERCENTAGE of the base price
When the overall cap bites, later requests are reduced and a warning is added.
"""
from __future__ import annotations
import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from catering.domain.Category import Category
from catering.domain.Package import Package
from catering.domain.PricingResult import PricingResult
from catering.logic.pricing.wings import CreditRequest, included_wing_value
from catering.utilities.config import MAX_REMOVAL_CREDIT_PERCENTAGE
from catering.utilities.constants import REMOVAL_CREDIT, WARNING
from catering.utilities.money import format_price

logger = logging.getLogger(__name__)

SOURCE = "removals"


def category_included_value(package: Package, category: Category) -> float:
    if category is Category.WINGS:
        return included_wing_value(package)
    pack = package.included_pack(category)
    return pack.removal_credit_value if pack else 0.0


def cap_per_category(package: Package, requests: List[CreditRequest]) -> List[CreditRequest]:
    remaining: Dict[Category, float] = OrderedDict()
    capped: List[CreditRequest] = []
    for category, target, amount, label in requests:
        if category not in remaining:
            remaining[category] = category_included_value(package, category)
        granted = min(amount, remaining[category])
        if granted < amount:
            logger.warning(f"Removal credit for {target} capped at {category.value} included value")
        remaining[category] -= granted
        capped.append((category, target, granted, label))
    return capped


def apply_removal_credits(package: Package, requests: List[CreditRequest], result: PricingResult, *,
                          max_percentage: Optional[float] = None) -> float:
    """Cap the requests and append removal-credit modifiers. Returns the total credit granted."""
    pct = MAX_REMOVAL_CREDIT_PERCENTAGE if max_percentage is None else max_percentage
    capped = cap_per_category(package, requests)
    requested_total = sum(r[2] for r in capped)
    limit = package.base_price * pct
    remaining = limit
    granted_total = 0.0
    for category, target, amount, label in capped:
        granted = min(amount, max(0.0, remaining))
        remaining -= granted
        if granted <= 0:
            continue
        granted_total += granted
        result.add_modifier(target, REMOVAL_CREDIT, granted, label, SOURCE,
                            {"category": category.value, "requested": amount})

    if requested_total - limit > 1e-9:
        logger.warning(f"Removal credit cap exceeded: requested {format_price(requested_total)}, "
                       f"max {format_price(limit)}")
        result.add_modifier("removal-credit-cap", WARNING, 0,
                            f"Removal credits capped at {pct * 100:.0f}% of base price ({format_price(limit)})",
                            SOURCE, {"requested": requested_total, "max_credit": limit})
    result.completion_status["removals"] = True
    return granted_total


__all__ = ['apply_removal_credits', 'cap_per_category', 'category_included_value']
