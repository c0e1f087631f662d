"""Wing pricing: per-type deltas against the package defaults, cut-style upcharges, validation warnings."""
from __future__ import annotations
import logging
from typing import Dict, List, Tuple

from catering.domain.Category import Category
from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.domain.PricingResult import LineItem, PricingResult
from catering.utilities.config import CAULIFLOWER_UPCHARGE
from catering.utilities.constants import (
    UNIT_TYPES, UNIT_TYPE_LABELS, UNIT_STYLE_LABELS, UNIT_STYLE_UPCHARGES,
    MIN_UNITS_PER_TYPE, MIN_TOTAL_UNITS, UPCHARGE, WARNING,
)
from catering.utilities.money import format_price, format_price_delta

logger = logging.getLogger(__name__)

SOURCE = "wings"

# Per-unit rates used when a package does not price a unit type itself
FALLBACK_UNIT_RATES: Dict[str, float] = {"cauliflower": CAULIFLOWER_UPCHARGE}

CreditRequest = Tuple[Category, str, float, str]


def unit_rate(package: Package, unit_type: str) -> float:
    if unit_type in package.per_unit_cost:
        return package.per_unit_cost[unit_type]
    return FALLBACK_UNIT_RATES.get(unit_type, 0.0)


def included_wing_value(package: Package) -> float:
    """Value of the default distribution; removal credits for wings never exceed it."""
    return sum(int(count or 0) * unit_rate(package, t) for t, count in package.default_distribution.items())


def validate_distribution(package: Package, distribution: Dict[str, int]) -> List[str]:
    """Return human-readable warnings for an inconsistent distribution (never raises)."""
    warnings: List[str] = []
    counts = {t: int(c or 0) for t, c in distribution.items()}
    negatives = [t for t, c in counts.items() if c < 0]
    for t in negatives:
        warnings.append(f"{UNIT_TYPE_LABELS.get(t, t)} count cannot be negative")
    total = sum(c for c in counts.values() if c > 0)
    if package.total_units and total != package.total_units:
        warnings.append(f"Wing distribution totals {total} of {package.total_units} units")
    used = [t for t, c in counts.items() if c > 0]
    if len(used) > 1:
        for t in used:
            if counts[t] < MIN_UNITS_PER_TYPE:
                warnings.append(f"Minimum {MIN_UNITS_PER_TYPE} {UNIT_TYPE_LABELS.get(t, t)} wings when mixing types")
    if 0 < total < MIN_TOTAL_UNITS:
        warnings.append(f"Minimum {MIN_TOTAL_UNITS} total wings required")
    return warnings


def price_wings(package: Package, config: CurrentConfig, result: PricingResult) -> List[CreditRequest]:
    """Add wing items and upcharges to result; return removal-credit requests for the caller to cap."""
    credits: List[CreditRequest] = []
    defaults = package.default_distribution
    current = config.distribution

    for unit_type in list(UNIT_TYPES) + [t for t in current if t not in UNIT_TYPES]:
        count = int(current.get(unit_type, 0) or 0)
        if count > 0:
            result.add_item(f"wings-{unit_type}", LineItem(
                type="wings", quantity=count, unit_price=0.0,
                name=UNIT_TYPE_LABELS.get(unit_type, unit_type),
                metadata={"unit_type": unit_type},
            ))

    for unit_type in list(dict.fromkeys(list(defaults) + list(current))):
        delta = max(0, int(current.get(unit_type, 0) or 0)) - int(defaults.get(unit_type, 0) or 0)
        if not delta:
            continue
        rate = unit_rate(package, unit_type)
        label = UNIT_TYPE_LABELS.get(unit_type, unit_type)
        target = f"wings-{unit_type}"
        if delta > 0 and rate > 0:
            result.add_modifier(target, UPCHARGE, delta * rate,
                                f"{label} wings +{delta} ({format_price_delta(rate)}/wing)", SOURCE,
                                {"unit_type": unit_type, "delta": delta, "rate": rate})
        elif delta < 0 and rate > 0:
            credits.append((Category.WINGS, target, -delta * rate,
                            f"{label} wings {delta} (credit {format_price(rate)}/wing)"))

    style = config.unit_style or "mixed"
    style_rate = UNIT_STYLE_UPCHARGES.get(style, 0.0)
    bone_in = int(current.get("bone_in", 0) or 0)
    if style_rate and bone_in > 0:
        result.add_modifier("wings-bone_in", UPCHARGE, bone_in * style_rate,
                            f"{UNIT_STYLE_LABELS.get(style, style)} ({format_price_delta(style_rate)}/wing)", SOURCE,
                            {"style": style, "units": bone_in})

    for warning in validate_distribution(package, current):
        result.add_modifier("wings", WARNING, 0, warning, SOURCE)
        logger.warning(f"Wing validation: {warning}")

    total = sum(max(0, int(c or 0)) for c in current.values())
    result.completion_status[Category.WINGS.value] = total == package.total_units
    return credits


__all__ = ['price_wings', 'validate_distribution', 'unit_rate', 'included_wing_value']
