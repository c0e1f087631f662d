"""Packaging rules and container calculator.

Translates requested unit counts into physical containers:
- on-the-side sauce cups, sized by a viscosity classification table
- fixed-size bundles (dips come in 5-packs, chips in bags of 5)

All functions are pure: same input, same output, no hidden state. Counts never
under-provision and any overage is returned to the caller.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from math import ceil
from typing import Any, Dict, Iterable, List, Mapping, Optional

from catering.utilities.config import SAUCE_COVERAGE_RATIOS, DIP_PACK_SIZE

DEFAULT_KEY = "default"
CONTAINER_SIZE = "1.5oz"


@dataclass(frozen=True)
class PackagingRule:
    units_per_container: int
    pack_size: int = 1


@dataclass(frozen=True)
class ContainerResult:
    count: int
    pack_size: int
    units_per_container: int
    requested: int
    packaging_key: str = DEFAULT_KEY
    size: str = CONTAINER_SIZE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "pack_size": self.pack_size,
            "units_per_container": self.units_per_container,
            "requested": self.requested,
            "packaging_key": self.packaging_key,
            "size": self.size,
        }


@dataclass(frozen=True)
class PackBundle:
    total_requested: int
    pack_size: int
    packs_needed: int
    total_provided: int
    extras: int
    breakdown: List[Dict[str, Any]] = field(default_factory=list, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_requested": self.total_requested,
            "pack_size": self.pack_size,
            "packs_needed": self.packs_needed,
            "total_provided": self.total_provided,
            "extras": self.extras,
            "breakdown": [dict(b) for b in self.breakdown],
        }


def _non_negative_int(value) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number or number <= 0:  # NaN or non-positive
        return 0
    return int(ceil(number))


def packaging_rule(packaging_key: Optional[str], ratios: Optional[Mapping[str, int]] = None) -> PackagingRule:
    """Look up the coverage ratio for a classification key (unknown keys use the default ratio)."""
    table = ratios if ratios is not None else SAUCE_COVERAGE_RATIOS
    ratio = table.get(packaging_key or DEFAULT_KEY) or table[DEFAULT_KEY]
    return PackagingRule(units_per_container=ratio)


def classify_sauce(variant_info: Optional[Mapping[str, Any]]) -> str:
    """Map sauce metadata ({is_dry_rub, viscosity, category}) to a classification key."""
    info = variant_info or {}
    if info.get("is_dry_rub") or info.get("category") == "dry-rub":
        return "dry"
    viscosity = str(info.get("viscosity") or "").lower()
    if viscosity in ("thin", "thick", "creamy"):
        return viscosity
    if str(info.get("category") or "").lower() == "creamy":
        return "creamy"
    return DEFAULT_KEY


def compute_containers(quantity, packaging_key: Optional[str] = DEFAULT_KEY,
                       ratios: Optional[Mapping[str, int]] = None) -> ContainerResult:
    """Containers needed to serve `quantity` units on the side.

    Args:
        quantity: Units getting this sauce. Zero, negative or invalid counts yield 0 containers.
        packaging_key: Classification key (dry, thin, thick, creamy, default).
        ratios: Optional override of the coverage table.

    Returns:
        ContainerResult with count = ceil(quantity / units_per_container).
    """
    requested = _non_negative_int(quantity)
    key = packaging_key if packaging_key in (ratios if ratios is not None else SAUCE_COVERAGE_RATIOS) else DEFAULT_KEY
    rule = packaging_rule(key, ratios)
    count = ceil(requested / rule.units_per_container) if requested else 0
    return ContainerResult(
        count=count,
        pack_size=rule.pack_size,
        units_per_container=rule.units_per_container,
        requested=requested,
        packaging_key=key,
    )


def compute_pack_bundle(total_requested, pack_size: int = DIP_PACK_SIZE) -> PackBundle:
    """Round a requested unit count up to whole packs, reporting the overage as extras."""
    if pack_size <= 0:
        raise ValueError("pack_size must be positive")
    requested = _non_negative_int(total_requested)
    packs_needed = ceil(requested / pack_size) if requested else 0
    total_provided = packs_needed * pack_size
    return PackBundle(
        total_requested=requested,
        pack_size=pack_size,
        packs_needed=packs_needed,
        total_provided=total_provided,
        extras=total_provided - requested,
    )


def compute_dip_bundle(selections: Iterable[Mapping[str, Any]], pack_size: int = DIP_PACK_SIZE) -> PackBundle:
    """Bundle a list of {id, name, count} dip selections into 5-packs, keeping the per-dip breakdown."""
    selections = list(selections or [])
    total = sum(_non_negative_int(s.get("count", 0)) for s in selections)
    bundle = compute_pack_bundle(total, pack_size)
    breakdown = [
        {"id": s.get("id"), "name": s.get("name", ""), "count": _non_negative_int(s.get("count", 0)), "size": CONTAINER_SIZE}
        for s in selections
    ]
    return PackBundle(
        total_requested=bundle.total_requested,
        pack_size=bundle.pack_size,
        packs_needed=bundle.packs_needed,
        total_provided=bundle.total_provided,
        extras=bundle.extras,
        breakdown=breakdown,
    )


__all__ = [
    'PackagingRule', 'ContainerResult', 'PackBundle',
    'packaging_rule', 'classify_sauce', 'compute_containers', 'compute_pack_bundle', 'compute_dip_bundle',
]
