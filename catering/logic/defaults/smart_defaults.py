"""Smart defaults: derive a locked baseline split from high-level percentages.

derive_defaults(total_units, target_percentages) splits the total into primary
groups (traditional / plant-based), assigns any rounding remainder to the first
group, then splits multi-type groups by the secondary ratio (60% boneless).
"""
from __future__ import annotations
from math import floor
from typing import Dict, Mapping, Optional

from catering.utilities.config import SECONDARY_SPLIT_RATIO
from catering.utilities.constants import UNIT_TYPE_GROUPS, DEFAULT_PERCENTAGES


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def _clean_percentages(target_percentages: Optional[Mapping[str, float]]) -> Dict[str, float]:
    cleaned: Dict[str, float] = {}
    for group in UNIT_TYPE_GROUPS:
        try:
            pct = float((target_percentages or {}).get(group, 0) or 0)
        except (TypeError, ValueError):
            pct = 0.0
        cleaned[group] = pct if pct == pct and pct > 0 else 0.0  # drop NaN / negatives
    if not sum(cleaned.values()):
        return {group: float(DEFAULT_PERCENTAGES.get(group, 0)) for group in UNIT_TYPE_GROUPS}
    return cleaned


def derive_defaults(total_units: int, target_percentages: Optional[Mapping[str, float]] = None, *,
                    secondary_ratio: float = SECONDARY_SPLIT_RATIO) -> Dict[str, int]:
    """Split total_units into per-unit-type counts.

    Args:
        total_units: Units to distribute (negative treated as 0).
        target_percentages: Map of primary group -> percent, e.g. {"traditional": 70, "plant_based": 30}.
            Missing or all-zero means 100% traditional.
        secondary_ratio: Share of a two-type group given to its first type (boneless).

    Returns:
        Dict unit_type -> count, covering every known unit type and summing exactly to total_units.
    """
    total = max(0, int(total_units or 0))
    percentages = _clean_percentages(target_percentages)

    groups = list(UNIT_TYPE_GROUPS)
    group_counts = {g: _round_half_up(total * percentages[g] / 100) for g in groups}

    # Remainder (either sign) goes to the first group so the split always sums to total.
    remainder = total - sum(group_counts.values())
    group_counts[groups[0]] += remainder
    if group_counts[groups[0]] < 0:
        # Over-rounding larger than the first group: take the excess from the others in order
        deficit = -group_counts[groups[0]]
        group_counts[groups[0]] = 0
        for g in groups[1:]:
            take = min(deficit, group_counts[g])
            group_counts[g] -= take
            deficit -= take

    distribution: Dict[str, int] = {}
    for group, count in group_counts.items():
        types = UNIT_TYPE_GROUPS[group]
        if len(types) == 1:
            distribution[types[0]] = count
            continue
        first = _round_half_up(count * secondary_ratio)
        distribution[types[0]] = first
        distribution[types[1]] = count - first
    return distribution


def group_totals(distribution: Mapping[str, int]) -> Dict[str, int]:
    """Roll a unit-type distribution up into its primary groups."""
    return {
        group: sum(int(distribution.get(t, 0) or 0) for t in types)
        for group, types in UNIT_TYPE_GROUPS.items()
    }


def lock_baseline(total_units: int, target_percentages: Optional[Mapping[str, float]] = None, *,
                  secondary_ratio: float = SECONDARY_SPLIT_RATIO) -> Dict:
    """Build the locked-baseline record stored in the session snapshot."""
    distribution = derive_defaults(total_units, target_percentages, secondary_ratio=secondary_ratio)
    return {
        "distribution": distribution,
        "group_totals": group_totals(distribution),
        "total_units": max(0, int(total_units or 0)),
        "percentages": _clean_percentages(target_percentages),
    }


def group_of(unit_type: str) -> Optional[str]:
    for group, types in UNIT_TYPE_GROUPS.items():
        if unit_type in types:
            return group
    return None


def rebalance_split(distribution: Mapping[str, int], locked_baseline: Optional[Mapping], unit_type: str,
                    value: int) -> Dict[str, int]:
    """Set one unit type and give its sibling the rest of the locked group total.

    The group total comes from the locked baseline, never from the current counts,
    so repeated partial edits cannot drift the total established at derivation time.
    Without a locked baseline the current group sum is used.
    """
    group = group_of(unit_type)
    if group is None:
        raise ValueError(f"Unknown unit type: {unit_type!r}")
    result = {k: int(v or 0) for k, v in distribution.items()}
    locked_totals = (locked_baseline or {}).get("group_totals") or {}
    types = UNIT_TYPE_GROUPS[group]
    group_total = int(locked_totals.get(group, sum(result.get(t, 0) for t in types)))
    requested = max(0, min(int(value or 0), group_total))
    result[unit_type] = requested
    siblings = [t for t in types if t != unit_type]
    if siblings:
        result[siblings[0]] = group_total - requested
        for other in siblings[1:]:
            result[other] = 0
    return result


__all__ = ['derive_defaults', 'group_totals', 'lock_baseline', 'group_of', 'rebalance_split']
