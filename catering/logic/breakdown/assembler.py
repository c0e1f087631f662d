"""Kitchen-ready breakdown assembler.

build_breakdown(package, config, modifications, catalog) turns a configuration into
physical counts per category:

  wings     base block = locked baseline (or package default) per unit type,
            group shares against the locked group totals, nested sauces with
            on-the-side container counts
  dips, chips, sides, desserts, beverages
            base block = package default selections and included packs,
            pack bundling (packs_needed / total_provided / extras)

A "changes" block is emitted only for categories whose ModificationRecord is
modified; untouched categories carry just their base block.
"""
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional

from catering.domain.Category import Category, PACK_CATEGORIES
from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.logic.defaults.smart_defaults import group_totals
from catering.logic.modifications.detector import ModificationRecord
from catering.logic.packaging.containers import classify_sauce, compute_containers, compute_pack_bundle
from catering.logic.pricing.aggregator import normalize_catalog
from catering.logic.pricing.sauces import resolve_variant_info
from catering.utilities.constants import UNIT_TYPE_GROUPS, UNIT_TYPE_LABELS, UNIT_STYLE_LABELS
from catering.utilities.money import round_currency


def _counts(distribution: Mapping[str, Any]) -> Dict[str, int]:
    return {t: max(0, int(c or 0)) for t, c in distribution.items()}


def _sauce_lines(assignments: List[dict], sauces_catalog: Optional[List[dict]]) -> List[Dict[str, Any]]:
    lines = []
    for a in assignments:
        count = max(0, int(a.get("count", 0) or 0))
        method = a.get("application_method") or "tossed"
        line = {
            "unit_type": a.get("unit_type"),
            "variant_id": a.get("variant_id"),
            "count": count,
            "application_method": method,
        }
        if method == "on_the_side":
            packaging_key = classify_sauce(resolve_variant_info(a, sauces_catalog))
            line["containers"] = compute_containers(count, packaging_key).to_dict()
        lines.append(line)
    return lines


def _group_shares(distribution: Dict[str, int], locked_totals: Mapping[str, int]) -> Dict[str, Dict[str, Any]]:
    """Share of each unit type within its group, measured against the locked group total."""
    current_totals = group_totals(distribution)
    shares = {}
    for group, types in UNIT_TYPE_GROUPS.items():
        locked_total = int(locked_totals.get(group, current_totals[group]) or 0)
        shares[group] = {
            "locked_total": locked_total,
            "allocated": current_totals[group],
            "unallocated": locked_total - current_totals[group],
            "shares": {
                t: (round(distribution.get(t, 0) / locked_total, 4) if locked_total else 0.0) for t in types
            },
        }
    return shares


def _wings_block(package: Package, config: CurrentConfig, record: Optional[ModificationRecord],
                 sauces_catalog: Optional[List[dict]]) -> Dict[str, Any]:
    locked = config.locked_baseline or {}
    base_distribution = _counts(locked.get("distribution") or package.default_distribution)
    locked_totals = locked.get("group_totals") or group_totals(base_distribution)
    block: Dict[str, Any] = {
        "category": Category.WINGS.value,
        "label": Category.WINGS.label,
        "base": {
            "units": base_distribution,
            "labels": {t: UNIT_TYPE_LABELS.get(t, t) for t in base_distribution},
            "total": sum(base_distribution.values()),
            "style": UNIT_STYLE_LABELS.get(package.default_unit_style, package.default_unit_style),
            "groups": _group_shares(base_distribution, locked_totals),
            "sauces": _sauce_lines(package.default_assignments, sauces_catalog),
            "source": "locked_baseline" if locked.get("distribution") else "package_default",
        },
    }
    if record is not None and record.is_modified:
        current = _counts(config.distribution)
        block["changes"] = {
            "units": current,
            "total": sum(current.values()),
            "style": UNIT_STYLE_LABELS.get(config.unit_style, config.unit_style),
            "groups": _group_shares(current, locked_totals),
            "changes": [dict(c) for c in record.changes],
            "details": record.details,
        }
    return block


def _attach_sauces(block: Dict[str, Any], config: CurrentConfig, record: Optional[ModificationRecord],
                   sauces_catalog: Optional[List[dict]]) -> None:
    if record is None or not record.is_modified:
        return
    changes = block.setdefault("changes", {"details": record.details})
    changes["sauces"] = _sauce_lines(config.assignments, sauces_catalog)
    changes["sauce_changes"] = [dict(c) for c in record.changes]


def _pack_block(package: Package, config: CurrentConfig, category: Category,
                record: Optional[ModificationRecord]) -> Optional[Dict[str, Any]]:
    pack = package.included_pack(category)
    current = config.selections_for(category, package)
    add_ons = config.add_ons_for(category)
    if pack is None and not current and not add_ons and not config.is_skipped(category):
        return None
    units_per_pack = pack.units_per_pack if pack else 1
    defaults = pack.default_selections if pack else []
    default_total = sum(max(0, int(s.get("count", 0) or 0)) for s in defaults)
    block: Dict[str, Any] = {
        "category": category.value,
        "label": category.label,
        "base": {
            "selections": [dict(s) for s in defaults],
            "included_packs": pack.quantity if pack else 0,
            "units_per_pack": units_per_pack,
            "bundle": compute_pack_bundle(default_total, units_per_pack).to_dict(),
        },
    }
    if record is None or not record.is_modified:
        return block
    if record.skipped:
        block["changes"] = {
            "skipped": True,
            "selections": [],
            "credit": round_currency(record.credit),
            "details": record.details,
        }
        return block
    total = sum(max(0, int(s.get("count", 0) or 0)) for s in current)
    block["changes"] = {
        "skipped": False,
        "selections": [dict(s) for s in current],
        "bundle": compute_pack_bundle(total, units_per_pack).to_dict(),
        "add_ons": [dict(a) for a in add_ons],
        "changes": [dict(c) for c in record.changes],
        "details": record.details,
    }
    return block


def build_breakdown(package: Package, config: CurrentConfig,
                    modifications: Mapping[Category, ModificationRecord],
                    catalog: Optional[Mapping[Any, List[dict]]] = None) -> Dict[str, Dict[str, Any]]:
    """Assemble the kitchen breakdown keyed by category value (wings first, then pack categories).

    catalog supplies the sauce variant_info that sizes on-the-side containers, the
    same lookup pricing uses; inline variant_info on an assignment wins.
    """
    breakdown: Dict[str, Dict[str, Any]] = {}
    sauces_catalog = normalize_catalog(catalog).get(Category.SAUCES)
    wings = _wings_block(package, config, modifications.get(Category.WINGS), sauces_catalog)
    _attach_sauces(wings, config, modifications.get(Category.SAUCES), sauces_catalog)
    breakdown[Category.WINGS.value] = wings
    for category in PACK_CATEGORIES:
        block = _pack_block(package, config, category, modifications.get(category))
        if block is not None:
            breakdown[category.value] = block
    return breakdown


__all__ = ['build_breakdown']
