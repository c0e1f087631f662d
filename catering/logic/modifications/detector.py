"""Modification detector: structured diff of a config against package defaults.

detect_modifications(package_defaults, current_config) is pure. It returns one
ModificationRecord per Category (every member, in enum order), so two calls over
equal inputs produce equal outputs.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from catering.domain.Category import Category, PACK_CATEGORIES
from catering.domain.CurrentConfig import CurrentConfig
from catering.domain.Package import Package
from catering.utilities.constants import UNIT_TYPES, UNIT_TYPE_LABELS
from catering.utilities.money import format_price, round_currency


@dataclass
class ModificationRecord:
    is_modified: bool = False
    changes: List[Dict[str, Any]] = field(default_factory=list)
    details: str = ""
    skipped: bool = False
    credit: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_modified": self.is_modified,
            "changes": [dict(c) for c in self.changes],
            "details": self.details,
            "skipped": self.skipped,
            "credit": round_currency(self.credit),
        }


def _change(type_: str, from_, to, *, is_new: bool = False) -> Dict[str, Any]:
    delta = to - from_ if isinstance(from_, (int, float)) and isinstance(to, (int, float)) else 0
    return {"type": type_, "from": from_, "to": to, "delta": delta, "is_new": is_new}


def _count(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _ordered_keys(defaults: Dict[str, Any], current: Dict[str, Any], preferred=()) -> List[str]:
    keys: List[str] = [k for k in preferred if k in defaults or k in current]
    for k in list(defaults) + list(current):
        if k not in keys:
            keys.append(k)
    return keys


def _summarize(changes: List[Dict[str, Any]], labels: Optional[Dict[str, str]] = None) -> str:
    parts = []
    for c in changes:
        name = (labels or {}).get(c["type"], c["type"])
        if isinstance(c["delta"], (int, float)) and c["delta"]:
            sign = "+" if c["delta"] > 0 else ""
            parts.append(f"{name} {sign}{c['delta']}" + (" (new)" if c["is_new"] else ""))
        else:
            parts.append(f"{name}: {c['from']} -> {c['to']}")
    return ", ".join(parts)


def _detect_wings(package: Package, config: CurrentConfig) -> ModificationRecord:
    record = ModificationRecord()
    defaults = package.default_distribution
    current = config.distribution
    for unit_type in _ordered_keys(defaults, current, UNIT_TYPES):
        before, after = _count(defaults.get(unit_type)), _count(current.get(unit_type))
        if before != after:
            record.changes.append(_change(unit_type, before, after, is_new=before == 0 and after > 0))
    if (config.unit_style or "mixed") != (package.default_unit_style or "mixed"):
        record.changes.append(_change("style", package.default_unit_style, config.unit_style))
    record.is_modified = bool(record.changes)
    record.details = _summarize(record.changes, UNIT_TYPE_LABELS) if record.changes else "Package default"
    return record


def _assignment_key(assignment: Dict[str, Any]) -> Tuple[str, str]:
    return str(assignment.get("unit_type", "")), str(assignment.get("variant_id", ""))


def _detect_sauces(package: Package, config: CurrentConfig) -> ModificationRecord:
    record = ModificationRecord()
    defaults = {_assignment_key(a): a for a in package.default_assignments}
    current = {_assignment_key(a): a for a in config.assignments}
    for key in list(defaults) + [k for k in current if k not in defaults]:
        label = f"{key[0]}:{key[1]}"
        before, after = defaults.get(key), current.get(key)
        before_count = _count(before.get("count")) if before else 0
        after_count = _count(after.get("count")) if after else 0
        if before_count != after_count:
            record.changes.append(_change(label, before_count, after_count, is_new=before is None))
        elif before and after and before.get("application_method") != after.get("application_method"):
            record.changes.append(_change(f"{label}:method", before.get("application_method"),
                                          after.get("application_method")))
    record.is_modified = bool(record.changes)
    if record.is_modified:
        record.details = "Sauces distributed to wing types" if not defaults else _summarize(record.changes)
    else:
        record.details = "Package default"
    return record


def skip_credit(package: Package, category: Category) -> float:
    """Credit for skipping a pack category entirely: every included unit at its removal-credit rate."""
    pack = package.included_pack(category)
    if not pack:
        return 0.0
    return pack.removal_credit_value


def _detect_pack_category(package: Package, config: CurrentConfig, category: Category) -> ModificationRecord:
    record = ModificationRecord()
    if config.is_skipped(category):
        # Skip short-circuits: no per-unit change list, just the credit.
        record.is_modified = True
        record.skipped = True
        record.credit = skip_credit(package, category)
        record.details = f"{category.label} skipped by customer request (credit {format_price(record.credit)})"
        return record

    pack = package.included_pack(category)
    defaults = {str(s.get("id")): s for s in (pack.default_selections if pack else [])}
    current = {str(s.get("id")): s for s in config.selections_for(category, package)}
    for key in _ordered_keys(defaults, current):
        before = _count(defaults[key].get("count")) if key in defaults else 0
        after = _count(current[key].get("count")) if key in current else 0
        if before != after:
            record.changes.append(_change(key, before, after, is_new=key not in defaults and after > 0))
    return record


def _detect_add_ons(config: CurrentConfig, category: Category, record: ModificationRecord) -> None:
    for line in config.add_ons_for(category):
        count = _count(line.get("count"))
        if count > 0:
            record.changes.append(_change(f"add_on:{line.get('id')}", 0, count, is_new=True))


def detect_modifications(package_defaults: Package, current_config: CurrentConfig) -> Dict[Category, ModificationRecord]:
    """Compare current_config to package_defaults per category.

    Args:
        package_defaults: Package whose defaults form the baseline (may carry a locked baseline,
            see Package.with_baseline).
        current_config: The customer's configuration.

    Returns:
        Dict Category -> ModificationRecord for every Category.
    """
    records: Dict[Category, ModificationRecord] = {}
    for category in Category:
        if category is Category.WINGS:
            record = _detect_wings(package_defaults, current_config)
        elif category is Category.SAUCES:
            record = _detect_sauces(package_defaults, current_config)
        elif category in PACK_CATEGORIES:
            record = _detect_pack_category(package_defaults, current_config, category)
        else:  # pragma: no cover - every Category is handled above
            raise AssertionError(f"Unhandled category {category}")
        if not record.skipped:
            _detect_add_ons(current_config, category, record)
            record.is_modified = bool(record.changes)
            if category in PACK_CATEGORIES:
                record.details = _summarize(record.changes) if record.changes else "Package default"
        records[category] = record
    return records


def modifications_to_dict(records: Dict[Category, ModificationRecord]) -> Dict[str, Dict[str, Any]]:
    return {category.value: record.to_dict() for category, record in records.items()}


__all__ = ['ModificationRecord', 'detect_modifications', 'modifications_to_dict', 'skip_credit']
