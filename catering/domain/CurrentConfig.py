"""CurrentConfig entity: the customer's selections for one package session.

The store keeps the plain-dict form (see to_dict); pricing, detection and the
breakdown read it through this class so that category keys are parsed once.
"""
import json
from typing import Dict, List, Optional

from catering.domain.Category import Category
from catering.domain.Package import Package


class CurrentConfig:
    def __init__(self, distribution: Optional[Dict[str, int]] = None, unit_style: str = "mixed",
                 assignments: Optional[List[dict]] = None,
                 pack_selections: Optional[Dict[Category, List[dict]]] = None,
                 skip: Optional[Dict[Category, bool]] = None,
                 add_ons: Optional[Dict[Category, List[dict]]] = None,
                 guest_count: Optional[int] = None, locked_baseline: Optional[dict] = None):
        # Avoid mutable default arguments
        self.distribution = dict(distribution or {})
        self.unit_style = unit_style or "mixed"
        self.assignments = [dict(a) for a in (assignments or [])]
        self.pack_selections = {k: [dict(s) for s in v] for k, v in (pack_selections or {}).items()}
        self.skip = dict(skip or {})
        self.add_ons = {k: [dict(a) for a in v] for k, v in (add_ons or {}).items()}
        self.guest_count = guest_count
        self.locked_baseline = dict(locked_baseline or {})

    def is_skipped(self, category: Category) -> bool:
        return bool(self.skip.get(Category.parse(category), False))

    def selections_for(self, category: Category, package: Package) -> List[dict]:
        '''Current selections for a pack category; falls back to the package defaults when never set.'''
        category = Category.parse(category)
        if self.is_skipped(category):
            return []
        if category in self.pack_selections:
            return self.pack_selections[category]
        pack = package.included_pack(category)
        return [dict(s) for s in pack.default_selections] if pack else []

    def add_ons_for(self, category: Category) -> List[dict]:
        return self.add_ons.get(Category.parse(category), [])

    @property
    def locked_distribution(self) -> Dict[str, int]:
        return dict(self.locked_baseline.get("distribution") or {})

    @staticmethod
    def from_package(package: Package) -> "CurrentConfig":
        '''Fresh config equal to the package defaults.'''
        return CurrentConfig(
            distribution=package.default_distribution,
            unit_style=package.default_unit_style,
            assignments=package.default_assignments,
            pack_selections={c: p.default_selections for c, p in package.included_packs.items()},
        )

    @staticmethod
    def from_dict(data) -> "CurrentConfig":
        '''Creates a CurrentConfig from its dict form. Ignores unknown keys; unknown categories raise.'''
        d = dict(data) if isinstance(data, dict) else {}
        guest_count = d.get("guest_count")
        return CurrentConfig(
            distribution={k: int(v or 0) for k, v in (d.get("distribution") or {}).items()},
            unit_style=d.get("unit_style") or "mixed",
            assignments=d.get("assignments") or [],
            pack_selections={Category.parse(k): v or [] for k, v in (d.get("pack_selections") or {}).items()},
            skip={Category.parse(k): bool(v) for k, v in (d.get("skip") or {}).items()},
            add_ons={Category.parse(k): v or [] for k, v in (d.get("add_ons") or {}).items()},
            guest_count=int(guest_count) if guest_count is not None else None,
            locked_baseline=d.get("locked_baseline") or {},
        )

    def to_dict(self):
        '''Converts the config to a JSON-serializable dict (the persisted layout).'''
        return {
            "distribution": dict(self.distribution),
            "unit_style": self.unit_style,
            "assignments": [dict(a) for a in self.assignments],
            "pack_selections": {c.value: [dict(s) for s in v] for c, v in self.pack_selections.items()},
            "skip": {c.value: v for c, v in self.skip.items()},
            "add_ons": {c.value: [dict(a) for a in v] for c, v in self.add_ons.items()},
            "guest_count": self.guest_count,
            "locked_baseline": dict(self.locked_baseline),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @staticmethod
    def from_json(text: str) -> "CurrentConfig":
        return CurrentConfig.from_dict(json.loads(text))
