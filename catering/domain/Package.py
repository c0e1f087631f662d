"""Package domain entity: the immutable base offer a session is customized from."""
import copy
from typing import Dict, List, Optional

from catering.domain.Category import Category
from catering.utilities.config import DEFAULT_GUEST_COUNT
from catering.utilities.constants import DEFAULT_MARGIN_TIER, MARGIN_TIER_CREDIT_SHARES


class IncludedPack:
    '''Included quantity for a pack-bundled category (dips, chips, sides, desserts, beverages).

    unit_price is the kitchen base price of one unit. Extra units are charged at
    add_on_price (the platform price, defaults to unit_price); removed units are
    credited at a share of unit_price that depends on the item's margin tier.
    '''

    def __init__(self, quantity: int = 0, units_per_pack: int = 1, unit_price: float = 0.0,
                 default_selections: Optional[List[dict]] = None, add_on_price: Optional[float] = None,
                 margin_tier: str = DEFAULT_MARGIN_TIER):
        if margin_tier not in MARGIN_TIER_CREDIT_SHARES:
            raise ValueError(f"Unknown margin tier: {margin_tier!r}")
        self.quantity = quantity
        self.units_per_pack = units_per_pack or 1
        self.unit_price = unit_price
        self.add_on_price = unit_price if add_on_price is None else add_on_price
        self.margin_tier = margin_tier
        self.default_selections = [dict(s) for s in default_selections] if default_selections else []

    @property
    def included_units(self) -> int:
        return self.quantity * self.units_per_pack

    @property
    def included_value(self) -> float:
        return self.included_units * self.unit_price

    @property
    def removal_credit_rate(self) -> float:
        return self.unit_price * MARGIN_TIER_CREDIT_SHARES[self.margin_tier]

    @property
    def removal_credit_value(self) -> float:
        '''Most a customer can be credited for this category (every included unit removed).'''
        return self.included_units * self.removal_credit_rate

    @staticmethod
    def from_dict(data) -> "IncludedPack":
        d = dict(data) if isinstance(data, dict) else {}
        add_on_price = d.get("add_on_price")
        return IncludedPack(
            quantity=int(d.get("quantity", 0) or 0),
            units_per_pack=int(d.get("units_per_pack", 1) or 1),
            unit_price=float(d.get("unit_price", 0) or 0),
            default_selections=d.get("default_selections") or [],
            add_on_price=float(add_on_price) if add_on_price is not None else None,
            margin_tier=str(d.get("margin_tier") or DEFAULT_MARGIN_TIER).lower(),
        )

    def to_dict(self):
        return {
            "quantity": self.quantity,
            "units_per_pack": self.units_per_pack,
            "unit_price": self.unit_price,
            "add_on_price": self.add_on_price,
            "margin_tier": self.margin_tier,
            "default_selections": [dict(s) for s in self.default_selections],
        }


class Package:
    def __init__(self, id: str, name: str = "", tier: int = 1, base_price: float = 0.0,
                 total_units: int = 0, default_distribution: Optional[Dict[str, int]] = None,
                 per_unit_cost: Optional[Dict[str, float]] = None,
                 included_packs: Optional[Dict[Category, IncludedPack]] = None,
                 default_assignments: Optional[List[dict]] = None, sauce_slots: int = 3,
                 allowed_add_on_categories: Optional[List[Category]] = None,
                 min_servings: int = DEFAULT_GUEST_COUNT, default_unit_style: str = "mixed"):
        self.id = id
        self.name = name
        self.tier = tier
        self.base_price = base_price
        self.total_units = total_units
        self.default_distribution = dict(default_distribution or {})
        self.per_unit_cost = dict(per_unit_cost or {})
        self.included_packs = dict(included_packs or {})
        self.default_assignments = [dict(a) for a in (default_assignments or [])]
        self.sauce_slots = sauce_slots
        self.allowed_add_on_categories = list(allowed_add_on_categories or [])
        self.min_servings = min_servings
        self.default_unit_style = default_unit_style

    def __repr__(self) -> str:
        return f"Package({self.id!r}, tier={self.tier}, base_price={self.base_price}, total_units={self.total_units})"

    def included_pack(self, category: Category) -> Optional[IncludedPack]:
        return self.included_packs.get(Category.parse(category))

    def with_baseline(self, distribution: Optional[Dict[str, int]]) -> "Package":
        '''Returns a copy whose default distribution is the given (locked) baseline.

        Used to compare a session against its smart-default baseline instead of the
        catalogue defaults. An empty or missing baseline returns self unchanged.
        '''
        if not distribution:
            return self
        clone = copy.deepcopy(self)
        clone.default_distribution = dict(distribution)
        return clone

    @staticmethod
    def from_dict(data) -> "Package":
        '''Creates a Package from a dictionary (package JSON). Unknown keys are ignored.'''
        d = dict(data) if isinstance(data, dict) else {}
        packs = {}
        for key, pack in (d.get("included_packs") or {}).items():
            packs[Category.parse(key)] = IncludedPack.from_dict(pack)
        return Package(
            id=str(d.get("id", "")),
            name=d.get("name", ""),
            tier=int(d.get("tier", 1) or 1),
            base_price=float(d.get("base_price", 0) or 0),
            total_units=int(d.get("total_units", 0) or 0),
            default_distribution={k: int(v) for k, v in (d.get("default_distribution") or {}).items()},
            per_unit_cost={k: float(v) for k, v in (d.get("per_unit_cost") or {}).items()},
            included_packs=packs,
            default_assignments=d.get("default_assignments") or [],
            sauce_slots=int(d.get("sauce_slots", 3)),
            allowed_add_on_categories=[Category.parse(c) for c in d.get("allowed_add_on_categories") or []],
            min_servings=int(d.get("min_servings", DEFAULT_GUEST_COUNT) or DEFAULT_GUEST_COUNT),
            default_unit_style=d.get("default_unit_style", "mixed") or "mixed",
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier,
            "base_price": self.base_price,
            "total_units": self.total_units,
            "default_distribution": dict(self.default_distribution),
            "per_unit_cost": dict(self.per_unit_cost),
            "included_packs": {c.value: p.to_dict() for c, p in self.included_packs.items()},
            "default_assignments": [dict(a) for a in self.default_assignments],
            "sauce_slots": self.sauce_slots,
            "allowed_add_on_categories": [c.value for c in self.allowed_add_on_categories],
            "min_servings": self.min_servings,
            "default_unit_style": self.default_unit_style,
        }
