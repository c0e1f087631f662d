"""Closed set of package categories plus the single alias table used to parse external keys."""
from enum import Enum
from typing import Dict, Final

from catering.utilities.errors import UnknownCategoryError


class Category(str, Enum):
    WINGS = "wings"
    SAUCES = "sauces"
    DIPS = "dips"
    CHIPS = "chips"
    SIDES = "sides"
    DESSERTS = "desserts"
    BEVERAGES = "beverages"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @property
    def is_pack_category(self) -> bool:
        '''True for categories sold as included packs (priced per unit against an included quantity).'''
        return self in PACK_CATEGORIES

    @classmethod
    def parse(cls, key) -> "Category":
        '''Resolve any known spelling (kebab-case, camelCase, legacy names) to a Category.'''
        if isinstance(key, Category):
            return key
        normalized = str(key or '').strip()
        if normalized in CATEGORY_ALIASES:
            return CATEGORY_ALIASES[normalized]
        lowered = normalized.lower().replace('-', '_')
        if lowered in CATEGORY_ALIASES:
            return CATEGORY_ALIASES[lowered]
        raise UnknownCategoryError(f"Unknown category: {key!r}")

    def __str__(self) -> str:
        return self.value


CATEGORY_LABELS: Final[Dict[Category, str]] = {
    Category.WINGS: "Wings",
    Category.SAUCES: "Sauces",
    Category.DIPS: "Dips",
    Category.CHIPS: "Chips",
    Category.SIDES: "Sides",
    Category.DESSERTS: "Desserts",
    Category.BEVERAGES: "Beverages",
}

PACK_CATEGORIES: Final[tuple] = (
    Category.DIPS, Category.CHIPS, Category.SIDES, Category.DESSERTS, Category.BEVERAGES,
)

# Canonical mapping table: every external spelling resolves here and nowhere else.
CATEGORY_ALIASES: Final[Dict[str, Category]] = {
    **{c.value: c for c in Category},
    "wing": Category.WINGS,
    "wing_distribution": Category.WINGS,
    "wingDistribution": Category.WINGS,
    "sauce": Category.SAUCES,
    "sauce_assignments": Category.SAUCES,
    "sauceAssignments": Category.SAUCES,
    "dip": Category.DIPS,
    "noDips": Category.DIPS,
    "chip": Category.CHIPS,
    "bags_of_chips": Category.CHIPS,
    "side": Category.SIDES,
    "cold_sides": Category.SIDES,
    "coldSides": Category.SIDES,
    "salads": Category.SIDES,
    "salad": Category.SIDES,
    "dessert": Category.DESSERTS,
    "beverage": Category.BEVERAGES,
    "drinks": Category.BEVERAGES,
    "hot_beverages": Category.BEVERAGES,
    "hotBeverages": Category.BEVERAGES,
    "cold_beverages": Category.BEVERAGES,
    "coldBeverages": Category.BEVERAGES,
}

__all__ = ['Category', 'CATEGORY_LABELS', 'CATEGORY_ALIASES', 'PACK_CATEGORIES']
