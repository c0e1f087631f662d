from typing import Final

# Unit types and the primary groups they roll up into (order matters: first group
# absorbs rounding remainders, first subtype takes the secondary ratio)
UNIT_TYPE_GROUPS: Final[dict[str, tuple[str, ...]]] = {
    "traditional": ("boneless", "bone_in"),
    "plant_based": ("cauliflower",),
}
UNIT_TYPES: Final[tuple[str, ...]] = tuple(t for group in UNIT_TYPE_GROUPS.values() for t in group)
DEFAULT_PERCENTAGES: Final[dict[str, int]] = {"traditional": 100, "plant_based": 0}

UNIT_TYPE_LABELS: Final[dict[str, str]] = {
    "boneless": "Boneless",
    "bone_in": "Bone-In",
    "cauliflower": "Cauliflower (Plant-Based)",
}

# Bone-in cut style
UNIT_STYLES: Final[tuple[str, ...]] = ("mixed", "flats", "drums")
UNIT_STYLE_LABELS: Final[dict[str, str]] = {
    "mixed": "Mixed - Drums & Flats",
    "flats": "All Flats",
    "drums": "All Drums",
}
UNIT_STYLE_UPCHARGES: Final[dict[str, float]] = {"mixed": 0.0, "flats": 0.25, "drums": 0.25}

# Wing validation
MIN_UNITS_PER_TYPE: Final[int] = 10
MIN_TOTAL_UNITS: Final[int] = 20

# Sauces
EXTRA_SAUCE_PRICE: Final[float] = 2.00
APPLICATION_METHODS: Final[tuple[str, ...]] = ("tossed", "on_the_side")

# Minimum order value by package tier
MINIMUM_ORDER_VALUES: Final[dict[int, float]] = {1: 125.0, 2: 180.0, 3: 280.0}

# Modifier kinds
UPCHARGE: Final[str] = "upcharge"
DISCOUNT: Final[str] = "discount"
INCLUDED: Final[str] = "included"
REMOVAL_CREDIT: Final[str] = "removal-credit"
WARNING: Final[str] = "warning"
MODIFIER_KINDS: Final[tuple[str, ...]] = (UPCHARGE, DISCOUNT, INCLUDED, REMOVAL_CREDIT, WARNING)

# Share of a pack item's base price refunded when it is removed, by margin tier.
# Add-ons are charged at the platform price instead, so keeping items is always cheaper.
MARGIN_TIER_CREDIT_SHARES: Final[dict[str, float]] = {"high": 0.50, "medium": 0.75, "low": 1.00}
DEFAULT_MARGIN_TIER: Final[str] = "low"
