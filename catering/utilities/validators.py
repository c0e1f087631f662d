"""
Input validation schemas using Pydantic for the catering API.

Quantities are clamped to zero instead of rejected: a negative count from the
UI means "none", never a refund.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional

from catering.utilities.constants import UNIT_TYPES


def _clamp(v):
    return max(0, v) if v is not None else v


class SelectionInput(BaseModel):
    """One pack selection line (a dip, a chip bag, a side...)."""
    id: str = Field(..., min_length=1, max_length=100)
    count: int = 0
    name: Optional[str] = None

    @field_validator('id')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip()

    @field_validator('count')
    @classmethod
    def clamp_count(cls, v):
        return _clamp(v)


class SelectionsInput(BaseModel):
    selections: List[SelectionInput] = Field(default_factory=list)


class AddOnInput(BaseModel):
    """Catalog add-on line; priced from the catalog unit price."""
    id: str = Field(..., min_length=1, max_length=100)
    count: int = 0
    name: Optional[str] = None

    @field_validator('count')
    @classmethod
    def clamp_count(cls, v):
        return _clamp(v)


class AddOnsInput(BaseModel):
    add_ons: List[AddOnInput] = Field(default_factory=list)


class SauceAssignmentInput(BaseModel):
    """Sauce assigned to a number of units of one unit type."""
    unit_type: str
    variant_id: str = Field(..., min_length=1)
    count: int = 0
    application_method: str = Field('tossed', pattern=r'^(tossed|on_the_side)$')
    variant_info: Optional[Dict[str, Any]] = None

    @field_validator('unit_type')
    @classmethod
    def validate_unit_type(cls, v):
        if v not in UNIT_TYPES:
            raise ValueError(f"Unknown unit type: {v}")
        return v

    @field_validator('count')
    @classmethod
    def clamp_count(cls, v):
        return _clamp(v)


class DistributionInput(BaseModel):
    """Unit counts per unit type; unknown types are rejected, negatives clamp to 0."""
    distribution: Dict[str, int]

    @field_validator('distribution')
    @classmethod
    def validate_distribution(cls, v):
        unknown = [k for k in v if k not in UNIT_TYPES]
        if unknown:
            raise ValueError(f"Unknown unit types: {', '.join(unknown)}")
        return {k: _clamp(count) for k, count in v.items()}


class SplitInput(BaseModel):
    unit_type: str
    value: int

    @field_validator('unit_type')
    @classmethod
    def validate_unit_type(cls, v):
        if v not in UNIT_TYPES:
            raise ValueError(f"Unknown unit type: {v}")
        return v

    @field_validator('value')
    @classmethod
    def clamp_value(cls, v):
        return _clamp(v)


class SmartDefaultsInput(BaseModel):
    """Target percentages per unit-type group, e.g. {"traditional": 80, "plant_based": 20}."""
    percentages: Optional[Dict[str, float]] = None


class StatePatchInput(BaseModel):
    """Partial update of the scalar parts of a configuration."""
    unit_style: Optional[str] = Field(None, pattern=r'^(mixed|flats|drums)$')
    guest_count: Optional[int] = Field(None, ge=1, le=10000)
    assignments: Optional[List[SauceAssignmentInput]] = None


class SkipInput(BaseModel):
    """Explicit skip flag; omitted means toggle."""
    skip: Optional[bool] = None


class SessionCreateInput(BaseModel):
    package_id: str = Field(..., min_length=1)
    guest_count: Optional[int] = Field(None, ge=1, le=10000)
    percentages: Optional[Dict[str, float]] = None
    restore: bool = False

    @field_validator('package_id')
    @classmethod
    def strip_package_id(cls, v):
        if not v.strip():
            raise ValueError('Package id cannot be empty')
        return v.strip()


class PackageSwitchInput(BaseModel):
    package_id: str = Field(..., min_length=1)

    @field_validator('package_id')
    @classmethod
    def strip_package_id(cls, v):
        if not v.strip():
            raise ValueError('Package id cannot be empty')
        return v.strip()
