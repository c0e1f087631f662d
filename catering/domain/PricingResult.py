"""Value types produced by the pricing aggregator.

Uses dataclasses so results compare by value (two recalculations over the same
inputs are equal) and serialize with a single to_dict call at the boundary.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from catering.utilities.money import round_currency


@dataclass
class LineItem:
    """One priced unit group (wing type, sauce, pack selection, add-on line, package base)."""
    type: str
    quantity: int
    unit_price: float
    name: str = ""
    included: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def extended_price(self) -> float:
        return self.unit_price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": round_currency(self.unit_price),
            "extended_price": round_currency(self.extended_price),
            "included": self.included,
            "metadata": dict(self.metadata),
        }


@dataclass
class Modifier:
    """A price adjustment attached to one item. amount is a magnitude; kind carries the sign."""
    id: str
    target_id: str
    kind: str
    amount: float
    label: str
    source: str
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "target_id": self.target_id,
            "kind": self.kind,
            "amount": round_currency(self.amount),
            "label": self.label,
            "source": self.source,
        }
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass
class PricingTotals:
    items_subtotal: float = 0.0
    upcharges: float = 0.0
    discounts: float = 0.0
    subtotal: float = 0.0
    tax: float = 0.0
    tax_rate: float = 0.0
    total: float = 0.0
    per_person_cost: float = 0.0
    guest_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items_subtotal": round_currency(self.items_subtotal),
            "upcharges": round_currency(self.upcharges),
            "discounts": round_currency(self.discounts),
            "subtotal": round_currency(self.subtotal),
            "tax": round_currency(self.tax),
            "tax_rate": self.tax_rate,
            "total": round_currency(self.total),
            "per_person_cost": round_currency(self.per_person_cost),
            "guest_count": self.guest_count,
        }


@dataclass
class PricingResult:
    items: Dict[str, LineItem] = field(default_factory=dict)
    modifiers: List[Modifier] = field(default_factory=list)
    totals: PricingTotals = field(default_factory=PricingTotals)
    completion_status: Dict[str, bool] = field(default_factory=dict)
    calculated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat(), compare=False)

    def add_item(self, item_id: str, item: LineItem) -> None:
        self.items[item_id] = item

    def add_modifier(self, target_id: str, kind: str, amount: float, label: str, source: str,
                     metadata: Optional[Dict[str, Any]] = None) -> Modifier:
        """Append a modifier with a sequential id (stable for identical inputs)."""
        modifier = Modifier(
            id=f"mod-{len(self.modifiers) + 1}",
            target_id=target_id,
            kind=kind,
            amount=abs(amount),
            label=label,
            source=source,
            metadata=metadata,
        )
        self.modifiers.append(modifier)
        return modifier

    def modifiers_of(self, kind: str) -> List[Modifier]:
        return [m for m in self.modifiers if m.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": {item_id: item.to_dict() for item_id, item in self.items.items()},
            "modifiers": [m.to_dict() for m in self.modifiers],
            "totals": self.totals.to_dict(),
            "meta": {
                "completion_status": dict(self.completion_status),
                "calculated_at": self.calculated_at,
            },
        }


__all__ = ['LineItem', 'Modifier', 'PricingTotals', 'PricingResult']
