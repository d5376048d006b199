"""
Data models for the order calculator.

Uses dataclasses for structured, type-safe data representation.
All monetary amounts are integers in the minor currency unit (cents).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class AdjustmentType(str, Enum):
    """Kind of a pending adjustment."""
    TAX = "TAX"
    PROMOTION = "PROMOTION"


@dataclass(frozen=True)
class Adjustment:
    """A signed monetary adjustment produced by a tax rate or a promotion."""
    type: AdjustmentType
    source: str  # "TAX_RATE:<id>" or "PROMOTION:<id>"
    amount: int
    description: str = ""


def _replace_adjustment(adjustments: list[Adjustment], adjustment: Adjustment) -> list[Adjustment]:
    """Return a new list holding `adjustment` in place of any same-kind, same-source entry."""
    key = (adjustment.type, adjustment.source)
    replaced = False
    result = []
    for existing in adjustments:
        if (existing.type, existing.source) == key:
            if not replaced:
                result.append(adjustment)
                replaced = True
            continue
        result.append(existing)
    if not replaced:
        result.append(adjustment)
    return result


def _without_type(adjustments: list[Adjustment], type: Optional[AdjustmentType]) -> list[Adjustment]:
    if type is None:
        return []
    return [a for a in adjustments if a.type != type]


@dataclass
class TraceStep:
    """A single step in the calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class Zone:
    """A tax/shipping jurisdiction, made of country codes."""
    id: str
    name: str
    members: tuple[str, ...] = ()


@dataclass(frozen=True)
class TaxCategory:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Channel:
    """Sales channel settings that influence tax calculation."""
    code: str
    default_tax_zone: Optional[Zone] = None
    prices_include_tax: bool = False
    currency_code: str = "USD"


@dataclass
class RequestContext:
    """Per-request context handed to every collaborator."""
    channel: Channel
    request_date: Optional[str] = None  # ISO date string


@dataclass
class OrderItem:
    """One unit of an order line; the smallest adjustable unit."""
    unit_price: int
    unit_price_includes_tax: bool = False
    tax_rate: float = 0.0
    pending_adjustments: list[Adjustment] = field(default_factory=list)

    def _sum(self, type: AdjustmentType) -> int:
        return sum(a.amount for a in self.pending_adjustments if a.type == type)

    @property
    def unit_price_with_promotions(self) -> int:
        return self.unit_price + self._sum(AdjustmentType.PROMOTION)

    @property
    def unit_tax(self) -> int:
        if self.unit_price_includes_tax:
            price = self.unit_price_with_promotions
            return round(price - price / ((100 + self.tax_rate) / 100))
        return self._sum(AdjustmentType.TAX)

    @property
    def unit_price_with_promotions_and_tax(self) -> int:
        if self.unit_price_includes_tax:
            return self.unit_price_with_promotions
        return self.unit_price_with_promotions + self.unit_tax

    def add_adjustment(self, adjustment: Adjustment):
        self.pending_adjustments = _replace_adjustment(self.pending_adjustments, adjustment)

    def clear_adjustments(self, type: Optional[AdjustmentType] = None):
        """Drop adjustments of the given kind, or all of them."""
        self.pending_adjustments = _without_type(self.pending_adjustments, type)


@dataclass
class OrderLine:
    """A line of an order: one product variant, one item per unit."""
    id: str
    product_variant_id: str
    unit_price: int
    tax_category: TaxCategory
    items: list[OrderItem] = field(default_factory=list)
    price_includes_tax: bool = False
    tax_rate: float = 0.0

    @classmethod
    def create(
        cls,
        id: str,
        product_variant_id: str,
        unit_price: int,
        tax_category: TaxCategory,
        quantity: int,
    ) -> 'OrderLine':
        """Build a line with `quantity` fresh items."""
        return cls(
            id=id,
            product_variant_id=product_variant_id,
            unit_price=unit_price,
            tax_category=tax_category,
            items=[OrderItem(unit_price=unit_price) for _ in range(quantity)],
        )

    @property
    def quantity(self) -> int:
        return len(self.items)

    @property
    def total_price(self) -> int:
        return sum(item.unit_price_with_promotions_and_tax for item in self.items)

    @property
    def line_tax(self) -> int:
        return sum(item.unit_tax for item in self.items)

    def set_unit_price_includes_tax(self, includes_tax: bool):
        self.price_includes_tax = includes_tax
        for item in self.items:
            item.unit_price_includes_tax = includes_tax

    def set_tax_rate(self, rate: float):
        self.tax_rate = rate
        for item in self.items:
            item.tax_rate = rate

    def clear_adjustments(self, type: Optional[AdjustmentType] = None):
        for item in self.items:
            item.clear_adjustments(type)

    def adjustments(self, type: Optional[AdjustmentType] = None) -> list[Adjustment]:
        """All item adjustments of this line, optionally filtered by kind."""
        return [
            a for item in self.items for a in item.pending_adjustments
            if type is None or a.type == type
        ]


@dataclass
class Order:
    """A customer order and its aggregate monetary state."""
    code: str
    lines: list[OrderLine] = field(default_factory=list)
    sub_total: int = 0
    sub_total_before_tax: int = 0
    shipping_cost: int = 0
    shipping_method_id: Optional[str] = None
    shipping_country: Optional[str] = None  # ISO country code of the shipping address
    pending_adjustments: list[Adjustment] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def adjustment_total(self) -> int:
        return sum(a.amount for a in self.pending_adjustments)

    @property
    def total(self) -> int:
        return self.sub_total + self.adjustment_total + self.shipping_cost

    def add_adjustment(self, adjustment: Adjustment):
        self.pending_adjustments = _replace_adjustment(self.pending_adjustments, adjustment)

    def clear_adjustments(self, type: Optional[AdjustmentType] = None):
        """Clear order-level adjustments and those of every line."""
        self.pending_adjustments = _without_type(self.pending_adjustments, type)
        for line in self.lines:
            line.clear_adjustments(type)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the order-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Summary of the order's monetary state for API responses."""
        return {
            "code": self.code,
            "sub_total": self.sub_total,
            "sub_total_before_tax": self.sub_total_before_tax,
            "shipping_cost": self.shipping_cost,
            "shipping_method_id": self.shipping_method_id,
            "total": self.total,
            "adjustments": [_adjustment_dict(a) for a in self.pending_adjustments],
            "lines": [
                {
                    "id": line.id,
                    "product_variant_id": line.product_variant_id,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                    "price_includes_tax": line.price_includes_tax,
                    "tax_rate": line.tax_rate,
                    "line_tax": line.line_tax,
                    "total_price": line.total_price,
                    "adjustments": [_adjustment_dict(a) for a in line.adjustments()],
                }
                for line in self.lines
            ],
            "trace": [t.__dict__ for t in self.trace],
        }


def _adjustment_dict(adjustment: Adjustment) -> dict:
    return {
        "type": adjustment.type.value,
        "source": adjustment.source,
        "amount": adjustment.amount,
        "description": adjustment.description,
    }
