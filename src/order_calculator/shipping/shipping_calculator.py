"""
Shipping Calculator - Quotes every shipping method eligible for an order.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from ..csv_fields import parse_bool, parse_optional_int
from ..engine.models import Order, RequestContext
from ..errors import DataFileNotFoundError

VALID_CALCULATORS = {'flat_rate', 'per_item'}


@dataclass(frozen=True)
class ShippingMethod:
    """A shipping method with its eligibility threshold and price formula."""
    id: str
    code: str
    description: str = ""
    calculator: str = "flat_rate"
    rate: int = 0
    order_minimum: int = 0
    free_over: Optional[int] = None
    enabled: bool = True

    def is_eligible(self, order: Order) -> bool:
        return self.enabled and order.sub_total >= self.order_minimum

    def price_for(self, order: Order) -> int:
        if self.free_over is not None and order.sub_total >= self.free_over:
            return 0
        if self.calculator == 'per_item':
            return self.rate * order.total_quantity
        return self.rate


@dataclass(frozen=True)
class ShippingQuote:
    method: ShippingMethod
    price: int


class ShippingCalculator:
    """
    Quotes shipping methods for an order.

    Results are ordered cheapest first; ties keep configuration order.
    The shipping methods file has columns: method_id, code, description,
    calculator, rate, order_minimum, free_over, enabled.
    """

    def __init__(self, methods: list[ShippingMethod]):
        for method in methods:
            if method.calculator not in VALID_CALCULATORS:
                raise ValueError(
                    f"Shipping method {method.id}: invalid calculator '{method.calculator}', "
                    f"must be one of: {VALID_CALCULATORS}"
                )
        self.methods = list(methods)

    @classmethod
    def from_csv(cls, path: Path) -> 'ShippingCalculator':
        if not path.exists():
            raise DataFileNotFoundError("Shipping methods file", path)
        df = pd.read_csv(path, dtype=str).fillna('')
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()
        methods = [
            ShippingMethod(
                id=row['method_id'],
                code=row['code'],
                description=row.get('description', ''),
                calculator=row.get('calculator') or 'flat_rate',
                rate=int(row.get('rate') or 0),
                order_minimum=int(row.get('order_minimum') or 0),
                free_over=parse_optional_int(row.get('free_over', '')),
                enabled=parse_bool(row.get('enabled') or 'true'),
            )
            for _, row in df.iterrows()
        ]
        return cls(methods)

    async def get_eligible_shipping_methods(self, ctx: RequestContext, order: Order) -> list[ShippingQuote]:
        quotes = [
            ShippingQuote(method=method, price=method.price_for(order))
            for method in self.methods
            if method.is_eligible(order)
        ]
        quotes.sort(key=lambda q: q.price)
        return quotes
