"""
Tax Rate Service - Resolves the tax rate for a (zone, tax category) pair.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from ..csv_fields import parse_bool
from ..engine.models import Adjustment, AdjustmentType, TaxCategory, Zone
from ..errors import DataFileNotFoundError


@dataclass(frozen=True)
class TaxRate:
    """A percentage tax rate for one category in one zone."""
    id: str
    name: str
    value: float  # percent, e.g. 20.0
    category_id: Optional[str] = None
    zone_id: Optional[str] = None
    enabled: bool = True

    def tax_payable_on(self, amount: int) -> int:
        return round(amount * self.value / 100)

    def net_price_of(self, gross_price: int) -> int:
        return round(gross_price / ((100 + self.value) / 100))

    def gross_price_of(self, net_price: int) -> int:
        return net_price + self.tax_payable_on(net_price)

    def apply(self, amount: int) -> Adjustment:
        """TAX adjustment for an item whose taxable price is `amount`."""
        return Adjustment(
            type=AdjustmentType.TAX,
            source=f"TAX_RATE:{self.id}",
            amount=self.tax_payable_on(amount),
            description=self.name,
        )


# Returned when no rate matches; the tax pass applies nothing for it.
NO_TAX_RATE = TaxRate(id="NO_TAX", name="No applicable tax rate", value=0.0)


class TaxRateService:
    """
    Resolves tax rates from an in-memory list.

    The tax rates file has columns: rate_id, name, category_id, zone_id,
    value, enabled.
    """

    def __init__(self, rates: list[TaxRate]):
        self.rates = [r for r in rates if r.enabled]

    @classmethod
    def from_csv(cls, path: Path) -> 'TaxRateService':
        if not path.exists():
            raise DataFileNotFoundError("Tax rates file", path)
        df = pd.read_csv(path, dtype=str).fillna('')
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()
        rates = [
            TaxRate(
                id=row['rate_id'],
                name=row['name'] or row['rate_id'],
                value=float(row['value']),
                category_id=row['category_id'] or None,
                zone_id=row['zone_id'] or None,
                enabled=parse_bool(row.get('enabled', 'true') or 'true'),
            )
            for _, row in df.iterrows()
        ]
        return cls(rates)

    def get_applicable_tax_rate(self, zone: Optional[Zone], tax_category: TaxCategory) -> TaxRate:
        """First enabled rate for the zone and category, or NO_TAX_RATE."""
        if zone is None:
            return NO_TAX_RATE
        for rate in self.rates:
            if rate.zone_id == zone.id and rate.category_id == tax_category.id:
                return rate
        return NO_TAX_RATE
