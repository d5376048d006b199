"""
Tax Calculator - Works out whether a price includes tax and its net/gross forms.
"""
from dataclasses import dataclass
from typing import Optional

from ..engine.models import RequestContext, TaxCategory, Zone
from .tax_rate_service import TaxRateService


@dataclass(frozen=True)
class TaxCalculationResult:
    price: int
    price_includes_tax: bool
    price_with_tax: int
    price_without_tax: int


class TaxCalculator:
    """
    Resolution order:
    1. Channel prices exclude tax: the price is net, tax is added on top.
    2. Channel prices include tax and the active zone is the channel's
       default zone: the price already includes tax.
    3. Channel prices include tax, other zone: the default zone's tax is
       removed and the active zone's rate applies to the net price.
    """

    def __init__(self, tax_rate_service: TaxRateService):
        self.tax_rate_service = tax_rate_service

    def calculate(
        self,
        price: int,
        tax_category: TaxCategory,
        active_zone: Optional[Zone],
        ctx: RequestContext,
    ) -> TaxCalculationResult:
        tax_rate = self.tax_rate_service.get_applicable_tax_rate(active_zone, tax_category)

        if not ctx.channel.prices_include_tax:
            return TaxCalculationResult(
                price=price,
                price_includes_tax=False,
                price_with_tax=tax_rate.gross_price_of(price),
                price_without_tax=price,
            )

        default_zone = ctx.channel.default_tax_zone
        default_rate = self.tax_rate_service.get_applicable_tax_rate(default_zone, tax_category)
        price_without_tax = default_rate.net_price_of(price)

        if default_zone is not None and active_zone is not None and active_zone.id == default_zone.id:
            return TaxCalculationResult(
                price=price,
                price_includes_tax=True,
                price_with_tax=price,
                price_without_tax=price_without_tax,
            )

        return TaxCalculationResult(
            price=price_without_tax,
            price_includes_tax=False,
            price_with_tax=tax_rate.gross_price_of(price_without_tax),
            price_without_tax=price_without_tax,
        )
