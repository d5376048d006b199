"""
Order Calculator - Applies taxes, promotions and shipping to an order.

Every pass clears its own adjustment kind before applying it again, and the
order totals are recomputed after every step that changes adjustments, so
the order is consistent at each intermediate point and re-running the
calculation on a settled order gives the same result.
"""
import logging
from typing import Optional, Sequence

from ..shipping.shipping_calculator import ShippingCalculator
from ..tax.tax_calculator import TaxCalculator
from ..tax.tax_rate_service import NO_TAX_RATE, TaxRateService
from ..tax.zone_service import DefaultTaxZoneStrategy, TaxZoneStrategy, ZoneService
from .async_utils import filter_async
from .models import AdjustmentType, Order, RequestContext, Zone
from .promotion_utils import PromotionUtils

logger = logging.getLogger(__name__)


class OrderCalculator:
    """
    Computes the monetary state of an order.

    Pipeline order:
    1. Resolve the active tax zone
    2. Clear all existing adjustments
    3. Apply taxes to the non-discounted prices
    4. Test and apply promotions, line by line, then at order level
    5. Re-apply taxes, since promotions change the taxable prices
    6. Select and price the shipping method
    """

    def __init__(
        self,
        zone_service: ZoneService,
        tax_rate_service: TaxRateService,
        tax_calculator: TaxCalculator,
        shipping_calculator: ShippingCalculator,
        promotion_utils: PromotionUtils,
        tax_zone_strategy: Optional[TaxZoneStrategy] = None,
    ):
        self.zone_service = zone_service
        self.tax_rate_service = tax_rate_service
        self.tax_calculator = tax_calculator
        self.shipping_calculator = shipping_calculator
        self.promotion_utils = promotion_utils
        self.tax_zone_strategy = tax_zone_strategy or DefaultTaxZoneStrategy()

    async def apply_price_adjustments(self, ctx: RequestContext, order: Order, promotions: Sequence) -> Order:
        """
        Apply taxes, promotions and shipping to the order.

        Mutates the order in place and returns the same object.
        """
        zones = self.zone_service.find_all(ctx)
        active_tax_zone = self.tax_zone_strategy.determine_tax_zone(zones, ctx.channel, order)

        order.trace = []
        order.add_trace("Tax Zone", "Resolved active tax zone", active_tax_zone.id if active_tax_zone else None)
        logger.debug("Order %s: active tax zone %s", order.code, active_tax_zone)

        order.clear_adjustments()
        if order.lines:
            # First apply taxes to the non-discounted prices
            self._apply_taxes(ctx, order, active_tax_zone)
            await self._apply_promotions(order, promotions)
            # Promotions may have altered the unit prices, which in turn alters the tax payable
            self._apply_taxes(ctx, order, active_tax_zone)
            await self._apply_shipping(ctx, order)
        else:
            self.calculate_order_totals(order)
            order.add_trace("Empty Order", "No lines, only totals recomputed")

        logger.info(
            "Order %s priced: sub_total=%d sub_total_before_tax=%d shipping=%d",
            order.code, order.sub_total, order.sub_total_before_tax, order.shipping_cost,
        )
        return order

    def _apply_taxes(self, ctx: RequestContext, order: Order, active_zone: Optional[Zone]):
        """Applies the applicable tax rate to each item of every line."""
        for line in order.lines:
            line.clear_adjustments(AdjustmentType.TAX)

            tax_rate = self.tax_rate_service.get_applicable_tax_rate(active_zone, line.tax_category)
            result = self.tax_calculator.calculate(line.unit_price, line.tax_category, active_zone, ctx)

            line.set_unit_price_includes_tax(result.price_includes_tax)
            line.set_tax_rate(tax_rate.value)
            for item in line.items:
                item.unit_price = result.price

            if tax_rate == NO_TAX_RATE:
                order.add_trace("Tax", f"No tax rate for line {line.id} ({line.tax_category.id})")
            elif not result.price_includes_tax:
                for item in line.items:
                    item.add_adjustment(tax_rate.apply(item.unit_price_with_promotions))
                order.add_trace("Tax", f"{tax_rate.name} on line {line.id}", f"{line.line_tax}")
            else:
                order.add_trace("Tax", f"Line {line.id} price includes {tax_rate.name}", f"{line.line_tax}")

            self.calculate_order_totals(order)

    async def _apply_promotions(self, order: Order, promotions: Sequence):
        """Applies any eligible promotions to each item, then to the order."""
        utils = self.promotion_utils

        for line in order.lines:
            # Re-filtered for each line, since previous lines may have
            # triggered promotions which affected the order price
            applicable = await filter_async(promotions, lambda p: p.test(order, utils))

            line.clear_adjustments(AdjustmentType.PROMOTION)

            for promotion in applicable:
                # An earlier promotion in this batch may have made this one ineligible
                if await promotion.test(order, utils):
                    line_matches = await promotion.match_line(line, utils)
                    for item in line.items:
                        adjustment = promotion.apply(item, line, line_matches)
                        if adjustment:
                            item.add_adjustment(adjustment)
                            order.add_trace("Promotion", f"{adjustment.description} on line {line.id}", f"{adjustment.amount}")
                self.calculate_order_totals(order)

        applicable_order_promotions = await filter_async(promotions, lambda p: p.test(order, utils))
        for promotion in applicable_order_promotions:
            # The order total may have been modified by a previously applied promotion
            if await promotion.test(order, utils):
                adjustment = promotion.apply(order)
                if adjustment:
                    order.add_adjustment(adjustment)
                    order.add_trace("Promotion", f"{adjustment.description} on order", f"{adjustment.amount}")
                    self.calculate_order_totals(order)
            else:
                logger.debug("Order %s: promotion %s no longer eligible", order.code, promotion.id)
        self.calculate_order_totals(order)

    async def _apply_shipping(self, ctx: RequestContext, order: Order):
        """Keeps the selected shipping method if still eligible, else picks the first quote."""
        results = await self.shipping_calculator.get_eligible_shipping_methods(ctx, order)
        if not results:
            order.add_trace("Shipping", "No eligible shipping methods")
            return

        selected = None
        if order.shipping_method_id is not None:
            selected = next((r for r in results if r.method.id == order.shipping_method_id), None)
        if selected is None:
            selected = results[0]

        order.shipping_method_id = selected.method.id
        order.shipping_cost = selected.price
        order.add_trace("Shipping", f"Selected {selected.method.code}", f"{selected.price}")

    def calculate_order_totals(self, order: Order):
        """Recompute the order sub totals from its lines."""
        total_price = 0
        total_tax = 0

        for line in order.lines:
            total_price += line.total_price
            total_tax += line.line_tax

        order.sub_total_before_tax = total_price - total_tax
        order.sub_total = total_price
