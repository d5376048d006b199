import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from order_calculator.catalog.variant_repository import VariantFacets
from order_calculator.engine.models import Channel, Order, OrderLine, RequestContext, TaxCategory, Zone
from order_calculator.engine.order_calculator import OrderCalculator
from order_calculator.engine.promotion_utils import CatalogPromotionUtils
from order_calculator.shipping.shipping_calculator import ShippingCalculator, ShippingMethod
from order_calculator.tax.tax_calculator import TaxCalculator
from order_calculator.tax.tax_rate_service import TaxRate, TaxRateService
from order_calculator.tax.zone_service import ZoneService

US = Zone(id="US", name="United States", members=("US",))
EU = Zone(id="EU", name="European Union", members=("DE", "FR"))

STANDARD = TaxCategory(id="standard", name="Standard")
UNTAXED = TaxCategory(id="untaxed", name="No rate configured")


class InMemoryVariantRepository:
    """Variant lookup over a dict, counting calls."""

    def __init__(self, variants=None):
        self.variants = {v.variant_id: v for v in (variants or [])}
        self.calls = 0

    async def find_variant(self, variant_id):
        self.calls += 1
        return self.variants.get(variant_id)


@pytest.fixture
def tax_rates():
    return [
        TaxRate(id="US-STD", name="US Standard", value=20.0, category_id="standard", zone_id="US"),
        TaxRate(id="EU-STD", name="EU Standard", value=10.0, category_id="standard", zone_id="EU"),
    ]


@pytest.fixture
def shipping_methods():
    return [
        ShippingMethod(id="1", code="standard", rate=5),
        ShippingMethod(id="2", code="express", rate=15),
    ]


@pytest.fixture
def variant_repository():
    return InMemoryVariantRepository([
        VariantFacets(
            variant_id="101",
            product_id="10",
            product_facet_value_ids=frozenset({"category-helmets"}),
            facet_value_ids=frozenset({"size-m"}),
        ),
    ])


@pytest.fixture
def make_calculator(tax_rates, shipping_methods, variant_repository):
    def _make(methods=None, repository=None, strategy=None):
        rate_service = TaxRateService(tax_rates)
        return OrderCalculator(
            zone_service=ZoneService([US, EU]),
            tax_rate_service=rate_service,
            tax_calculator=TaxCalculator(rate_service),
            shipping_calculator=ShippingCalculator(shipping_methods if methods is None else methods),
            promotion_utils=CatalogPromotionUtils(repository or variant_repository),
            tax_zone_strategy=strategy,
        )
    return _make


@pytest.fixture
def calculator(make_calculator):
    return make_calculator()


@pytest.fixture
def ctx():
    return RequestContext(channel=Channel(code="default", default_tax_zone=US))


def make_order(*lines, code="T-1", **kwargs) -> Order:
    """Build an order from (variant_id, unit_price, quantity[, tax_category]) tuples."""
    order_lines = []
    for i, entry in enumerate(lines):
        variant_id, unit_price, quantity = entry[:3]
        category = entry[3] if len(entry) > 3 else STANDARD
        order_lines.append(OrderLine.create(str(i + 1), variant_id, unit_price, category, quantity))
    return Order(code=code, lines=order_lines, **kwargs)
