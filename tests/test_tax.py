import pytest

from conftest import EU, STANDARD, UNTAXED, US, make_order
from order_calculator.engine.models import AdjustmentType, Channel, RequestContext, Zone
from order_calculator.errors import DataFileNotFoundError
from order_calculator.tax.tax_calculator import TaxCalculator
from order_calculator.tax.tax_rate_service import NO_TAX_RATE, TaxRate, TaxRateService
from order_calculator.tax.zone_service import AddressBasedTaxZoneStrategy, DefaultTaxZoneStrategy, ZoneService


@pytest.fixture
def rate_service(tax_rates):
    return TaxRateService(tax_rates)


def test_tax_rate_arithmetic():
    rate = TaxRate(id="STD", name="Standard", value=20.0)

    assert rate.tax_payable_on(90) == 18
    assert rate.gross_price_of(100) == 120
    assert rate.net_price_of(120) == 100

    adjustment = rate.apply(90)
    assert adjustment.type == AdjustmentType.TAX
    assert adjustment.source == "TAX_RATE:STD"
    assert adjustment.amount == 18
    assert adjustment.description == "Standard"


def test_applicable_rate_resolution(rate_service):
    assert rate_service.get_applicable_tax_rate(US, STANDARD).id == "US-STD"
    assert rate_service.get_applicable_tax_rate(EU, STANDARD).id == "EU-STD"
    assert rate_service.get_applicable_tax_rate(US, UNTAXED) is NO_TAX_RATE
    assert rate_service.get_applicable_tax_rate(None, STANDARD) is NO_TAX_RATE


def test_disabled_rates_are_ignored():
    service = TaxRateService([
        TaxRate(id="OLD", name="Old", value=19.0, category_id="standard", zone_id="US", enabled=False),
        TaxRate(id="NEW", name="New", value=21.0, category_id="standard", zone_id="US"),
    ])

    assert service.get_applicable_tax_rate(US, STANDARD).id == "NEW"


def test_calculator_net_prices(rate_service):
    ctx = RequestContext(channel=Channel(code="default", default_tax_zone=US))

    result = TaxCalculator(rate_service).calculate(100, STANDARD, US, ctx)

    assert result.price == 100
    assert result.price_includes_tax is False
    assert result.price_with_tax == 120
    assert result.price_without_tax == 100


def test_calculator_gross_prices_in_default_zone(rate_service):
    ctx = RequestContext(channel=Channel(code="default", default_tax_zone=US, prices_include_tax=True))

    result = TaxCalculator(rate_service).calculate(120, STANDARD, US, ctx)

    assert result.price == 120
    assert result.price_includes_tax is True
    assert result.price_with_tax == 120
    assert result.price_without_tax == 100


def test_calculator_gross_prices_in_other_zone(rate_service):
    ctx = RequestContext(channel=Channel(code="default", default_tax_zone=US, prices_include_tax=True))

    result = TaxCalculator(rate_service).calculate(120, STANDARD, EU, ctx)

    assert result.price == 100
    assert result.price_includes_tax is False
    assert result.price_with_tax == 110
    assert result.price_without_tax == 100


def test_default_strategy_uses_channel_zone():
    channel = Channel(code="default", default_tax_zone=US)
    order = make_order(shipping_country="DE")

    assert DefaultTaxZoneStrategy().determine_tax_zone([US, EU], channel, order) == US


def test_address_strategy_matches_shipping_country():
    channel = Channel(code="default", default_tax_zone=US)
    strategy = AddressBasedTaxZoneStrategy()

    assert strategy.determine_tax_zone([US, EU], channel, make_order(shipping_country="fr")) == EU
    assert strategy.determine_tax_zone([US, EU], channel, make_order(shipping_country="JP")) == US
    assert strategy.determine_tax_zone([US, EU], channel, make_order()) == US


def test_zone_service_from_csv(tmp_path):
    path = tmp_path / "zones.csv"
    path.write_text("zone_id,name,members\nUS,United States,us\nEU,Europe,DE; FR\n")

    service = ZoneService.from_csv(path)

    assert service.find_all(None) == [
        Zone(id="US", name="United States", members=("US",)),
        Zone(id="EU", name="Europe", members=("DE", "FR")),
    ]
    assert service.find_by_id("EU").name == "Europe"
    assert service.find_by_id("XX") is None


def test_tax_rate_service_from_csv(tmp_path):
    path = tmp_path / "tax_rates.csv"
    path.write_text(
        "rate_id,name,category_id,zone_id,value,enabled\n"
        "US-STD,US Sales Tax,standard,US,8.25,true\n"
        "US-OFF,Disabled,standard,US,50,false\n"
    )

    service = TaxRateService.from_csv(path)

    rate = service.get_applicable_tax_rate(US, STANDARD)
    assert rate.id == "US-STD"
    assert rate.value == 8.25
    assert len(service.rates) == 1


def test_missing_data_files_raise(tmp_path):
    with pytest.raises(DataFileNotFoundError):
        ZoneService.from_csv(tmp_path / "missing.csv")
    with pytest.raises(FileNotFoundError):
        TaxRateService.from_csv(tmp_path / "missing.csv")
