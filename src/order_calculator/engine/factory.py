"""
Builds an OrderCalculator and request contexts from Settings and data files.
"""
from typing import Optional

from ..catalog.variant_repository import CsvVariantRepository
from ..config.settings import Settings, get_settings
from ..shipping.shipping_calculator import ShippingCalculator
from ..tax.tax_calculator import TaxCalculator
from ..tax.tax_rate_service import TaxRateService
from ..tax.zone_service import TAX_ZONE_STRATEGIES, ZoneService
from .models import Channel, RequestContext
from .order_calculator import OrderCalculator
from .promotion_utils import CatalogPromotionUtils


def build_order_calculator(settings: Optional[Settings] = None) -> OrderCalculator:
    """Load every collaborator from the configured data files."""
    settings = settings or get_settings()

    if settings.tax_zone_strategy not in TAX_ZONE_STRATEGIES:
        raise ValueError(
            f"Unknown tax zone strategy '{settings.tax_zone_strategy}', "
            f"must be one of: {set(TAX_ZONE_STRATEGIES)}"
        )

    tax_rate_service = TaxRateService.from_csv(settings.tax_rates_csv)
    return OrderCalculator(
        zone_service=ZoneService.from_csv(settings.zones_csv),
        tax_rate_service=tax_rate_service,
        tax_calculator=TaxCalculator(tax_rate_service),
        shipping_calculator=ShippingCalculator.from_csv(settings.shipping_methods_csv),
        promotion_utils=CatalogPromotionUtils(CsvVariantRepository.from_csv(settings.variants_csv)),
        tax_zone_strategy=TAX_ZONE_STRATEGIES[settings.tax_zone_strategy](),
    )


def build_request_context(
    settings: Settings,
    zone_service: ZoneService,
    request_date: Optional[str] = None,
) -> RequestContext:
    """Context for the configured channel; an unknown default zone id resolves to no zone."""
    default_zone = None
    if settings.default_tax_zone_id:
        default_zone = zone_service.find_by_id(settings.default_tax_zone_id)
    channel = Channel(
        code=settings.channel_code,
        default_tax_zone=default_zone,
        prices_include_tax=settings.prices_include_tax,
        currency_code=settings.currency_code,
    )
    return RequestContext(channel=channel, request_date=request_date)
