"""
Promotion Utils - capability object handed to promotion conditions.

Answers data-dependent questions a promotion cannot answer from the order
alone. It is passed explicitly to every `Promotion.test` call.
"""
import logging
from typing import Iterable, Protocol

from ..catalog.variant_repository import VariantRepository
from .models import OrderLine

logger = logging.getLogger(__name__)


class PromotionUtils(Protocol):
    async def has_facet_values(self, order_line: OrderLine, facet_value_ids: Iterable[str]) -> bool:
        ...


class CatalogPromotionUtils:
    """PromotionUtils backed by a variant repository."""

    def __init__(self, variant_repository: VariantRepository):
        self.variant_repository = variant_repository

    async def has_facet_values(self, order_line: OrderLine, facet_value_ids: Iterable[str]) -> bool:
        """True if the line's variant and its product together carry every given facet value."""
        variant = await self.variant_repository.find_variant(order_line.product_variant_id)
        if variant is None:
            logger.debug("Variant %s not found, facet check fails", order_line.product_variant_id)
            return False
        return set(facet_value_ids) <= variant.all_facet_value_ids
