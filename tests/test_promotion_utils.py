import pytest

from conftest import make_order
from order_calculator.catalog.variant_repository import CsvVariantRepository, VariantFacets
from order_calculator.engine.promotion_utils import CatalogPromotionUtils
from order_calculator.errors import DataFileNotFoundError


@pytest.fixture
def repository(tmp_path):
    path = tmp_path / "variants.csv"
    path.write_text(
        "variant_id,product_id,sku,product_facets,variant_facets\n"
        "101,10,HELM-M,category-helmets;brand-riddell,size-m\n"
        "301,30,BALL,category-balls,\n"
    )
    return CsvVariantRepository.from_csv(path)


@pytest.mark.asyncio
async def test_find_variant(repository):
    variant = await repository.find_variant("101")

    assert variant == VariantFacets(
        variant_id="101",
        product_id="10",
        product_facet_value_ids=frozenset({"category-helmets", "brand-riddell"}),
        facet_value_ids=frozenset({"size-m"}),
    )
    assert (await repository.find_variant("301")).facet_value_ids == frozenset()
    assert await repository.find_variant("999") is None


@pytest.mark.asyncio
async def test_has_facet_values_combines_product_and_variant_facets(repository):
    utils = CatalogPromotionUtils(repository)
    line = make_order(("101", 50, 1)).lines[0]

    assert await utils.has_facet_values(line, ["category-helmets", "size-m"]) is True
    assert await utils.has_facet_values(line, ["brand-riddell"]) is True
    assert await utils.has_facet_values(line, ["category-helmets", "size-l"]) is False


@pytest.mark.asyncio
async def test_has_facet_values_unknown_variant_is_false(repository):
    utils = CatalogPromotionUtils(repository)
    line = make_order(("999", 50, 1)).lines[0]

    assert await utils.has_facet_values(line, []) is False
    assert await utils.has_facet_values(line, ["category-helmets"]) is False


def test_missing_variants_file(tmp_path):
    with pytest.raises(DataFileNotFoundError, match="Variants file not found"):
        CsvVariantRepository.from_csv(tmp_path / "variants.csv")
