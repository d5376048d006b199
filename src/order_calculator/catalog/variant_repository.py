"""
Variant Repository - Looks up the facet classification of product variants.

The variants file has one row per variant:
    variant_id, product_id, sku, product_facets, variant_facets
Facet columns hold facet value ids separated by ';'.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import pandas as pd

from ..errors import DataFileNotFoundError


@dataclass(frozen=True)
class VariantFacets:
    """Classification data of a variant and its parent product."""
    variant_id: str
    product_id: str
    product_facet_value_ids: frozenset[str] = frozenset()
    facet_value_ids: frozenset[str] = frozenset()

    @property
    def all_facet_value_ids(self) -> frozenset[str]:
        return self.product_facet_value_ids | self.facet_value_ids


class VariantRepository(Protocol):
    async def find_variant(self, variant_id: str) -> Optional[VariantFacets]:
        ...


def _split_ids(value) -> frozenset[str]:
    if pd.isna(value):
        return frozenset()
    return frozenset(v.strip() for v in str(value).split(';') if v.strip())


class CsvVariantRepository:
    """Variant lookup backed by a DataFrame indexed by variant id."""

    COLUMNS = ['variant_id', 'product_id', 'sku', 'product_facets', 'variant_facets']

    def __init__(self, variants: pd.DataFrame):
        self.variants = variants

    @classmethod
    def from_csv(cls, path: Path) -> 'CsvVariantRepository':
        if not path.exists():
            raise DataFileNotFoundError("Variants file", path)
        df = pd.read_csv(path, dtype=str)
        df.columns = [c.strip() for c in df.columns]
        df['variant_id'] = df['variant_id'].str.strip()
        # Handle potential duplicates by keeping the first entry
        df = df.drop_duplicates('variant_id').set_index('variant_id')
        return cls(df)

    async def find_variant(self, variant_id: str) -> Optional[VariantFacets]:
        variant_id = str(variant_id).strip()
        if variant_id not in self.variants.index:
            return None
        row = self.variants.loc[variant_id]
        return VariantFacets(
            variant_id=variant_id,
            product_id=str(row.get('product_id', '')),
            product_facet_value_ids=_split_ids(row.get('product_facets')),
            facet_value_ids=_split_ids(row.get('variant_facets')),
        )
