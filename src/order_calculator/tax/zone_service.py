"""
Zone Service - Known zones and the strategies that pick the active tax zone.
"""
from pathlib import Path
from typing import Optional, Protocol

import pandas as pd

from ..engine.models import Channel, Order, RequestContext, Zone
from ..errors import DataFileNotFoundError


class ZoneService:
    """
    Holds the zones known to the system.

    The zones file has columns: zone_id, name, members (country codes
    separated by ';').
    """

    def __init__(self, zones: list[Zone]):
        self.zones = list(zones)

    @classmethod
    def from_csv(cls, path: Path) -> 'ZoneService':
        if not path.exists():
            raise DataFileNotFoundError("Zones file", path)
        df = pd.read_csv(path, dtype=str).fillna('')
        zones = [
            Zone(
                id=row['zone_id'].strip(),
                name=row['name'].strip(),
                members=tuple(m.strip().upper() for m in row['members'].split(';') if m.strip()),
            )
            for _, row in df.iterrows()
        ]
        return cls(zones)

    def find_all(self, ctx: RequestContext) -> list[Zone]:
        return list(self.zones)

    def find_by_id(self, zone_id: str) -> Optional[Zone]:
        for zone in self.zones:
            if zone.id == zone_id:
                return zone
        return None


class TaxZoneStrategy(Protocol):
    def determine_tax_zone(self, zones: list[Zone], channel: Channel, order: Order) -> Optional[Zone]:
        ...


class DefaultTaxZoneStrategy:
    """Always uses the channel's default tax zone."""

    def determine_tax_zone(self, zones: list[Zone], channel: Channel, order: Order) -> Optional[Zone]:
        return channel.default_tax_zone


class AddressBasedTaxZoneStrategy:
    """
    Uses the first zone containing the order's shipping country.

    Falls back to the channel's default tax zone when the order has no
    shipping country or no zone contains it.
    """

    def determine_tax_zone(self, zones: list[Zone], channel: Channel, order: Order) -> Optional[Zone]:
        country = (order.shipping_country or '').strip().upper()
        if country:
            for zone in zones:
                if country in zone.members:
                    return zone
        return channel.default_tax_zone


TAX_ZONE_STRATEGIES = {
    'default': DefaultTaxZoneStrategy,
    'address': AddressBasedTaxZoneStrategy,
}
