"""
Centralized settings and path configuration for the order calculator.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..csv_fields import parse_bool

ENV_PREFIX = "ORDER_CALCULATOR_"


def get_package_root() -> Path:
    """Get the package directory (where the data/ and promotions/ folders live)."""
    return Path(__file__).resolve().parent.parent


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Data directory
    data_dir: Path

    # Collaborator data files
    zones_csv: Path
    tax_rates_csv: Path
    shipping_methods_csv: Path
    variants_csv: Path

    # Promotion files
    promotions_csv: Path
    compiled_promotions: Path

    # Channel
    channel_code: str = "default"
    default_tax_zone_id: Optional[str] = None
    prices_include_tax: bool = False
    currency_code: str = "USD"

    # "default" (channel zone) or "address" (shipping country)
    tax_zone_strategy: str = "default"

    log_level: str = "INFO"

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the package layout and ORDER_CALCULATOR_* variables."""
        package_root = get_package_root()
        root = data_dir or Path(_env("DATA_DIR", str(package_root / 'data')))
        promotions_dir = Path(_env("PROMOTIONS_DIR", str(package_root / 'promotions')))

        return cls(
            data_dir=root,
            zones_csv=root / 'zones.csv',
            tax_rates_csv=root / 'tax_rates.csv',
            shipping_methods_csv=root / 'shipping_methods.csv',
            variants_csv=root / 'variants.csv',
            promotions_csv=promotions_dir / 'promotions.csv',
            compiled_promotions=promotions_dir / 'compiled_promotions.json',
            channel_code=_env("CHANNEL_CODE", "default"),
            default_tax_zone_id=_env("DEFAULT_TAX_ZONE", "US") or None,
            prices_include_tax=parse_bool(_env("PRICES_INCLUDE_TAX", "false")),
            currency_code=_env("CURRENCY_CODE", "USD"),
            tax_zone_strategy=_env("TAX_ZONE_STRATEGY", "default"),
            log_level=_env("LOG_LEVEL", "INFO"),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
