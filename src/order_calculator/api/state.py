"""
Shared API state - the calculator and promotions built once per process.
"""
import logging
from typing import Optional

from ..config.settings import get_settings
from ..engine.factory import build_order_calculator
from ..engine.order_calculator import OrderCalculator
from ..errors import PromotionDefinitionError
from ..promotions.compile_promotions import compile_promotions
from ..promotions.loader import read_compiled_promotions, select_active
from ..promotions.promotion import Promotion

logger = logging.getLogger(__name__)

_calculator: Optional[OrderCalculator] = None
_promotions: Optional[list[Promotion]] = None


def get_calculator() -> OrderCalculator:
    global _calculator
    if _calculator is None:
        _calculator = build_order_calculator(get_settings())
    return _calculator


def get_all_promotions() -> list[Promotion]:
    """Compiled promotions; compiles promotions.csv first if no JSON exists yet."""
    global _promotions
    if _promotions is None:
        settings = get_settings()
        if not settings.compiled_promotions.exists():
            logger.info("No compiled promotions at %s, compiling %s", settings.compiled_promotions, settings.promotions_csv)
            success, _, errors = compile_promotions(settings.promotions_csv, settings.compiled_promotions, verbose=False)
            if not success:
                raise PromotionDefinitionError(f"Promotion compilation failed: {'; '.join(errors)}")
        _promotions = read_compiled_promotions(settings.compiled_promotions)
    return _promotions


def get_active_promotions(as_of: Optional[str] = None) -> list[Promotion]:
    return select_active(get_all_promotions(), as_of)


def reload():
    """Drop cached state so the next request reloads data files."""
    global _calculator, _promotions
    _calculator = None
    _promotions = None
