"""
Promotion Loader - Reads compiled promotions and selects the active ones.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..errors import DataFileNotFoundError
from .promotion import Promotion

logger = logging.getLogger(__name__)


def read_compiled_promotions(path: Path) -> list[Promotion]:
    """Load every promotion from a compiled JSON file, in file order."""
    if not path.exists():
        raise DataFileNotFoundError("Compiled promotions file", path)
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return [Promotion.from_dict(p) for p in data.get('promotions', [])]


def select_active(promotions: list[Promotion], as_of: Optional[str] = None) -> list[Promotion]:
    """
    Enabled promotions whose date range covers `as_of` (default: today),
    ordered by priority (lower = applied first).
    """
    today = as_of or datetime.now().strftime('%Y-%m-%d')
    active = [p for p in promotions if p.is_active_on(today)]
    active.sort(key=lambda p: p.priority)
    return active


def load_promotions(path: Path, as_of: Optional[str] = None) -> list[Promotion]:
    promotions = read_compiled_promotions(path)
    active = select_active(promotions, as_of)
    logger.info("Loaded %d promotions (%d active) from %s", len(promotions), len(active), path)
    return active
