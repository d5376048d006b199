"""
Field parsers shared by the CSV data files and the promotion compiler.
"""
from typing import Optional


def parse_bool(value: str) -> bool:
    """Parse a boolean from CSV string."""
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def parse_optional_int(value: str) -> Optional[int]:
    """Parse optional integer."""
    if not value or value.strip() == '':
        return None
    return int(value)


def parse_optional_str(value: str) -> Optional[str]:
    """Parse optional string (empty = None)."""
    if not value or value.strip() == '':
        return None
    return value.strip()


def parse_id_list(value: str) -> list[str]:
    """Parse a ';'-separated list of ids."""
    return [v.strip() for v in (value or '').split(';') if v.strip()]
