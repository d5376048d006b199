"""Logging setup for the API and scripts."""
import logging
from typing import Optional

_handler: Optional[logging.Handler] = None


def setup_logging(level: str = "INFO"):
    """Configure the root logger once; repeated calls only change the level."""
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
        logging.root.addHandler(_handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
