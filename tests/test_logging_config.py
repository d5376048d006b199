import logging

from order_calculator.config.logging_config import setup_logging


def test_setup_logging_adds_one_handler():
    before = len(logging.root.handlers)
    level = logging.root.level

    setup_logging("DEBUG")
    after_first = len(logging.root.handlers)
    setup_logging("WARNING")

    assert len(logging.root.handlers) == after_first <= before + 1
    assert logging.root.level == logging.WARNING
    logging.root.setLevel(level)
