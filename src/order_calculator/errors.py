"""
Exception types raised by the order calculator.

Resolution misses (no tax rate, no shipping method, unknown variant) are not
errors; they degrade to a zero contribution. Failures of collaborators are
not wrapped and reach the caller unchanged.
"""


class OrderCalculatorError(Exception):
    """Base class for errors raised by this package."""


class PromotionDefinitionError(OrderCalculatorError, ValueError):
    """A promotion rule definition is malformed or uses an unknown code."""


class DataFileNotFoundError(OrderCalculatorError, FileNotFoundError):
    """A required data file is missing."""

    def __init__(self, label: str, path):
        self.path = path
        super().__init__(f"{label} not found at {path}.")
