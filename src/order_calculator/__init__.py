"""
Order Calculator Package

Computes the monetary state of a customer order.
Applies tax → promotions → tax again → shipping, keeping order totals consistent after every step.
"""

__version__ = "1.0.0"
