"""Tax zones, tax rates and tax calculation."""
