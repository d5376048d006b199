"""Shipping method quoting."""
