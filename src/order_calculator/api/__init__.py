"""HTTP API for pricing orders."""
