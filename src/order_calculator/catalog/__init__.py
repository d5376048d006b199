"""Product variant classification lookup."""
