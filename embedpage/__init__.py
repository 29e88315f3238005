"""HTTP surface for the embed resolver."""
