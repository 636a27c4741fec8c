"""Catalog normalization, lookup tables and period parsing."""
