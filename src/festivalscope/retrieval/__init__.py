"""Upstream festival gateway access."""
