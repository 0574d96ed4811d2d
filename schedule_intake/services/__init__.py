"""Canonicalization, merge, validation and session services."""
