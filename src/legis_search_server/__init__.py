"""Semantic bill search over Congress.gov legislation."""

__version__ = "1.0.0"
