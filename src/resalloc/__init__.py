# src/resalloc/__init__.py
"""Validation and cross-entity consistency engine for resource allocation data."""

__version__ = "0.1.0"
