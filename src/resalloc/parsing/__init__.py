"""Tolerant list parsers and field alias resolution."""
