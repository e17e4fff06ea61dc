"""Per-record and cross-record validation engine."""
