"""Report aggregation and JSON/CSV persistence."""
