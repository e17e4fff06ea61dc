"""In-memory entity registry and immutable DataContext snapshots."""
