"""Book Forge - in-memory book, version and world-building entity store."""
