"""Entity models and the in-memory book store."""
