"""Infrastructure adapters: database, stores, settings and logging."""
