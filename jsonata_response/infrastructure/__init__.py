"""Infrastructure layer - configuration, tag registry and in-memory host adapters."""
