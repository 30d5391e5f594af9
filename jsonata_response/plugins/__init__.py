"""Built-in template tag plugins."""
