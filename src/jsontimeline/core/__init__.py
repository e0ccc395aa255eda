"""Core infrastructure: value coercion, JSON flattening, configuration, logging."""
