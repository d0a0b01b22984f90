"""Core infrastructure: configuration and the root exception type."""
