"""Core infrastructure: configuration, persistence, errors and observability."""
