"""Configuration, exceptions and logging."""
