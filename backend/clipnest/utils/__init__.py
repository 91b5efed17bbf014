"""Shared helpers: envelope, errors, security, validation."""
