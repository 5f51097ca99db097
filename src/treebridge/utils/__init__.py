"""Shared utilities: configuration and component logging."""
