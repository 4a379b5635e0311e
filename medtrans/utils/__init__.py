"""Logging, configuration and progress utilities."""
