"""Shared helpers: logging setup and diagnostic artifacts."""
