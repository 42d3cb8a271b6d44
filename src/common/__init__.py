"""Shared helpers: HTTP, logging, errors and platform detection."""
