"""Shared helpers: HTTP access, request throttling and logging."""
