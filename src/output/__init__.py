"""Console output for resolved packages."""

from .presenter import render_table, sort_by_recency

__all__ = ["render_table", "sort_by_recency"]
