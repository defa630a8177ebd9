"""Console rendering of resolved packages, most recently published first."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from constants import Constants
from resolution.models import DedupedPackage, ResolvedPackage

RESET = "\033[0m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"

HEADERS = ("PACKAGE", "VERSION", "UPDATED", "FROM")
ELLIPSIS = "..."

# (plain text, ANSI color or None)
Cell = Tuple[str, Optional[str]]


def sort_by_recency(packages: Iterable[ResolvedPackage]) -> List[ResolvedPackage]:
    """Sort by publish instant, newest first."""
    return sorted(packages, key=lambda p: p.published, reverse=True)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}s ago"


def humanize_age(published: datetime, now: datetime) -> str:
    """Relative time such as "3 hours ago", with moment.js-like thresholds."""
    seconds = max((now - published).total_seconds(), 0)
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 45:
        return "a few seconds ago"
    if seconds < 90:
        return "a minute ago"
    if minutes < 45:
        return _plural(round(minutes), "minute")
    if minutes < 90:
        return "an hour ago"
    if hours < 22:
        return _plural(round(hours), "hour")
    if hours < 36:
        return "a day ago"
    if days < 26:
        return _plural(round(days), "day")
    if days < 45:
        return "a month ago"
    if days < 320:
        return _plural(max(round(days / 30.4), 2), "month")
    if days < 548:
        return "a year ago"
    return _plural(max(round(days / 365.25), 2), "year")


def age_color(published: datetime, now: datetime) -> str:
    """Red for under 12 hours, yellow for under 5 days, green otherwise."""
    age = (now - published).total_seconds()
    if age < Constants.FRESH_AGE_SEC:
        return RED
    if age < Constants.RECENT_AGE_SEC:
        return YELLOW
    return GREEN


def provenance(pkg: ResolvedPackage) -> str:
    """Contributors as "a..., b..." when shared, else the ancestor path."""
    contributors = getattr(pkg, "contributors", None)
    if contributors:
        return ", ".join(f"{name}..." for name in sorted(contributors))
    return " -> ".join(pkg.ancestors)


def format_row(pkg: ResolvedPackage, now: datetime) -> List[Cell]:
    return [
        (pkg.name, BLUE),
        (pkg.version, CYAN),
        (humanize_age(pkg.published, now), age_color(pkg.published, now)),
        (provenance(pkg), MAGENTA),
    ]


def _render_cell(cell: Cell, width: int, color: bool) -> str:
    text, ansi = cell
    padding = " " * (width - len(text))
    if color and ansi and text:
        return f"{ansi}{text}{RESET}{padding}"
    return text + padding


def columnify(rows: Sequence[Sequence[Cell]], color: bool = True) -> str:
    """Align cells into space-separated columns, sized on their plain text."""
    widths = [max(len(row[i][0]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for row in rows:
        rendered = [_render_cell(cell, widths[i], color) for i, cell in enumerate(row)]
        lines.append("  ".join(rendered).rstrip())
    return "\n".join(lines)


def render_table(
    packages: Iterable[DedupedPackage],
    limit: int = Constants.DEFAULT_LIST_LENGTH,
    now: Optional[datetime] = None,
    color: bool = True,
) -> str:
    """Render the newest ``limit`` packages as a table.

    A row of ellipses marks that more packages were left out.
    """
    now = now or datetime.now(timezone.utc)
    ordered = sort_by_recency(packages)
    shown = ordered[:limit]

    rows: List[List[Cell]] = [[(h, None) for h in HEADERS]]
    rows.extend(format_row(pkg, now) for pkg in shown)
    if len(shown) < len(ordered):
        rows.append([(ELLIPSIS, BLUE), (ELLIPSIS, CYAN), (ELLIPSIS, GREEN), ("", None)])
    return columnify(rows, color=color)
