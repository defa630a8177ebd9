"""NPM range matching using semantic versioning."""

import logging
import re
from typing import Iterable, Optional

import semantic_version

logger = logging.getLogger(__name__)

# Specs that accept any release version. npm's "latest" is a dist-tag; without
# dist-tags the highest release is the closest answer.
_ANY_RELEASE = {"", "*", "x", "X", "latest"}


def _normalize_spec(spec_str: str) -> str:
    """Normalize npm range syntax (hyphen, x-ranges) into SimpleSpec-compatible form."""
    s = spec_str.strip()

    # Hyphen ranges: "1.2.3 - 1.4.5" => ">=1.2.3,<=1.4.5"
    m = re.match(r'^\s*([0-9A-Za-z\.\-\+]+)\s+-\s+([0-9A-Za-z\.\-\+]+)\s*$', s)
    if m:
        left, right = m.group(1), m.group(2)
        return f">={left},<={right}"

    # x-ranges: 1.2.x or 1.x or 1.* -> comparator pairs
    s2 = s.replace('*', 'x').lower()
    m = re.match(r'^\s*v?(\d+)\.(\d+)\.x\s*$', s2)
    if m:
        major, minor = int(m.group(1)), int(m.group(2))
        return f">={major}.{minor}.0,<{major}.{minor + 1}.0"

    m = re.match(r'^\s*v?(\d+)(?:\.x)?(?:\.x)?\s*$', s2)
    if m:
        major = int(m.group(1))
        return f">={major}.0.0,<{major + 1}.0.0"

    return spec_str


def parse_range(spec_str: str):
    """Parse an npm range, returning None when it is not a semver range.

    Git URLs, tarball and ``file:`` specs, aliases and unknown dist-tags all
    land here as None.
    """
    raw = (spec_str or "").strip()
    if raw in _ANY_RELEASE:
        raw = "*"
    try:
        return semantic_version.NpmSpec(raw)
    except ValueError:
        pass
    try:
        return semantic_version.SimpleSpec(_normalize_spec(raw))
    except ValueError:
        return None


def max_satisfying(candidates: Iterable[str], spec_str: str) -> Optional[str]:
    """Return the highest candidate version satisfying ``spec_str``.

    Args:
        candidates: Published version strings; invalid ones are ignored.
        spec_str: npm range expression.

    Returns:
        The original candidate string of the best match, or None.
    """
    spec = parse_range(spec_str)
    if spec is None:
        logger.debug("Unsupported version range %r", spec_str)
        return None

    best = None
    best_raw = None
    for raw in candidates:
        if not isinstance(raw, str):
            continue
        try:
            ver = semantic_version.Version(raw.lstrip("v="))
        except ValueError:
            continue  # Skip invalid versions
        if not spec.match(ver):
            continue
        if best is None or ver > best:
            best, best_raw = ver, raw

    return best_raw
