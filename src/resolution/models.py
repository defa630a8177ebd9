"""Data models for dependency resolution."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

# Path from a root dependency down to (not including) the current package.
AncestorChain = Tuple[str, ...]

# Stable key for deduplication.
PackageKey = Tuple[str, str]

# Fractional seconds right before the offset (or end of string).
_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d{2}:\d{2}$|$)")


@dataclass(frozen=True)
class PackageMetadata:
    """The slice of a registry packument needed for resolution.

    Only publish times and per-version dependency declarations are kept.
    """
    name: str
    time_by_version: Mapping[str, str]
    dependencies_by_version: Mapping[str, Mapping[str, str]]
    dev_dependencies_by_version: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    def versions(self) -> List[str]:
        """Versions advertised under ``versions`` in the registry response."""
        return list(self.dependencies_by_version.keys())

    def publish_instant(self, version: str) -> Optional[datetime]:
        """Parse the publish timestamp for ``version``, or None if absent/invalid."""
        raw = self.time_by_version.get(version)
        if not isinstance(raw, str):
            return None
        return parse_timestamp(raw)

    def dependencies_of(self, version: str) -> Dict[str, str]:
        """Declared runtime dependency ranges of ``version``."""
        return dict(self.dependencies_by_version.get(version) or {})


@dataclass(frozen=True)
class ResolvedPackage:
    """One dependency edge resolved to a published version."""
    name: str
    version: str
    published: datetime
    ancestors: AncestorChain = ()

    @property
    def key(self) -> PackageKey:
        return (self.name, self.version)

    @property
    def parent(self) -> Optional[str]:
        """Nearest ancestor, None for a root dependency."""
        return self.ancestors[-1] if self.ancestors else None


@dataclass(frozen=True)
class DedupedPackage(ResolvedPackage):
    """A resolved package merged across every edge that reached it.

    ``contributors`` holds the distinct nearest ancestors that independently
    pulled in this exact name and version. It is empty when only one did.
    """
    contributors: FrozenSet[str] = frozenset()


class SkipReason(Enum):
    """Why a dependency edge produced no package."""
    METADATA_UNAVAILABLE = "metadata_unavailable"
    INCOMPLETE_METADATA = "incomplete_metadata"
    NO_SATISFYING_VERSION = "no_satisfying_version"
    MISSING_PUBLISH_TIME = "missing_publish_time"


@dataclass(frozen=True)
class EdgeOutcome:
    """Resolution outcome of a single dependency edge."""
    name: str
    range_spec: str
    ancestors: AncestorChain
    package: Optional[ResolvedPackage] = None
    skip_reason: Optional[SkipReason] = None

    @property
    def ok(self) -> bool:
        return self.package is not None


def parse_timestamp(raw: str) -> Optional[datetime]:
    """Parse an ISO-8601 registry timestamp into an aware datetime.

    Fractional seconds of any length are normalized to microseconds, which
    is all ``datetime.fromisoformat`` accepts before Python 3.11.
    """
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
