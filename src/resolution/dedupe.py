"""Collapse resolved packages by name and version, merging provenance."""

from typing import Dict, Iterable, List, Set

from .models import DedupedPackage, PackageKey, ResolvedPackage


def _contributors_of(pkg: ResolvedPackage) -> Set[str]:
    # Already-merged records carry their contributors forward.
    existing = getattr(pkg, "contributors", None)
    if existing:
        return set(existing)
    return {pkg.parent} if pkg.parent else set()


def deduplicate(packages: Iterable[ResolvedPackage]) -> List[DedupedPackage]:
    """Group packages by (name, version) and keep one record per group.

    The kept record is the first one seen. Its ``contributors`` are the
    distinct nearest ancestors across the group, cleared when there is only
    one since a dependency reached through a single parent is not shared.

    Args:
        packages: Resolved (or already deduplicated) packages.

    Returns:
        One DedupedPackage per distinct key, in order of first sighting.
    """
    representatives: Dict[PackageKey, ResolvedPackage] = {}
    contributors: Dict[PackageKey, Set[str]] = {}

    for pkg in packages:
        if pkg.key not in representatives:
            representatives[pkg.key] = pkg
            contributors[pkg.key] = set()
        contributors[pkg.key].update(_contributors_of(pkg))

    result = []
    for key, pkg in representatives.items():
        merged = contributors[key]
        result.append(
            DedupedPackage(
                name=pkg.name,
                version=pkg.version,
                published=pkg.published,
                ancestors=pkg.ancestors,
                contributors=frozenset(merged) if len(merged) > 1 else frozenset(),
            )
        )
    return result
