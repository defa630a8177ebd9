"""Recursive, concurrent expansion of a dependency map into resolved packages."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Mapping, Optional

from common.logging_utils import extra_context, is_debug_enabled
from errors import InvalidDependencyMap
from versioning.npm import max_satisfying
from .cache import PackageMetadataCache
from .models import AncestorChain, EdgeOutcome, ResolvedPackage, SkipReason

logger = logging.getLogger(__name__)


def validate_dependency_map(dep_ranges) -> None:
    """Raise InvalidDependencyMap unless ``dep_ranges`` maps str names to str ranges."""
    if not isinstance(dep_ranges, Mapping):
        raise InvalidDependencyMap(
            f"Dependencies must be a mapping of name to range, got {type(dep_ranges).__name__}"
        )
    for name, spec in dep_ranges.items():
        if not isinstance(name, str) or not isinstance(spec, str):
            raise InvalidDependencyMap(f"Invalid dependency entry {name!r}: {spec!r}")


class DependencyResolver:
    """Expands dependency ranges into the flat list of resolved packages.

    Every entry of a dependency map is resolved concurrently and each
    resolved version is expanded recursively. The only bound on concurrency
    is the request queue behind the metadata cache. Registry problems never
    escape: the affected edge is skipped and recorded in ``outcomes``.
    """

    def __init__(self, cache: PackageMetadataCache, include_dev: bool = False):
        """Initialize the resolver.

        Args:
            cache: Shared metadata cache for the run.
            include_dev: Merge the root devDependencies into the root call.
                devDependencies declared by registry packages are never followed.
        """
        self._cache = cache
        self._include_dev = include_dev
        self.outcomes: List[EdgeOutcome] = []

    async def resolve_root(
        self,
        dependencies: Mapping[str, str],
        dev_dependencies: Optional[Mapping[str, str]] = None,
    ) -> List[ResolvedPackage]:
        """Resolve a project's own dependency sections.

        devDependencies are merged over dependencies when the resolver was
        created with ``include_dev``; otherwise they are ignored.
        """
        validate_dependency_map(dependencies)
        deps = dict(dependencies)
        if self._include_dev and dev_dependencies:
            validate_dependency_map(dev_dependencies)
            deps.update(dev_dependencies)
        return await self.resolve(deps)

    async def resolve(
        self, dep_ranges: Mapping[str, str], ancestors: AncestorChain = ()
    ) -> List[ResolvedPackage]:
        """Resolve ``dep_ranges`` and everything below them.

        Args:
            dep_ranges: Package name -> npm range.
            ancestors: Chain of package names leading to these dependencies.

        Returns:
            Resolved packages for these entries and all their descendants,
            in no particular order.

        Raises:
            InvalidDependencyMap: If dep_ranges is not a str -> str mapping.
        """
        validate_dependency_map(dep_ranges)
        ancestors = tuple(ancestors)
        results = await asyncio.gather(
            *(self._resolve_edge(name, spec, ancestors) for name, spec in dep_ranges.items())
        )
        packages: List[ResolvedPackage] = []
        for branch in results:
            packages.extend(branch)
        return packages

    async def _resolve_edge(
        self, name: str, range_spec: str, ancestors: AncestorChain
    ) -> List[ResolvedPackage]:
        outcome = await self._resolve_version(name, range_spec, ancestors)
        self._record(outcome)
        if not outcome.ok:
            return []

        package = outcome.package
        metadata = await self._cache.get_or_fetch(name)
        deps = metadata.dependencies_of(package.version)
        chain = ancestors + (name,)
        children = {dep: spec for dep, spec in deps.items() if dep not in chain}
        if not children:
            return [package]
        return [package] + await self.resolve(children, chain)

    async def _resolve_version(
        self, name: str, range_spec: str, ancestors: AncestorChain
    ) -> EdgeOutcome:
        """Resolve one edge to a published version, or say why it was skipped."""
        metadata = await self._cache.get_or_fetch(name)
        if metadata is None:
            return EdgeOutcome(name, range_spec, ancestors, skip_reason=SkipReason.METADATA_UNAVAILABLE)
        if not metadata.dependencies_by_version or not metadata.time_by_version:
            return EdgeOutcome(name, range_spec, ancestors, skip_reason=SkipReason.INCOMPLETE_METADATA)

        version = max_satisfying(metadata.versions(), range_spec)
        if version is None:
            return EdgeOutcome(name, range_spec, ancestors, skip_reason=SkipReason.NO_SATISFYING_VERSION)

        published = metadata.publish_instant(version)
        if published is None:
            return EdgeOutcome(name, range_spec, ancestors, skip_reason=SkipReason.MISSING_PUBLISH_TIME)

        return EdgeOutcome(
            name,
            range_spec,
            ancestors,
            package=ResolvedPackage(name=name, version=version, published=published, ancestors=ancestors),
        )

    def _record(self, outcome: EdgeOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.ok or not is_debug_enabled(logger):
            return
        logger.debug(
            "Skipping %s@%s: %s",
            outcome.name,
            outcome.range_spec,
            outcome.skip_reason.value,
            extra=extra_context(
                event="skip",
                component="resolver",
                package=outcome.name,
                range=outcome.range_spec,
                reason=outcome.skip_reason.value,
                path=" -> ".join(outcome.ancestors) or None,
            ),
        )

    def skipped(self) -> List[EdgeOutcome]:
        """Edges that produced no package."""
        return [o for o in self.outcomes if not o.ok]
