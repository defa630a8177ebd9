"""Concurrent recursive dependency resolution."""

from .cache import PackageMetadataCache
from .dedupe import deduplicate
from .models import (
    DedupedPackage,
    EdgeOutcome,
    PackageMetadata,
    ResolvedPackage,
    SkipReason,
)
from .resolver import DependencyResolver

__all__ = [
    "PackageMetadataCache",
    "DependencyResolver",
    "deduplicate",
    "DedupedPackage",
    "EdgeOutcome",
    "PackageMetadata",
    "ResolvedPackage",
    "SkipReason",
]
