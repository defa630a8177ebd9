"""Shared fixtures: an in-memory npm registry."""

import asyncio
from collections import Counter
from typing import Dict, Optional

import pytest

from errors import PackageNotFoundError, RegistryFetchError
from registry.npm.client import narrow_packument


def packument(versions: Dict[str, dict], extra_time: Optional[Dict[str, str]] = None) -> dict:
    """Build a registry response.

    Args:
        versions: version -> {"time": iso, "dependencies": {...}, "devDependencies": {...}}.
            A missing "time" leaves the version out of the time map.
        extra_time: Additional raw entries for the time map (created/modified).
    """
    time_map = dict(extra_time or {})
    body_versions = {}
    for version, info in versions.items():
        if "time" in info:
            time_map[version] = info["time"]
        entry = {"name": "pkg", "version": version, "dist": {"tarball": "x"}}
        if "dependencies" in info:
            entry["dependencies"] = info["dependencies"]
        if "devDependencies" in info:
            entry["devDependencies"] = info["devDependencies"]
        body_versions[version] = entry
    return {"name": "pkg", "readme": "long text", "time": time_map, "versions": body_versions}


class FakeRegistry:
    """Stand-in for NpmRegistryClient backed by a dict of packuments.

    A value may be an exception instance, which ``fetch`` raises.
    """

    def __init__(self, packages: Dict[str, object], delay: float = 0):
        self.packages = packages
        self.delay = delay
        self.calls = Counter()
        self.in_flight = 0
        self.peak_in_flight = 0

    async def fetch(self, name):
        self.calls[name] += 1
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if name not in self.packages:
                raise PackageNotFoundError(name, f"Package {name} not found", status=404)
            value = self.packages[name]
            if isinstance(value, Exception):
                raise value
            return narrow_packument(name, value)
        finally:
            self.in_flight -= 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None


@pytest.fixture
def simple_tree():
    """Two roots sharing a dependency, one unreachable package and a cycle."""
    return {
        "x": packument({"1.0.0": {"time": "2020-01-01T00:00:00.000Z", "dependencies": {"z": "^1.0.0"}}}),
        "y": packument({"2.1.0": {"time": "2021-01-01T00:00:00.000Z", "dependencies": {"z": "^1.0.0", "q": "*"}}}),
        "z": packument({
            "1.0.0": {"time": "2019-05-01T00:00:00.000Z"},
            "2.0.0": {"time": "2022-05-01T00:00:00.000Z"},
        }),
        "q": RegistryFetchError("q", "q connection error: boom"),
    }
