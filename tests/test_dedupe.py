"""Tests for deduplication of resolved packages."""

from datetime import datetime, timezone

from resolution.dedupe import deduplicate
from resolution.models import DedupedPackage, ResolvedPackage

WHEN = datetime(2022, 1, 1, tzinfo=timezone.utc)


def _pkg(name, version, *ancestors):
    return ResolvedPackage(name=name, version=version, published=WHEN, ancestors=tuple(ancestors))


def _summary(packages):
    return {(p.name, p.version): p.contributors for p in packages}


class TestDeduplicate:
    """Grouping by name and version."""

    def test_convergent_dependency_lists_nearest_parents(self):
        packages = [_pkg("x", "1.0.0"), _pkg("y", "1.0.0"), _pkg("z", "1.0.0", "x"), _pkg("z", "1.0.0", "y")]

        result = deduplicate(packages)

        assert _summary(result) == {
            ("x", "1.0.0"): frozenset(),
            ("y", "1.0.0"): frozenset(),
            ("z", "1.0.0"): frozenset({"x", "y"}),
        }

    def test_nearest_ancestor_is_used(self):
        packages = [_pkg("leaf", "1.0.0", "root", "mid-a"), _pkg("leaf", "1.0.0", "root", "mid-b")]

        result = deduplicate(packages)

        assert result[0].contributors == {"mid-a", "mid-b"}

    def test_single_contributor_is_cleared(self):
        packages = [_pkg("z", "1.0.0", "a", "x"), _pkg("z", "1.0.0", "b", "x")]

        result = deduplicate(packages)

        assert len(result) == 1
        assert result[0].contributors == frozenset()

    def test_different_versions_stay_separate(self):
        packages = [_pkg("z", "1.0.0", "x"), _pkg("z", "2.0.0", "y")]

        assert len(deduplicate(packages)) == 2

    def test_first_record_is_representative(self):
        packages = [_pkg("z", "1.0.0", "x"), _pkg("z", "1.0.0", "y")]

        result = deduplicate(packages)

        assert isinstance(result[0], DedupedPackage)
        assert result[0].ancestors == ("x",)

    def test_root_sighting_adds_no_contributor(self):
        packages = [_pkg("z", "1.0.0"), _pkg("z", "1.0.0", "x")]

        assert deduplicate(packages)[0].contributors == frozenset()

    def test_idempotent(self):
        packages = [
            _pkg("z", "1.0.0", "x"), _pkg("z", "1.0.0", "y"), _pkg("z", "1.0.0", "y"),
            _pkg("w", "3.0.0", "x"), _pkg("x", "1.0.0"), _pkg("y", "1.0.0"),
        ]

        once = deduplicate(packages)
        twice = deduplicate(once)

        assert _summary(twice) == _summary(once)
        assert twice == once

    def test_empty(self):
        assert deduplicate([]) == []
