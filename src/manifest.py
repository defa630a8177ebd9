"""Reading of the project's package.json manifest."""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from errors import ManifestNotFoundError, ManifestParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Manifest:
    """Dependency sections of a package.json."""
    path: str
    name: Optional[str] = None
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)

    def dependency_ranges(self, include_dev: bool = False) -> Dict[str, str]:
        """Root dependency map; devDependencies override on name clashes."""
        deps = dict(self.dependencies)
        if include_dev:
            deps.update(self.dev_dependencies)
        return deps


def _section(path: str, data: dict, key: str) -> Dict[str, str]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestParseError(path, f"'{key}' in {path} must be an object")
    for name, spec in value.items():
        if not isinstance(spec, str):
            raise ManifestParseError(path, f"Range for '{name}' in {path} must be a string")
    return dict(value)


def load_manifest(path: str) -> Manifest:
    """Load and validate a package.json.

    Args:
        path: File path of the manifest.

    Raises:
        ManifestNotFoundError: If the file does not exist.
        ManifestParseError: If the file is not a JSON object with valid
            dependency sections, or cannot be read.
    """
    try:
        with open(path, encoding="utf-8") as file:
            text = file.read()
    except FileNotFoundError as e:
        raise ManifestNotFoundError(path, f"File {path} not found!") from e
    except (IOError, UnicodeDecodeError) as e:
        raise ManifestParseError(path, f"Couldn't read {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(path, f"Couldn't parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestParseError(path, f"Couldn't parse {path}: top level must be an object")

    manifest = Manifest(
        path=path,
        name=data.get("name") if isinstance(data.get("name"), str) else None,
        dependencies=_section(path, data, "dependencies"),
        dev_dependencies=_section(path, data, "devDependencies"),
    )
    logger.info(
        "Loaded %s: %d dependencies, %d devDependencies",
        path,
        len(manifest.dependencies),
        len(manifest.dev_dependencies),
    )
    return manifest
