"""NPM registry client: fetch and narrow package metadata."""

from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Any, Dict, Optional

import aiohttp

from constants import Constants
from common.http_client import create_session, robust_get
from common.logging_utils import extra_context, is_debug_enabled, Timer, safe_url
from errors import PackageNotFoundError, RegistryFetchError, RegistryParseError
from resolution.models import PackageMetadata

logger = logging.getLogger(__name__)


def package_url(base_url: str, name: str) -> str:
    """Build the packument URL for ``name``.

    Scoped names keep their leading ``@`` but the separating slash is
    encoded, which is what registry.npmjs.org expects.
    """
    if not base_url.endswith("/"):
        base_url += "/"
    return base_url + urllib.parse.quote(name, safe="@")


def _string_map(value: Any) -> Dict[str, str]:
    """Keep only string-to-string entries of a dependency section."""
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, str)}


def narrow_packument(name: str, package_info: Any) -> PackageMetadata:
    """Reduce a full registry response to the fields resolution needs.

    Args:
        name: Package name the response belongs to.
        package_info: Decoded JSON body.

    Raises:
        RegistryParseError: If the body is not an object or ``time``/``versions``
            are not objects.
    """
    if not isinstance(package_info, dict):
        raise RegistryParseError(name, f"Unexpected registry payload type for {name}")

    time_map = package_info.get("time")
    versions = package_info.get("versions")
    time_map = {} if time_map is None else time_map
    versions = {} if versions is None else versions
    if not isinstance(time_map, dict) or not isinstance(versions, dict):
        raise RegistryParseError(name, f"Malformed time/versions fields for {name}")

    dependencies: Dict[str, Dict[str, str]] = {}
    dev_dependencies: Dict[str, Dict[str, str]] = {}
    for version, manifest in versions.items():
        manifest = manifest if isinstance(manifest, dict) else {}
        dependencies[version] = _string_map(manifest.get("dependencies"))
        dev_dependencies[version] = _string_map(manifest.get("devDependencies"))

    return PackageMetadata(
        name=name,
        time_by_version={k: v for k, v in time_map.items() if isinstance(v, str)},
        dependencies_by_version=dependencies,
        dev_dependencies_by_version=dev_dependencies,
    )


class NpmRegistryClient:
    """Fetches package metadata from a flat npm-style registry endpoint.

    Use as an async context manager, or pass an existing session which the
    caller keeps ownership of.
    """

    def __init__(
        self,
        base_url: str = Constants.REGISTRY_URL_NPM,
        timeout: int = Constants.REQUEST_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "NpmRegistryClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def start(self) -> None:
        """Open the HTTP session if none was injected."""
        if self._session is None:
            self._session = create_session(self._timeout)
            self._owns_session = True

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def fetch(self, name: str) -> PackageMetadata:
        """Fetch and narrow the metadata of one package.

        Raises:
            PackageNotFoundError: Registry answered 404.
            RegistryFetchError: Transport failure or other non-2xx status.
            RegistryParseError: Body is not UTF-8 JSON or has the wrong shape.
        """
        if self._session is None:
            await self.start()
        url = package_url(self.base_url, name)
        headers = {"Accept": Constants.NPM_ACCEPT_HEADER}

        with Timer() as timer:
            status, _, body = await robust_get(self._session, url, context="npm", headers=headers)

        if status == 0:
            reason = body.decode("utf-8", "replace")
            logger.debug(
                "Registry request failed for %s: %s",
                name,
                reason,
                extra=extra_context(
                    event="http_error",
                    outcome="exception",
                    target=safe_url(url),
                    package_manager="npm",
                ),
            )
            raise RegistryFetchError(name, reason)
        if status == 404:
            logger.debug(
                "Package %s not found in registry",
                name,
                extra=extra_context(
                    event="http_response",
                    outcome="not_found",
                    status_code=404,
                    target=safe_url(url),
                    package_manager="npm",
                ),
            )
            raise PackageNotFoundError(name, f"Package {name} not found", status=404)
        if not 200 <= status < 300:
            logger.debug(
                "Unexpected status code (%s) for %s",
                status,
                name,
                extra=extra_context(
                    event="http_response",
                    outcome="handled_non_2xx",
                    status_code=status,
                    duration_ms=timer.duration_ms(),
                    target=safe_url(url),
                    package_manager="npm",
                ),
            )
            raise RegistryFetchError(name, f"Unexpected status code {status} for {name}", status=status)

        try:
            package_info = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.debug("Couldn't decode JSON for %s", name)
            raise RegistryParseError(name, f"Invalid JSON for {name}: {exc}") from exc

        metadata = narrow_packument(name, package_info)
        if is_debug_enabled(logger):
            logger.debug(
                "Fetched package metadata",
                extra=extra_context(
                    event="fetch",
                    component="client",
                    outcome="success",
                    package=name,
                    version_count=len(metadata.dependencies_by_version),
                    duration_ms=timer.duration_ms(),
                    package_manager="npm",
                ),
            )
        return metadata
