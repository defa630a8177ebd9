"""depfresh - list the most recently published packages in a dependency tree.

Returns:
    int: Exit code
"""
import asyncio
import logging
import sys

from args import parse_args
from common.logging_utils import configure_logging, extra_context, is_debug_enabled, Timer
from common.request_queue import RequestQueue
from constants import ExitCodes, Settings
from errors import ConfigError, ManifestError
from manifest import load_manifest
from output.presenter import render_table
from registry.npm.client import NpmRegistryClient
from resolution.cache import PackageMetadataCache
from resolution.dedupe import deduplicate
from resolution.resolver import DependencyResolver

logger = logging.getLogger(__name__)


async def collect_packages(manifest, settings, include_dev=False, client=None):
    """Resolve a manifest's dependencies against the registry and deduplicate.

    Args:
        manifest: Loaded Manifest.
        settings: Runtime settings.
        include_dev: Also resolve the manifest's devDependencies.
        client: Registry client to use; a new one is opened when omitted.

    Returns:
        list: DedupedPackage records in no particular order.
    """
    queue = RequestQueue(settings.max_parallel)
    if client is None:
        async with NpmRegistryClient(settings.registry_url, settings.request_timeout) as owned:
            return await _collect(manifest, owned, queue, include_dev)
    return await _collect(manifest, client, queue, include_dev)


async def _collect(manifest, client, queue, include_dev):
    cache = PackageMetadataCache(client, queue)
    resolver = DependencyResolver(cache, include_dev=include_dev)
    with Timer() as timer:
        packages = await resolver.resolve_root(manifest.dependencies, manifest.dev_dependencies)
    deduped = deduplicate(packages)
    logger.info(
        "Resolved %d packages (%d unique) with %d registry fetches, %d skipped edges",
        len(packages),
        len(deduped),
        cache.fetch_count,
        len(resolver.skipped()),
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Resolution finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="collect_packages",
                duration_ms=timer.duration_ms(),
                peak_in_flight=queue.peak_in_flight,
                failures=len(cache.failures),
            ),
        )
    return deduped


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging()

    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        sys.stderr.write(f"{exc}\n")
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    try:
        manifest = load_manifest(args.manifest)
    except ManifestError as exc:
        logger.debug("Manifest failure", exc_info=True)
        sys.stderr.write(f"{exc}\n")
        sys.exit(ExitCodes.FILE_ERROR.value)

    if not manifest.dependency_ranges(include_dev=args.INCLUDE_DEV):
        print("Dependencies not found")
        sys.exit(ExitCodes.SUCCESS.value)

    packages = asyncio.run(collect_packages(manifest, settings, include_dev=args.INCLUDE_DEV))
    color = settings.color and sys.stdout.isatty()
    print(render_table(packages, limit=args.LIST_LENGTH, color=color))
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
