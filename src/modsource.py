"""modsource - Resolve a module's requirements into VCS source descriptors

Fetches the module file of ``<path>[@<version>]`` from the module proxy,
resolves every requirement to a repository URL plus tag or commit, and prints
the descriptors as a JSON array sorted by destination directory.

    Returns:
        int: Exit code
"""
import asyncio
import logging
import signal
import sys
from typing import List

from constants import ExitCodes
from common.errors import ResolutionError
from common.http_client import HttpClient
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import build_config
from registry.gomod.client import GoProxyClient
from repository.vcs_root import RepoRootDiscovery
from versioning.assemble import sort_sources, sources_to_json
from versioning.models import PackageRef, ResolverConfig, SourceDescriptor
from versioning.parser import parse_cli_token
from versioning.resolvers import make_resolver
from versioning.service import VersionResolutionService

logger = logging.getLogger(__name__)


async def resolve_sources(ref: PackageRef, config: ResolverConfig) -> List[SourceDescriptor]:
    """Resolve the requirements of ``ref`` into sorted source descriptors.

    Raises:
        ResolutionError: If any step fails; no partial result is returned.
    """
    async with HttpClient(timeout=config.request_timeout) as http:
        registry = GoProxyClient(http, config.registry_url)

        version = ref.version
        if ref.wants_latest:
            version = await registry.fetch_latest_version(ref.path)
        logger.info("Resolving requirements of %s@%s", ref.path, version)

        manifest = await registry.fetch_manifest(ref.path, version)
        records = manifest.direct_requires() if config.direct_only else list(manifest.requires)
        logger.info("Found %d requirements", len(records))

        discovery = RepoRootDiscovery(http, dynamic=config.dynamic_discovery)
        resolver = make_resolver(config, registry, discovery)
        service = VersionResolutionService(resolver, max_concurrency=config.max_concurrency)
        sources = await service.resolve_all(records)

    return sort_sources(sources)


def run_sync(ref: PackageRef, config: ResolverConfig) -> List[SourceDescriptor]:
    """Run the resolution on a fresh event loop.

    SIGINT and SIGTERM cancel the resolution; every in-flight request is
    aborted and ``asyncio.CancelledError`` propagates to the caller.
    """
    loop = asyncio.new_event_loop()
    main_task = loop.create_task(resolve_sources(ref, config))
    installed = []
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, main_task.cancel)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Platforms without loop signal support fall back to KeyboardInterrupt
            pass
    try:
        return loop.run_until_complete(main_task)
    except KeyboardInterrupt:
        main_task.cancel()
        loop.run_until_complete(asyncio.gather(main_task, return_exceptions=True))
        raise asyncio.CancelledError() from None
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        loop.close()


def write_output(sources: List[SourceDescriptor], path=None) -> None:
    """Write the JSON array to ``path`` or standard output."""
    payload = sources_to_json(sources)
    if path:
        with open(path, "w", encoding="utf-8") as file:
            file.write(payload)
        logger.info("JSON file has been successfully exported at: %s", path)
    else:
        sys.stdout.write(payload)
        sys.stdout.flush()


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    try:
        configure_logging(getattr(args, "LOG_LEVEL", None), getattr(args, "LOG_FILE", None))
    except OSError as exc:
        sys.stderr.write(f"Error: open log file: {exc}\n")
        sys.exit(ExitCodes.FILE_ERROR.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        config = build_config(args)
        ref = parse_cli_token(args.MODULE)
        sources = run_sync(ref, config)
    except ResolutionError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)
    except asyncio.CancelledError:
        sys.stderr.write("Error: interrupted\n")
        sys.exit(ExitCodes.INTERRUPTED.value)

    try:
        write_output(sources, getattr(args, "OUTPUT", None))
    except OSError as exc:
        sys.stderr.write(f"Error: encode output: {exc}\n")
        sys.exit(ExitCodes.FILE_ERROR.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome="success")
        )
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
