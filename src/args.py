"""Argument parsing functionality for modsource."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program.

    argparse exits with status 2 on usage errors, including a missing or
    extra positional argument.
    """
    parser = argparse.ArgumentParser(
        prog="modsource",
        description=(
            "modsource - Resolve a module's requirements into VCS source descriptors"
        ),
        add_help=True,
    )

    parser.add_argument("MODULE",
                        help="Module path, optionally pinned: <path>[@<version>|@latest]",
                        type=str)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--registry-url",
                        dest="REGISTRY_URL",
                        help=f"Module proxy base URL (default: {Constants.REGISTRY_URL_GOPROXY})",
                        action="store",
                        type=str)
    parser.add_argument("--strategy",
                        dest="STRATEGY",
                        help="Resolution strategy: discover repository roots, or use proxy-reported origins",
                        action="store",
                        type=str,
                        choices=Constants.SUPPORTED_STRATEGIES)
    parser.add_argument("--direct-only",
                        dest="DIRECT_ONLY",
                        help="Skip requirements marked '// indirect'.",
                        action="store_true",
                        default=None)
    parser.add_argument("--max-concurrency",
                        dest="MAX_CONCURRENCY",
                        help="Maximum simultaneous resolutions (0 = unbounded)",
                        action="store",
                        type=int)
    parser.add_argument("--timeout",
                        dest="REQUEST_TIMEOUT",
                        help="Per-request timeout in seconds (0 = none)",
                        action="store",
                        type=float)
    parser.add_argument("--no-dynamic-discovery",
                        dest="DYNAMIC_DISCOVERY",
                        help="Only resolve repository roots from the static host table.",
                        action="store_false",
                        default=None)
    parser.add_argument("--disable-shallow-clone",
                        dest="DISABLE_SHALLOW_CLONE",
                        help="Mark every source as requiring a full clone.",
                        action="store_true",
                        default=None)
    parser.add_argument("--disable-submodules",
                        dest="DISABLE_SUBMODULES",
                        help="Mark every source as not fetching submodules.",
                        action="store_true",
                        default=None)
    parser.add_argument("--disable-fsckobjects",
                        dest="DISABLE_FSCKOBJECTS",
                        help="Mark every source as skipping object integrity checks.",
                        action="store_true",
                        default=None)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output JSON file (default: standard output)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
