"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    RESOLUTION_ERROR = 1
    FILE_ERROR = 3
    INTERRUPTED = 130


class VcsKinds(Enum):
    """Version control systems a repository root may be served from.

    Args:
        Enum (string): VCS command names as used in go-import metadata.
    """

    GIT = "git"
    HG = "hg"
    SVN = "svn"
    BZR = "bzr"
    FOSSIL = "fossil"


class Strategies(Enum):
    """Resolution strategies selectable from the CLI or config file.

    Args:
        Enum (string): Strategy names.
    """

    DISCOVER = "discover"
    ORIGIN = "origin"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_GOPROXY = "https://proxy.golang.org"
    SUPPORTED_VCS = [kind.value for kind in VcsKinds]
    SUPPORTED_STRATEGIES = [strategy.value for strategy in Strategies]
    VENDOR_DIR = "vendor"
    LATEST = "latest"
    INCOMPATIBLE_SUFFIX = "+incompatible"
    TAG_REF_PREFIX = "refs/tags/"
    GO_GET_QUERY = "go-get=1"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    REQUEST_TIMEOUT = 0  # Seconds for a whole request; 0 disables the timeout
    HTTP_CONNECTION_LIMIT = 100
    USER_AGENT = "modsource/1.0"

    ENV_LOG_LEVEL = "MODSOURCE_LOG_LEVEL"
    ENV_GOPROXY = "GOPROXY"

    # Flags threaded into every descriptor when enabled
    FLAG_DISABLE_SHALLOW_CLONE = "disable-shallow-clone"
    FLAG_DISABLE_SUBMODULES = "disable-submodules"
    FLAG_DISABLE_FSCKOBJECTS = "disable-fsckobjects"
