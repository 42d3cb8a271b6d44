"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    ACQUISITION_ERROR = 1
    CONNECTION_ERROR = 2
    AUTH_ERROR = 3
    USAGE_ERROR = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    ACTION_VERSION = "1.2.4"
    USER_AGENT = f"SetupGraalVM/{ACTION_VERSION}"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "SETUP_GRAALVM_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for API requests
    DOWNLOAD_TIMEOUT = 60 * 30  # Whole-transfer timeout for archives
    DOWNLOAD_CHUNK_SIZE = 1024 * 64

    VERSION_DEV = "dev"
    VERSION_LATEST = "latest"
    VERSION_LATEST_EA = "latest-ea"
    EA_SUFFIX = "-ea"

    # Download retry policy (bounded random backoff, not exponential)
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_MIN_DELAY_SEC = 10
    HTTP_RETRY_MAX_DELAY_SEC = 20

    # Environment
    ENV_TOOL_CACHE = "RUNNER_TOOL_CACHE"
    ENV_TEMP = "RUNNER_TEMP"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    ENV_GDS_TOKEN = "GDS_TOKEN"
    DEFAULT_CACHE_SUBDIR = "setup-graalvm"

    # GitHub
    GITHUB_API_BASE = "https://api.github.com"
    GRAALVM_GH_USER = "graalvm"
    GRAALVM_RELEASES_REPO = "graalvm-ce-builds"
    GRAALVM_REPO_DEV_BUILDS = "graalvm-ce-dev-builds"
    ORACLE_GRAALVM_REPO_EA_BUILDS = "oracle-graalvm-ea-builds"
    GRAALVM_JDK_TAG_PREFIX = "jdk-"
    GRAALVM_TAG_PREFIX = "vm-"

    # Download locations
    GRAALVM_DL_BASE = "https://download.oracle.com/graalvm"
    GRAALVM_CE_DL_BASE = f"https://github.com/graalvm/{GRAALVM_RELEASES_REPO}/releases/download"

    # Mandrel
    MANDREL_REPO = "mandrel"
    MANDREL_NAMESPACE = "mandrel-"
    MANDREL_DL_BASE = "https://github.com/graalvm/mandrel/releases/download"
    DISCO_API_BASE = "https://api.foojay.io/disco/v3.0/packages/jdks"

    # Liberica
    LIBERICA_GH_USER = "bell-sw"
    LIBERICA_RELEASES_REPO = "LibericaNIK"
    LIBERICA_JDK_TAG_PREFIX = "jdk-"
    LIBERICA_VM_PREFIX = "bellsoft-liberica-vm-"

    # GraalVM Download Service
    GDS_BASE = "https://gds.oracle.com/api/20220101"
    GDS_GRAALVM_PRODUCT_ID = "D53FAE8052773FFAE0530F15000AA6C6"

    ERROR_REQUEST = "Please file an issue at: https://github.com/graalvm/setup-graalvm/issues."
    ERROR_HINT = (
        "If you think this is a mistake, please file an issue at: "
        "https://github.com/graalvm/setup-graalvm/issues."
    )
