"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the command-line tool.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    RESOLUTION_ERROR = 1
    CONNECTION_ERROR = 2
    CONFIG_ERROR = 3


class Protocols(Enum):
    """Module protocols understood by the dispatcher.

    Args:
        Enum (string): Specifier prefix for each protocol.
    """

    NODE = "node:"
    JSR = "jsr:"
    HTTP = "http://"
    HTTPS = "https://"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org"
    REGISTRY_URL_JSR = "https://jsr.io"
    ENV_NPM_REGISTRY = "NPM_CONFIG_REGISTRY"
    NPMRC_FILE = ".npmrc"
    PACKAGE_JSON_FILE = "package.json"
    NODE_MODULES_DIR = "node_modules"
    META_FILE = "meta.json"
    CACHED_AT_KEY = "_cachedAt"

    ENV_PREFIX = "MODRESOLVE_"
    DEFAULT_CACHE_DIRNAME = ".modresolve"
    JSR_CACHE_TTL_SEC = 7 * 24 * 60 * 60
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests

    # Probing order for local files and package entry points
    RESOLVE_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".json"]
    INDEX_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx"]
    JSR_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".mjs"]
    EXPORT_CONDITIONS = ["import", "default", "require"]

    HTTP_HASH_LENGTH = 16
    HTTP_DEFAULT_BASENAME = "index.js"
    TAR_BLOCK_SIZE = 512

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "MODRESOLVE_LOG_LEVEL"
