"""Command-line entry point: resolve specifiers and print their local files."""

import logging
import sys

from .args import parse_args
from .common.logging_utils import configure_logging
from .config import build_config
from .constants import ExitCodes
from .errors import ConfigError, FetchError, ResolutionError, ResolverError
from .resolver import ModuleResolver

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    """Run the tool and return its exit code."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)

    overrides = {
        "cache_dir": args.CACHE_DIR,
        "enable_http": args.ENABLE_HTTP,
        "enable_jsr": args.ENABLE_JSR,
        "enable_node": args.ENABLE_NODE,
        "silent": args.SILENT,
    }
    try:
        config = build_config(overrides, config_file=args.CONFIG_FILE)
    except ConfigError as exc:
        logger.error("%s", exc)
        return ExitCodes.CONFIG_ERROR.value

    resolver = ModuleResolver(config)
    exit_code = ExitCodes.SUCCESS.value
    for specifier in args.specifiers:
        try:
            identity = resolver.resolve(specifier, args.PARENT)
            local_path = resolver.get_local_path(identity)
        except ResolverError as exc:
            logger.error("%s", exc)
            cause = exc.__cause__ if isinstance(exc, ResolutionError) else exc
            if isinstance(cause, FetchError):
                exit_code = ExitCodes.CONNECTION_ERROR.value
            elif exit_code == ExitCodes.SUCCESS.value:
                exit_code = ExitCodes.RESOLUTION_ERROR.value
            continue
        print(f"{identity} -> {local_path}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
