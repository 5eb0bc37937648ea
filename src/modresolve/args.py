"""Argument parsing for the modresolve inspection tool."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="modresolve",
        description="Resolve module specifiers and show the cached file behind each one",
        add_help=True,
    )
    parser.add_argument("specifiers",
                        metavar="SPECIFIER",
                        nargs="+",
                        help="Import specifier, e.g. ./a.ts, lodash, jsr:@std/assert@^1.0, https://...")
    parser.add_argument("-p", "--parent",
                        dest="PARENT",
                        help="Identity of the importing module (default: none, resolve from the working directory)",
                        action="store", type=str, default="")
    parser.add_argument("-c", "--config",
                        dest="CONFIG_FILE",
                        help="YAML settings file",
                        action="store", type=str)
    parser.add_argument("--cache-dir",
                        dest="CACHE_DIR",
                        help="Cache root directory",
                        action="store", type=str)
    parser.add_argument("--no-http",
                        dest="ENABLE_HTTP",
                        help="Disable HTTP(S) module loading",
                        action="store_false", default=None)
    parser.add_argument("--no-jsr",
                        dest="ENABLE_JSR",
                        help="Disable JSR module loading",
                        action="store_false", default=None)
    parser.add_argument("--no-node",
                        dest="ENABLE_NODE",
                        help="Disable node: builtin resolution",
                        action="store_false", default=None)
    parser.add_argument("--silent",
                        dest="SILENT",
                        help="Suppress download progress messages",
                        action="store_true", default=None)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        default="INFO")
    return parser.parse_args(argv)
