#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""List the source dependencies of every entry in a compilation database.

PURPOSE:
    Produce the complete, deduplicated list of files (sources and headers) that
    the translation units of a compile_commands.json depend on, without relying
    on the build system's own dependency tracking.

WHAT IT DOES:
    - Reads compile_commands.json and skips repeated entries for the same file
    - Rewrites each compile command to '<compiler> -M ...' without '-o <target>'
    - Runs the rewritten commands in parallel in each entry's directory
    - Parses the printed make rules and keeps existing files in canonical form
    - Optionally drops system headers and non-header files
    - Prints the sorted result, one absolute path per line

METHOD:
    The compiler's own preprocessor computes the dependencies; no source file
    is parsed here. Entries that fail are logged and skipped.

REQUIREMENTS:
    - Python 3.8+
    - The compilers referenced by the compilation database
    - colorama, packaging

Usage:
    listDependencies.py <compile_commands.json> [--exclude-system-headers] [--headers] list

Exit Codes:
    0: Success (individual entries may have failed, see log)
    1: Invalid arguments or compilation database
    2: Unexpected runtime error
    130: Interrupted
"""

import sys
import signal
import logging
import argparse
from typing import Any, List, Optional

__version__ = "1.0.0"
__author__ = "Mana Battery"

from deplist.color_utils import Colors, ColoredFormatter, print_error, print_warning, should_use_color
from deplist.config import RunConfiguration
from deplist.constants import EXIT_SUCCESS, EXIT_RUNTIME_ERROR, EXIT_KEYBOARD_INTERRUPT, COMPILE_COMMANDS_JSON, DepListError
from deplist.package_verification import require_package
from deplist.pipeline import list_dependencies
from deplist.reporter import write_dependency_list

__all__ = ["EXIT_SUCCESS", "main", "create_parser"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s: %(message)s"


def signal_handler(signum: int, frame: Any) -> None:
    """Handle interrupt signals gracefully."""
    print_warning("\nInterrupted by user. Exiting...", prefix=False)
    sys.exit(EXIT_KEYBOARD_INTERRUPT)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        description="List the source dependencies of a compilation database.",
        epilog=f"Version {__version__}\n\nExamples:\n"
        f"  %(prog)s build/{COMPILE_COMMANDS_JSON} list\n"
        f"  %(prog)s build/{COMPILE_COMMANDS_JSON} --exclude-system-headers --headers list\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("compile_commands", help=f"Path to {COMPILE_COMMANDS_JSON}")

    parser.add_argument("--exclude-system-headers", action="store_true", help="Exclude system headers from dependency list")

    parser.add_argument("--headers", action="store_true", help="List only headers")

    parser.add_argument(
        "--system-prefix",
        action="append",
        metavar="PATH",
        help="System include root for --exclude-system-headers (repeatable, default: /usr)",
    )

    parser.add_argument("--jobs", "-j", type=_positive_int, default=None, metavar="N", help="Number of parallel compiler invocations (default: CPU count)")

    parser.add_argument("--timeout", type=_positive_float, default=None, metavar="SECONDS", help="Timeout for each compiler invocation (default: none)")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging to stderr")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True
    subparsers.add_parser("list", help="Print the dependency list to stdout")

    return parser


def setup_logging(verbose: bool, no_color: bool) -> None:
    """Configure colored logging on stderr."""
    if not should_use_color(sys.stderr, no_color):
        Colors.disable()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColoredFormatter(LOG_FORMAT))
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, handlers=[handler])


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the script.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.no_color)
    # colorama is already imported by color_utils here, so only an outdated release can be reported
    require_package("colorama", "colored log output (minimum version check)")
    logger.debug("args = %s", args)

    config = RunConfiguration.from_args(args)

    try:
        dependencies = list_dependencies(config)
    except DepListError as e:
        print_error(str(e))
        return e.exit_code
    except KeyboardInterrupt:
        print_warning("\nInterrupted by user.", prefix=False)
        return EXIT_KEYBOARD_INTERRUPT

    write_dependency_list(dependencies)
    return EXIT_SUCCESS


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print_warning("Interrupted.", prefix=False)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(EXIT_RUNTIME_ERROR)
