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
"""Colorama wrapper utilities for colored diagnostics on stderr."""

import sys
import os
import logging
from typing import Optional, TextIO, Dict, Tuple

from colorama import Fore, Style, init

logger = logging.getLogger(__name__)

# Keep ANSI codes when stderr is redirected; should_use_color() decides whether they are wanted
init(autoreset=False, strip=False)


class Colors:
    """Color codes for terminal output."""

    RED = Fore.RED
    GREEN = Fore.GREEN
    YELLOW = Fore.YELLOW
    CYAN = Fore.CYAN
    WHITE = Fore.WHITE

    RESET = Style.RESET_ALL
    BRIGHT = Style.BRIGHT
    DIM = Style.DIM
    NORMAL = Style.NORMAL

    @staticmethod
    def disable() -> None:
        """Disable all color output."""
        for attr in dir(Colors):
            if not attr.startswith("_") and attr != "disable":
                setattr(Colors, attr, "")


def colored(text: str, color: str = "", style: str = "") -> str:
    """Return colored text string.

    Args:
        text: Text to colorize
        color: Color code (e.g., Colors.RED)
        style: Style code (e.g., Colors.BRIGHT)

    Returns:
        Formatted string with color codes, or the plain text when no color is given
    """
    if not color:
        return text

    return f"{style}{color}{text}{Colors.RESET}"


def print_colored(text: str, color: str = "", style: str = "", file: Optional[TextIO] = None) -> None:
    """Print colored text to file/stdout."""
    if file is None:
        file = sys.stdout

    print(colored(text, color, style), file=file)


def print_success(text: str, file: Optional[TextIO] = None, prefix: bool = False) -> None:
    """Print success message in green."""
    message = f"Success: {text}" if prefix else text
    print_colored(message, Colors.GREEN, file=file)


def print_error(text: str, file: Optional[TextIO] = None, prefix: bool = True) -> None:
    """Print error message in red to stderr.

    Args:
        text: Error message to print
        file: File object (default: sys.stderr)
        prefix: If True, prepend "Error: " to message (default: True)
    """
    if file is None:
        file = sys.stderr
    message = f"Error: {text}" if prefix else text
    print_colored(message, Colors.RED, file=file)


def print_warning(text: str, file: Optional[TextIO] = None, prefix: bool = True) -> None:
    """Print warning message in yellow to stderr."""
    if file is None:
        file = sys.stderr
    message = f"Warning: {text}" if prefix else text
    print_colored(message, Colors.YELLOW, file=file)


def should_use_color(stream: Optional[TextIO] = None, no_color: bool = False) -> bool:
    """Determine if color should be used based on environment and flags.

    Args:
        stream: Stream the colored text is written to (default: sys.stderr)
        no_color: Disable color output

    Returns:
        True if color should be used
    """
    if no_color:
        return False

    if stream is None:
        stream = sys.stderr

    # Check if the stream is a TTY
    isatty = getattr(stream, "isatty", None)
    if isatty is None or not isatty():
        return False

    # Check NO_COLOR environment variable (see no-color.org)
    if os.environ.get("NO_COLOR"):
        return False

    return True


# Log level color mapping, looked up at format time so Colors.disable() takes effect
LEVEL_COLORS: Dict[int, Tuple[str, str]] = {
    logging.CRITICAL: ("RED", "BRIGHT"),
    logging.ERROR: ("RED", "NORMAL"),
    logging.WARNING: ("YELLOW", "NORMAL"),
    logging.INFO: ("CYAN", "NORMAL"),
    logging.DEBUG: ("WHITE", "DIM"),
}


class ColoredFormatter(logging.Formatter):
    """Logging formatter that colors each record by its level."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color_name, style_name = LEVEL_COLORS.get(record.levelno, ("WHITE", "NORMAL"))
        return colored(message, getattr(Colors, color_name), getattr(Colors, style_name))
