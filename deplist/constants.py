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
"""Shared constants and exceptions for depList.

This module provides centralized constants used across the dependency listing
pipeline together with the exception hierarchy, so that the CLI can map every
failure onto a stable exit code.
"""

from typing import Optional, Tuple

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Compiler Invocation Constants
# =============================================================================

DEPENDENCY_FLAG = "-M"  # Ask the preprocessor for a make rule instead of an object file
OUTPUT_FLAG = "-o"  # Output target, irrelevant when listing dependencies

# Timeouts (seconds)
DEFAULT_INVOCATION_TIMEOUT: Optional[float] = None  # None = wait for the compiler indefinitely

# Parallel processing
DEFAULT_MAX_WORKERS: Optional[int] = None  # None = use all CPU cores

# =============================================================================
# Dependency Output Constants
# =============================================================================

# "optional whitespace, text ending in a path, space-backslash continuation marker"
CONTINUATION_LINE_PATTERN = r"^\s*(?P<body>.*?\S)\s+\\$"

# =============================================================================
# Filtering Constants
# =============================================================================

DEFAULT_SYSTEM_PREFIXES: Tuple[str, ...] = ("/usr",)
HEADER_EXTENSION_PREFIX = "h"  # .h, .hh, .hpp, .hxx all qualify

# =============================================================================
# Build System Constants
# =============================================================================

COMPILE_COMMANDS_JSON = "compile_commands.json"  # Standard compilation database filename

# =============================================================================
# Exception Classes
# =============================================================================


class DepListError(Exception):
    """Base exception for all depList errors.

    All depList exceptions carry an exit_code attribute that indicates
    what exit code the program should use when this error is caught at the
    main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(DepListError):
    """Raised when the compilation database is unreadable, malformed or empty."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


# Per-entry errors, logged and skipped by the pipeline
class InvocationError(DepListError):
    """Raised when the dependency listing for a single entry fails."""


class MissingCommandError(InvocationError):
    """Raised when an entry has neither 'command' nor 'arguments'."""


class ShellParseError(InvocationError):
    """Raised when a raw 'command' string cannot be split with shell quoting rules."""


class NonZeroExitError(InvocationError):
    """Raised when the compiler exits with a non-zero status."""

    def __init__(self, returncode: int, message: Optional[str] = None):
        super().__init__(message or f"compiler exited with status {returncode}")
        self.returncode = returncode


class EmptyOutputError(InvocationError):
    """Raised when the compiler succeeds but prints no dependency rule."""


class LaunchError(InvocationError):
    """Raised when the compiler cannot be started (missing executable or directory)."""


class InvocationTimeoutError(InvocationError):
    """Raised when the compiler does not finish within the configured timeout."""


class ParseError(DepListError):
    """Raised when the dependency line pattern cannot be compiled."""
