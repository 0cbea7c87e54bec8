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
"""Building and running dependency-mode compiler invocations."""

import sys
import shlex
import logging
import threading
import subprocess
from typing import List, Optional, TextIO

from deplist.compile_db import CompilationEntry
from deplist.constants import (
    DEPENDENCY_FLAG,
    OUTPUT_FLAG,
    EmptyOutputError,
    InvocationTimeoutError,
    LaunchError,
    MissingCommandError,
    NonZeroExitError,
    ShellParseError,
)

logger = logging.getLogger(__name__)

__all__ = ["build_argument_vector", "rewrite_for_dependencies", "build_dependency_invocation", "run_dependency_invocation"]

# Serializes forwarded compiler diagnostics coming from worker threads
_diagnostics_lock = threading.Lock()


def build_argument_vector(entry: CompilationEntry) -> List[str]:
    """Reconstruct the compiler argument vector of an entry.

    The structured 'arguments' field is preferred; the raw 'command' is split
    with shell quoting rules otherwise.

    Args:
        entry: Compilation database entry

    Returns:
        Argument vector, executable first

    Raises:
        MissingCommandError: If the entry has no usable 'arguments' or 'command'
        ShellParseError: If 'command' has unbalanced quotes or a trailing escape
    """
    if entry.arguments:
        return list(entry.arguments)

    if entry.command is None:
        raise MissingCommandError(f"No 'command' or 'arguments' for {entry.file}")

    try:
        args = shlex.split(entry.command)
    except ValueError as e:
        raise ShellParseError(f"Cannot split command for {entry.file}: {e}") from e

    if not args:
        raise MissingCommandError(f"Empty command for {entry.file}")
    return args


def rewrite_for_dependencies(args: List[str]) -> List[str]:
    """Rewrite a compile command so the compiler prints its dependencies.

    The first '-o <path>' pair is removed and the dependency flag is inserted
    right after the executable. The executable itself is never touched.

    Args:
        args: Non-empty compiler argument vector

    Returns:
        New argument vector of the form [executable, -M, ...remaining args]

    Example:
        >>> rewrite_for_dependencies(["cc", "-c", "a.c", "-o", "a.o", "-Iinc"])
        ['cc', '-M', '-c', 'a.c', '-Iinc']
    """
    assert args, "argument vector must not be empty"

    rewritten = list(args)
    if OUTPUT_FLAG in rewritten[1:]:
        index = rewritten.index(OUTPUT_FLAG, 1)
        del rewritten[index : index + 2]

    rewritten.insert(1, DEPENDENCY_FLAG)
    return rewritten


def build_dependency_invocation(entry: CompilationEntry) -> List[str]:
    """Build the dependency-mode invocation for an entry."""
    args = build_argument_vector(entry)
    logger.debug("build_dependency_invocation: file=%s args=%s", entry.file, args)
    return rewrite_for_dependencies(args)


def _forward_diagnostics(stderr: bytes, stream: Optional[TextIO]) -> None:
    if stream is None:
        stream = sys.stdout
    buffer = getattr(stream, "buffer", None)
    with _diagnostics_lock:
        if buffer is not None:
            # Pending text first, so raw bytes land after it
            stream.flush()
            buffer.write(stderr)
            buffer.flush()
        else:
            stream.write(stderr.decode("utf-8", errors="replace"))
            stream.flush()


def run_dependency_invocation(args: List[str], directory: str, timeout: Optional[float] = None, diagnostics: Optional[TextIO] = None) -> bytes:
    """Run a dependency-mode compiler invocation.

    Compiler diagnostics on stderr are forwarded verbatim to stdout (or to
    'diagnostics'), because compilers may warn while still succeeding.

    Args:
        args: Rewritten argument vector
        directory: Working directory for the compiler
        timeout: Seconds to wait for the compiler, None waits indefinitely
        diagnostics: Stream receiving the compiler's stderr (default: sys.stdout)

    Returns:
        Raw stdout of the compiler (a make rule)

    Raises:
        LaunchError: If the executable or working directory does not exist
        InvocationTimeoutError: If the compiler exceeds the timeout
        NonZeroExitError: If the compiler exits with a non-zero status
        EmptyOutputError: If the compiler succeeds without printing anything
    """
    try:
        result = subprocess.run(args, cwd=directory, capture_output=True, timeout=timeout, check=False)
    except subprocess.TimeoutExpired as exc:
        raise InvocationTimeoutError(f"{args[0]} timed out after {timeout} seconds") from exc
    except OSError as exc:
        raise LaunchError(f"Failed to run {args[0]} in {directory}: {exc}") from exc

    if result.stderr:
        _forward_diagnostics(result.stderr, diagnostics)

    if result.returncode != 0:
        raise NonZeroExitError(result.returncode, f"{args[0]} failed with code {result.returncode}")

    if not result.stdout:
        raise EmptyOutputError(f"{args[0]} printed no dependency rule")

    return result.stdout
