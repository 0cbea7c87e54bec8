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
"""Parsing of makefile-style dependency rules printed by 'cc -M'.

A dependency-mode compiler prints a single make rule::

    a.o: src/a.c \\
      inc/a.h \\
      inc/b.h

Every line ending in the space-backslash continuation marker contributes the
paths written before the marker. The target (``a.o:``) is stripped from the
line that carries it. Candidate paths are anchored to the compilation
directory, kept only if they exist, and returned in canonical form.
"""

import os
import re
import logging
from typing import List, Optional

from deplist.constants import CONTINUATION_LINE_PATTERN, ParseError

logger = logging.getLogger(__name__)

__all__ = ["DependencyOutputParser", "canonicalize_dependency", "split_dependency_paths"]

# Rule target at the start of an unindented line; a drive letter ('C:\') is not followed by whitespace
_TARGET_RE = re.compile(r"^\S.*?:(?=\s|$)")
_UNESCAPED_WHITESPACE_RE = re.compile(r"(?<!\\)\s+")


def canonicalize_dependency(candidate: str, directory: str) -> Optional[str]:
    """Resolve a dependency path to its canonical absolute form.

    Relative paths are resolved against the compilation directory, because that
    is where the compiler looked them up. Paths that do not exist (deleted
    generated headers, broken symlinks, virtual files) are dropped.

    Args:
        candidate: Path as printed by the compiler
        directory: Working directory of the compiler invocation

    Returns:
        Canonical path with symlinks and '..' resolved, or None if nothing exists there
    """
    path = os.path.join(directory, candidate)
    if not os.path.exists(path):
        logger.debug("Dropping non-existent dependency: %s", candidate)
        return None
    return os.path.realpath(path)


def split_dependency_paths(body: str, strip_target: bool = True) -> List[str]:
    """Split the text of one rule line into paths.

    Args:
        body: Line text without the continuation marker
        strip_target: Drop a leading 'target:', only valid for unindented lines

    Returns:
        Paths in line order, with escaped spaces ('\\ ') restored
    """
    match = _TARGET_RE.match(body) if strip_target else None
    if match:
        body = body[match.end() :]

    paths = []
    for token in _UNESCAPED_WHITESPACE_RE.split(body.strip()):
        if token:
            paths.append(token.replace("\\ ", " "))
    return paths


class DependencyOutputParser:
    """Extracts existing dependency paths from 'cc -M' output.

    Args:
        pattern: Regular expression recognizing a continuation line. Its 'body'
            group (or first group) holds the text before the marker.

    Raises:
        ParseError: If the pattern is not a valid regular expression or has no group
    """

    def __init__(self, pattern: str = CONTINUATION_LINE_PATTERN):
        try:
            self._line_re = re.compile(pattern)
        except re.error as e:
            raise ParseError(f"Invalid dependency line pattern {pattern!r}: {e}") from e

        if self._line_re.groups == 0:
            raise ParseError(f"Dependency line pattern {pattern!r} has no capture group")
        self._group = "body" if "body" in self._line_re.groupindex else 1

    def parse(self, output: bytes, directory: str) -> List[str]:
        """Parse compiler output into canonical dependency paths.

        Args:
            output: Raw stdout of the dependency-mode invocation
            directory: Working directory of the invocation

        Returns:
            Canonical paths of existing dependencies, in line order. Empty if
            the output holds no continuation lines.
        """
        result: List[str] = []
        for line in output.decode("utf-8", errors="surrogateescape").splitlines():
            match = self._line_re.match(line)
            if not match:
                continue
            strip_target = not line[:1].isspace()
            for candidate in split_dependency_paths(match.group(self._group), strip_target):
                path = canonicalize_dependency(candidate, directory)
                if path is not None:
                    result.append(path)

        if not result:
            logger.warning("No dependency found")
        return result
