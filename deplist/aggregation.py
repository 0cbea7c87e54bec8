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
"""Merging per-entry dependency lists into one filtered set."""

import os
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from deplist.compile_db import CompilationEntry
from deplist.config import RunConfiguration
from deplist.constants import DEFAULT_SYSTEM_PREFIXES, HEADER_EXTENSION_PREFIX, InvocationError

logger = logging.getLogger(__name__)

__all__ = ["EntryResult", "DependencySet", "AggregationStats", "ResultAggregator", "is_system_header", "is_header_path"]


@dataclass
class EntryResult:
    """Outcome of listing the dependencies of one entry.

    Exactly one of 'paths' and 'error' is meaningful: a failed entry carries
    the error and no paths.
    """

    entry: CompilationEntry
    paths: List[str] = field(default_factory=list)
    error: Optional[InvocationError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class DependencySet:
    """Canonical dependency paths collected during one run."""

    def __init__(self, paths: Iterable[str] = ()):
        self._paths: Set[str] = set(paths)

    def add(self, path: str) -> None:
        self._paths.add(path)

    def sorted(self) -> List[str]:
        """Return the paths in lexicographic order."""
        return sorted(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)


@dataclass
class AggregationStats:
    """Counters collected while aggregating entry results.

    Attributes:
        succeeded: Entries whose dependencies were listed
        failed: Entries whose invocation or parsing failed
        system_excluded: Paths dropped by the system header filter
        non_header_excluded: Paths dropped by the headers-only filter
    """

    succeeded: int = 0
    failed: int = 0
    system_excluded: int = 0
    non_header_excluded: int = 0


def is_system_header(path: str, prefixes: Tuple[str, ...] = DEFAULT_SYSTEM_PREFIXES) -> bool:
    """Check if a path lies under one of the system include roots.

    Matching is per path component, so '/usr' covers '/usr/include/stdio.h'
    but not '/usrlocal/x.h'.

    Args:
        path: Canonical dependency path
        prefixes: System include roots

    Returns:
        True if the path is a system header
    """
    for prefix in prefixes:
        root = prefix.rstrip(os.sep)
        if path == root or path.startswith(root + os.sep):
            return True
    return False


def is_header_path(path: str) -> bool:
    """Check if a path looks like a header.

    Any extension starting with 'h' qualifies (.h, .hh, .hpp, .hxx). Files
    without an extension, such as the C++ standard headers, are kept too.

    Args:
        path: Dependency path

    Returns:
        False only for paths with a non-header extension
    """
    extension = os.path.splitext(path)[1]
    if not extension:
        return True
    return extension[1:].startswith(HEADER_EXTENSION_PREFIX)


class ResultAggregator:
    """Ordered fold of entry results into a DependencySet.

    Args:
        config: Run configuration holding the filter switches
        dependencies: Set to add to; a new one is created when omitted
    """

    def __init__(self, config: RunConfiguration, dependencies: Optional[DependencySet] = None):
        self.config = config
        self.dependencies = dependencies if dependencies is not None else DependencySet()
        self.stats = AggregationStats()

    def _keep(self, path: str) -> bool:
        if self.config.exclude_system_headers and is_system_header(path, self.config.system_prefixes):
            self.stats.system_excluded += 1
            return False
        if self.config.headers_only and not is_header_path(path):
            self.stats.non_header_excluded += 1
            return False
        return True

    def add_result(self, result: EntryResult) -> None:
        """Merge one entry result, logging it if it failed."""
        if not result.succeeded:
            self.stats.failed += 1
            logger.error("Failed to list dependencies of %s: %s", result.entry.file, result.error)
            return

        self.stats.succeeded += 1
        for path in result.paths:
            if self._keep(path):
                self.dependencies.add(path)

    def aggregate(self, results: Iterable[EntryResult]) -> DependencySet:
        """Merge all results in the order given and return the dependency set."""
        for result in results:
            self.add_result(result)

        logger.info(
            "Aggregated %d entries (%d failed): %d dependencies, %d system excluded, %d non-headers excluded",
            self.stats.succeeded + self.stats.failed,
            self.stats.failed,
            len(self.dependencies),
            self.stats.system_excluded,
            self.stats.non_header_excluded,
        )
        return self.dependencies
