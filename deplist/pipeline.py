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
"""Dependency listing pipeline: database -> compiler invocations -> dependency set.

Each entry is rewritten, run and parsed on a worker thread. Worker threads
only produce EntryResults; merging into the DependencySet happens afterwards
on the calling thread, in database order, so logging and filtering do not
depend on which compiler finishes first.
"""

import time
import logging
import multiprocessing as mp
import concurrent.futures
from typing import List, Optional

from deplist.aggregation import DependencySet, EntryResult, ResultAggregator
from deplist.compile_db import CompilationEntry, deduplicate_entries, load_compilation_database
from deplist.config import RunConfiguration
from deplist.constants import InvocationError
from deplist.depfile_parser import DependencyOutputParser
from deplist.invocation import build_dependency_invocation, run_dependency_invocation

logger = logging.getLogger(__name__)

__all__ = ["scan_entry", "scan_entries", "list_dependencies"]


def scan_entry(entry: CompilationEntry, parser: DependencyOutputParser, timeout: Optional[float] = None) -> EntryResult:
    """List the dependencies of a single entry.

    Per-entry failures are captured in the result instead of being raised.

    Args:
        entry: Compilation database entry
        parser: Parser for the compiler's dependency output
        timeout: Per-invocation timeout in seconds

    Returns:
        EntryResult with canonical dependency paths or the error
    """
    logger.debug("file=%s", entry.file)
    try:
        args = build_dependency_invocation(entry)
        output = run_dependency_invocation(args, entry.directory, timeout=timeout)
        return EntryResult(entry=entry, paths=parser.parse(output, entry.directory))
    except InvocationError as e:
        return EntryResult(entry=entry, error=e)


def scan_entries(entries: List[CompilationEntry], max_workers: Optional[int] = None, timeout: Optional[float] = None) -> List[EntryResult]:
    """Run scan_entry for all entries concurrently.

    Args:
        entries: Deduplicated entries
        max_workers: Worker thread count (default: number of CPU cores)
        timeout: Per-invocation timeout in seconds

    Returns:
        Results in the same order as entries
    """
    parser = DependencyOutputParser()
    num_workers = max_workers or mp.cpu_count()
    logger.info("Listing dependencies of %d files using %d workers...", len(entries), num_workers)

    start_time = time.time()
    with concurrent.futures.ThreadPoolExecutor(max_workers=num_workers) as executor:
        results = list(executor.map(lambda entry: scan_entry(entry, parser, timeout), entries))
    logger.debug("Compiler invocations finished in %.2fs", time.time() - start_time)

    return results


def list_dependencies(config: RunConfiguration) -> DependencySet:
    """Collect the filtered dependency set for a compilation database.

    Args:
        config: Run configuration

    Returns:
        Dependency set of all entries that could be processed

    Raises:
        ConfigError: If the database cannot be loaded or is empty
    """
    entries = deduplicate_entries(load_compilation_database(config.database_path))
    results = scan_entries(entries, max_workers=config.max_workers, timeout=config.timeout)
    return ResultAggregator(config).aggregate(results)
