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
"""Run configuration for a dependency listing."""

import argparse
from dataclasses import dataclass
from typing import Optional, Tuple

from deplist.constants import DEFAULT_INVOCATION_TIMEOUT, DEFAULT_MAX_WORKERS, DEFAULT_SYSTEM_PREFIXES


@dataclass(frozen=True)
class RunConfiguration:
    """Read-only settings for one run.

    Attributes:
        database_path: Path to compile_commands.json
        exclude_system_headers: Drop dependencies under any of system_prefixes
        headers_only: Drop dependencies whose extension does not start with 'h'
        system_prefixes: Roots considered system include directories
        max_workers: Number of concurrent compiler invocations (None = CPU count)
        timeout: Per-invocation timeout in seconds (None = no timeout)
    """

    database_path: str
    exclude_system_headers: bool = False
    headers_only: bool = False
    system_prefixes: Tuple[str, ...] = DEFAULT_SYSTEM_PREFIXES
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS
    timeout: Optional[float] = DEFAULT_INVOCATION_TIMEOUT

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "RunConfiguration":
        """Build a configuration from parsed command-line arguments."""
        system_prefixes = tuple(args.system_prefix) if args.system_prefix else DEFAULT_SYSTEM_PREFIXES
        return cls(
            database_path=args.compile_commands,
            exclude_system_headers=args.exclude_system_headers,
            headers_only=args.headers,
            system_prefixes=system_prefixes,
            max_workers=args.jobs,
            timeout=args.timeout,
        )
