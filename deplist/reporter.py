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
"""Writing the final dependency list."""

import os
import sys
import logging
from typing import List, Optional, TextIO

from deplist.aggregation import DependencySet

logger = logging.getLogger(__name__)


def format_dependency_list(dependencies: DependencySet) -> List[str]:
    """Return the dependencies as sorted output lines, newline included."""
    return [f"{path}\n" for path in dependencies.sorted()]


def _encode_dependency_list(dependencies: DependencySet) -> List[bytes]:
    # Paths that were not valid UTF-8 carry surrogate escapes; fsencode restores the original bytes
    return [os.fsencode(path) + b"\n" for path in dependencies.sorted()]


def write_dependency_list(dependencies: DependencySet, file: Optional[TextIO] = None) -> None:
    """Write one canonical path per line in lexicographic order.

    Paths are written as raw file system bytes when the stream exposes a
    binary buffer, so file names that are not valid UTF-8 are printed as is.

    Args:
        dependencies: Aggregated dependency set
        file: Output stream (default: sys.stdout)
    """
    if file is None:
        file = sys.stdout

    buffer = getattr(file, "buffer", None)
    try:
        if buffer is not None:
            file.flush()
            buffer.writelines(_encode_dependency_list(dependencies))
            buffer.flush()
        else:
            file.writelines(format_dependency_list(dependencies))
            file.flush()
    except BrokenPipeError:
        # Reader went away (e.g. piped into head); silence the flush at interpreter exit
        if file is sys.stdout:
            devnull = os.open(os.devnull, os.O_WRONLY)
            os.dup2(devnull, sys.stdout.fileno())
        logger.debug("Output pipe closed before the dependency list was written")
