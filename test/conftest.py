#!/usr/bin/env python3
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
"""Pytest configuration and shared fixtures for depList tests.

Fixtures build small on-disk projects (sources, headers, a fake compiler and a
compile_commands.json) inside a temporary directory so that the pipeline can
run end-to-end without a real toolchain.

Fixture Scopes:
- function: Default, recreated for each test
"""

import os
import sys
import json
import stat
import tempfile
import shutil
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Stand-in for 'cc -M': prints '<source>.deps' as the make rule, records its arguments,
# and fails when '<source>.fail' exists.
FAKE_COMPILER = """#!/bin/sh
src=""
for arg in "$@"; do
  case "$arg" in
    *.c|*.cpp) src="$arg" ;;
  esac
done
echo "$@" > "$src.args"
if [ -f "$src.fail" ]; then
  echo "$src: error: simulated failure" >&2
  exit 1
fi
if [ -f "$src.warn" ]; then
  echo "$src: warning: simulated warning" >&2
fi
cat "$src.deps"
"""


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Scope: function (default)
    Use for: File I/O operations that need isolation
    """
    tmpdir = tempfile.mkdtemp(prefix="deplist_test_")
    yield os.path.realpath(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def write_compile_db(temp_dir: str) -> Callable[[List[Dict[str, Any]]], str]:
    """Return a helper that writes entries to <temp_dir>/compile_commands.json.

    Scope: function
    Dependencies: temp_dir
    Use for: Testing compilation database loading
    """

    def _write(entries: List[Dict[str, Any]]) -> str:
        db_path = Path(temp_dir) / "compile_commands.json"
        db_path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
        return str(db_path)

    return _write


@pytest.fixture
def fake_compiler(temp_dir: str) -> str:
    """Create an executable fake compiler script.

    Scope: function
    Dependencies: temp_dir
    Use for: Running compiler invocations without a real toolchain
    """
    compiler = Path(temp_dir) / "bin" / "fakecc"
    compiler.parent.mkdir(parents=True, exist_ok=True)
    compiler.write_text(FAKE_COMPILER)
    compiler.chmod(compiler.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(compiler)


@pytest.fixture
def mock_project(temp_dir: str, fake_compiler: str, write_compile_db: Callable[[List[Dict[str, Any]]], str]) -> Dict[str, str]:
    """Create a two-file project with headers and a compilation database.

    Layout::

        <temp_dir>/src/main.c    -> inc/common.h, inc/main.h
        <temp_dir>/src/util.c    -> inc/common.h, inc/util.hpp
        <temp_dir>/build/        compiler working directory

    Scope: function
    Dependencies: temp_dir, fake_compiler, write_compile_db
    Use for: End-to-end pipeline tests

    Returns:
        Dictionary with 'db', 'root', 'src', 'inc' and 'build' paths
    """
    root = Path(temp_dir)
    src_dir = root / "src"
    inc_dir = root / "inc"
    build_dir = root / "build"
    for directory in (src_dir, inc_dir, build_dir):
        directory.mkdir(parents=True, exist_ok=True)

    for header in ("common.h", "main.h", "util.hpp"):
        (inc_dir / header).write_text("#pragma once\n")
    (src_dir / "main.c").write_text('#include "common.h"\n#include "main.h"\n')
    (src_dir / "util.c").write_text('#include "common.h"\n#include "util.hpp"\n')

    # Paths are relative to the build directory, the way compilers print them
    (src_dir / "main.c.deps").write_text("main.o: ../src/main.c \\\n  ../inc/common.h \\\n  ../inc/main.h \\\n  ../inc/missing.h\n")
    (src_dir / "util.c.deps").write_text("util.o: ../src/util.c \\\n  ../inc/util.hpp \\\n  ../inc/common.h \\\n  ../inc/missing.h\n")

    db_path = write_compile_db(
        [
            {"directory": str(build_dir), "command": f"{fake_compiler} -I../inc -c {src_dir}/main.c -o main.o", "file": str(src_dir / "main.c")},
            {"directory": str(build_dir), "arguments": [fake_compiler, "-I../inc", "-c", str(src_dir / "util.c"), "-o", "util.o"], "file": str(src_dir / "util.c")},
        ]
    )

    return {"db": db_path, "root": str(root), "src": str(src_dir), "inc": str(inc_dir), "build": str(build_dir)}
