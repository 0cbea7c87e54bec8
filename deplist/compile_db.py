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
"""Reading and deduplicating compile_commands.json compilation databases."""

import os
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from deplist.constants import ConfigError

logger = logging.getLogger(__name__)

__all__ = ["CompilationEntry", "load_compilation_database", "deduplicate_entries"]


@dataclass(frozen=True)
class CompilationEntry:
    """One translation unit from the compilation database.

    Attributes:
        directory: Working directory the compiler runs in
        file: Compiled source file, used as the deduplication key
        command: Raw shell-quoted command line, if the database provides one
        arguments: Pre-split argument vector, if the database provides one
    """

    directory: str
    file: str
    command: Optional[str] = None
    arguments: Optional[Tuple[str, ...]] = None


def _require_string(item: Dict[str, Any], key: str, index: int) -> str:
    value = item.get(key)
    if not isinstance(value, str):
        raise ConfigError(f"Entry {index} of compilation database has no valid '{key}' field")
    return value


def _parse_entry(item: Any, index: int, base_dir: str) -> CompilationEntry:
    """Convert one JSON object into a CompilationEntry.

    Args:
        item: Deserialized JSON value of the entry
        index: Position of the entry, used in error messages
        base_dir: Directory of the database file, anchors a relative 'directory'

    Returns:
        Parsed entry

    Raises:
        ConfigError: If the entry does not match the expected schema
    """
    if not isinstance(item, dict):
        raise ConfigError(f"Entry {index} of compilation database is not an object")

    directory = _require_string(item, "directory", index)
    file_path = _require_string(item, "file", index)
    if not os.path.isabs(directory):
        directory = os.path.normpath(os.path.join(base_dir, directory))

    command = item.get("command")
    if command is not None and not isinstance(command, str):
        raise ConfigError(f"Entry {index} of compilation database has a non-string 'command'")

    arguments = item.get("arguments")
    if arguments is not None:
        if not isinstance(arguments, list) or not all(isinstance(arg, str) for arg in arguments):
            raise ConfigError(f"Entry {index} of compilation database has invalid 'arguments' (expected a list of strings)")
        arguments = tuple(arguments)

    return CompilationEntry(directory=directory, file=file_path, command=command, arguments=arguments)


def load_compilation_database(database_path: str) -> List[CompilationEntry]:
    """Load all entries from a compile_commands.json file.

    The file is read completely as UTF-8 and must contain a non-empty JSON
    array of objects with 'directory', 'file' and 'command' or 'arguments'.
    Whether 'command'/'arguments' are present is checked later, per entry,
    so that one broken entry does not prevent listing the others.

    Args:
        database_path: Path to compile_commands.json

    Returns:
        Entries in database order

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, does not
            match the schema, or contains no entries
    """
    try:
        with open(database_path, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read compilation database '{database_path}': {e}") from e

    try:
        raw_entries = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse compilation database '{database_path}': {e}") from e

    if not isinstance(raw_entries, list):
        raise ConfigError(f"Compilation database '{database_path}' must contain a JSON array")

    base_dir = os.path.dirname(os.path.abspath(database_path))
    entries = [_parse_entry(item, index, base_dir) for index, item in enumerate(raw_entries)]

    if not entries:
        raise ConfigError(f"Compilation database '{database_path}' contains no entries")

    logger.debug("Loaded %d entries from %s", len(entries), database_path)
    return entries


def deduplicate_entries(entries: List[CompilationEntry]) -> List[CompilationEntry]:
    """Keep only the first entry for every source file.

    Databases sometimes list several build variants (debug/release) of the
    same file; one dependency walk per file is enough.

    Args:
        entries: Entries in database order

    Returns:
        Entries with unique 'file' values, first occurrence wins, order preserved
    """
    seen_files: Set[str] = set()
    unique_entries: List[CompilationEntry] = []

    for entry in entries:
        if entry.file in seen_files:
            logger.warning(
                "Another command for same file. Skip: file=%s, arguments=%s, command=%s",
                entry.file,
                list(entry.arguments) if entry.arguments is not None else None,
                entry.command,
            )
            continue
        seen_files.add(entry.file)
        unique_entries.append(entry)

    if len(unique_entries) != len(entries):
        logger.info("Skipped %d duplicate entries", len(entries) - len(unique_entries))

    return unique_entries
