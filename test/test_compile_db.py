"""Tests for compilation database loading and deduplication."""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

from deplist.compile_db import CompilationEntry, deduplicate_entries, load_compilation_database
from deplist.constants import ConfigError, EXIT_INVALID_ARGS


class TestLoadCompilationDatabase:
    """Test load_compilation_database()."""

    @pytest.mark.unit
    def test_loads_command_and_arguments_entries(self, write_compile_db: Callable[[List[Dict[str, Any]]], str]) -> None:
        """Both 'command' and 'arguments' styles are accepted."""
        db_path = write_compile_db(
            [
                {"directory": "/build", "command": "cc -c a.c -o a.o", "file": "a.c"},
                {"directory": "/build", "arguments": ["cc", "-c", "b.c"], "file": "b.c", "output": "b.o"},
            ]
        )

        entries = load_compilation_database(db_path)

        assert entries == [
            CompilationEntry(directory="/build", file="a.c", command="cc -c a.c -o a.o"),
            CompilationEntry(directory="/build", file="b.c", arguments=("cc", "-c", "b.c")),
        ]

    @pytest.mark.unit
    def test_entry_without_command_is_loaded(self, write_compile_db: Callable[[List[Dict[str, Any]]], str]) -> None:
        """Missing command data is reported later, per entry, not as a config error."""
        db_path = write_compile_db([{"directory": "/build", "file": "a.c"}])

        entries = load_compilation_database(db_path)

        assert entries[0].command is None
        assert entries[0].arguments is None

    @pytest.mark.unit
    def test_relative_directory_anchored_to_database(self, temp_dir: str, write_compile_db: Callable[[List[Dict[str, Any]]], str]) -> None:
        """A relative 'directory' is resolved against the database location."""
        db_path = write_compile_db([{"directory": "build", "command": "cc -c a.c", "file": "a.c"}])

        entries = load_compilation_database(db_path)

        assert entries[0].directory == str(Path(temp_dir) / "build")

    @pytest.mark.unit
    def test_missing_file_raises_config_error(self, temp_dir: str) -> None:
        """An unreadable database is a configuration error."""
        with pytest.raises(ConfigError, match="Failed to read") as exc_info:
            load_compilation_database(str(Path(temp_dir) / "does_not_exist.json"))

        assert exc_info.value.exit_code == EXIT_INVALID_ARGS

    @pytest.mark.unit
    def test_invalid_json_raises_config_error(self, temp_dir: str) -> None:
        """Content that is not JSON is a configuration error."""
        db_path = Path(temp_dir) / "compile_commands.json"
        db_path.write_text("[{not json")

        with pytest.raises(ConfigError, match="Failed to parse"):
            load_compilation_database(str(db_path))

    @pytest.mark.unit
    def test_non_utf8_raises_config_error(self, temp_dir: str) -> None:
        """Content that is not UTF-8 is a configuration error."""
        db_path = Path(temp_dir) / "compile_commands.json"
        db_path.write_bytes(b'[{"directory": "\xff\xfe", "file": "a.c"}]')

        with pytest.raises(ConfigError):
            load_compilation_database(str(db_path))

    @pytest.mark.unit
    def test_empty_database_raises_config_error(self, write_compile_db: Callable[[List[Dict[str, Any]]], str]) -> None:
        """An empty database is a usage error, not an empty result."""
        db_path = write_compile_db([])

        with pytest.raises(ConfigError, match="contains no entries"):
            load_compilation_database(db_path)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "content",
        [
            {"directory": "/build", "file": "a.c"},
            ["not an object"],
            [{"file": "a.c", "command": "cc"}],
            [{"directory": "/build", "command": "cc"}],
            [{"directory": "/build", "file": "a.c", "command": ["cc"]}],
            [{"directory": "/build", "file": "a.c", "arguments": "cc -c a.c"}],
            [{"directory": "/build", "file": "a.c", "arguments": ["cc", 1]}],
        ],
    )
    def test_schema_violations_raise_config_error(self, content: Any, write_compile_db: Callable[[Any], str]) -> None:
        """Structures that cannot describe an invocation are rejected."""
        db_path = write_compile_db(content)

        with pytest.raises(ConfigError):
            load_compilation_database(db_path)


class TestDeduplicateEntries:
    """Test deduplicate_entries()."""

    @pytest.mark.unit
    def test_keeps_first_entry_per_file(self) -> None:
        """The first entry of every file survives, in input order."""
        debug_a = CompilationEntry(directory="/debug", file="a.c", command="cc -g -c a.c")
        release_a = CompilationEntry(directory="/release", file="a.c", command="cc -O2 -c a.c")
        entry_b = CompilationEntry(directory="/debug", file="b.c", command="cc -c b.c")
        third_a = CompilationEntry(directory="/other", file="a.c", arguments=("cc", "-c", "a.c"))

        result = deduplicate_entries([debug_a, entry_b, release_a, third_a])

        assert result == [debug_a, entry_b]

    @pytest.mark.unit
    def test_logs_warning_for_each_duplicate(self, caplog: pytest.LogCaptureFixture) -> None:
        """Every discarded entry is named in a warning."""
        entries = [
            CompilationEntry(directory="/debug", file="a.c", command="cc -g -c a.c"),
            CompilationEntry(directory="/release", file="a.c", command="cc -O2 -c a.c"),
            CompilationEntry(directory="/other", file="a.c", arguments=("cc", "-c", "a.c")),
        ]

        with caplog.at_level(logging.WARNING, logger="deplist.compile_db"):
            deduplicate_entries(entries)

        warnings = [record.getMessage() for record in caplog.records if record.levelno == logging.WARNING]
        assert len(warnings) == 2
        assert "cc -O2 -c a.c" in warnings[0]
        assert "'cc', '-c', 'a.c'" in warnings[1]
        assert all("file=a.c" in warning for warning in warnings)

    @pytest.mark.unit
    def test_unique_entries_unchanged(self) -> None:
        """Without duplicates the sequence is returned as is."""
        entries = [CompilationEntry(directory="/b", file=f"{name}.c", command=f"cc -c {name}.c") for name in "abc"]

        assert deduplicate_entries(entries) == entries
