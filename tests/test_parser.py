# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for tool parsing: input validation, probes and source tagging."""

from __future__ import annotations

from io import StringIO
from pathlib import Path

import pytest

from tabgen.config import ExtractionConfig
from tabgen.errors import ProbePermissionError, ToolInputError
from tabgen.logging import ToolLogger
from tabgen.models import ToolSource
from tabgen.parsing.parser import ToolParser, resolve_source, validate_tool_input

HELP = """\
Usage: demo [options] <command>

Commands:
  build, b   Build the project
  serve      Run the server

Options:
  -o, --output <file>      Output file
  --format=json|yaml       Output format
"""

MAN = """\
OPTIONS
       --debug
              Enable debugging.
"""


def test_validation_messages(tmp_path: Path) -> None:
    plain = tmp_path / "plain"
    plain.write_text("data", encoding="utf-8")
    plain.chmod(0o644)

    with pytest.raises(ToolInputError, match="name cannot be empty"):
        validate_tool_input("", str(plain))
    with pytest.raises(ToolInputError, match="path cannot be empty"):
        validate_tool_input("demo", "")
    with pytest.raises(ToolInputError, match="path does not exist"):
        validate_tool_input("demo", str(tmp_path / "missing"))
    with pytest.raises(ToolInputError, match="invalid path"):
        validate_tool_input("demo", "/bin/ls\x00")
    with pytest.raises(ToolInputError, match="path is a directory, not an executable"):
        validate_tool_input("demo", str(tmp_path))
    with pytest.raises(ToolInputError, match="path is not executable"):
        validate_tool_input("demo", str(plain))


def test_invalid_input_runs_no_probe(fake_runner, tmp_path: Path) -> None:
    with pytest.raises(ToolInputError):
        ToolParser(runner=fake_runner).parse("demo", str(tmp_path / "missing"))

    assert fake_runner.calls == []


@pytest.mark.parametrize(
    ("has_help", "has_man", "denied", "source"),
    [
        (True, True, False, ToolSource.BOTH),
        (True, False, False, ToolSource.HELP),
        (False, True, False, ToolSource.MAN),
        (True, False, True, ToolSource.HELP_ONLY),
        (False, False, True, ToolSource.NONE),
        (False, False, False, ToolSource.NONE),
    ],
)
def test_resolve_source(has_help: bool, has_man: bool, denied: bool, source: ToolSource) -> None:
    assert resolve_source(has_help=has_help, has_man=has_man, man_denied=denied) is source


def test_parse_full_tool(fake_runner, executable: Path, logger: ToolLogger, log_buffer: StringIO) -> None:
    path = str(executable)
    fake_runner.add([path, "--version"], "demo version 1.4.0\n")
    fake_runner.add([path, "--help"], HELP)
    fake_runner.add(["man", "demo"], MAN)
    fake_runner.add([path, "build", "--help"], "Options:\n  --release  Optimised build\n")

    tool = ToolParser(runner=fake_runner, logger=logger).parse("demo", path)

    assert tool.name == "demo"
    assert tool.version == "1.4.0"
    assert tool.source is ToolSource.BOTH
    assert [command.name for command in tool.subcommands] == ["build", "serve"]
    assert tool.subcommands[0].aliases == ("b",)
    assert [flag.name for flag in tool.subcommands[0].flags] == ["--release"]
    assert [flag.name for flag in tool.global_flags] == ["--output", "--format", "--debug"]
    output = log_buffer.getvalue()
    assert "Parsing demo" in output
    assert "detected version='1.4.0'" in output


def test_quick_mode_skips_man_and_exploration(fake_runner, executable: Path) -> None:
    path = str(executable)
    fake_runner.add([path, "--help"], HELP)

    tool = ToolParser(ExtractionConfig(quick=True), runner=fake_runner).parse("demo", path)

    assert tool.source is ToolSource.HELP
    assert [command.name for command in tool.subcommands] == ["build", "serve"]
    assert all(call[0] != "man" for call in fake_runner.calls)
    assert all("build" not in call for call in fake_runner.calls)


def test_man_permission_denied_tags_help_only(fake_runner, executable: Path) -> None:
    path = str(executable)
    fake_runner.add([path, "--help"], "Options:\n  --all  Everything\n")
    fake_runner.fail(["man", "demo"], PermissionError("Permission denied"))

    tool = ToolParser(runner=fake_runner).parse("demo", path)

    assert tool.source is ToolSource.HELP_ONLY
    assert [flag.name for flag in tool.global_flags] == ["--all"]


def test_help_permission_denied_is_raised(fake_runner, executable: Path) -> None:
    path = str(executable)
    fake_runner.fail([path, "--help"], PermissionError("Permission denied"))

    with pytest.raises(ProbePermissionError):
        ToolParser(runner=fake_runner).parse("demo", path)


def test_no_documentation_yields_source_none(fake_runner, executable: Path) -> None:
    tool = ToolParser(runner=fake_runner).parse("demo", str(executable))

    assert tool.source is ToolSource.NONE
    assert tool.subcommands == ()
    assert tool.global_flags == ()
    assert tool.version == ""
