# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for generation size and complexity guards."""

from __future__ import annotations

from io import StringIO

from tabgen.config import GenerationLimits
from tabgen.generators import BashGenerator, generate_completion
from tabgen.generators.limits import TRUNCATION_MARKER, check_output_size, truncate_tool
from tabgen.logging import ToolLogger
from tabgen.models import Command, Flag, Tool


def _tool(commands: int = 0, flags: int = 0, command_flags: int = 0) -> Tool:
    return Tool(
        name="big",
        path="/bin/big",
        subcommands=tuple(
            Command(name=f"cmd{index}", flags=tuple(Flag(name=f"--c{n}") for n in range(command_flags)))
            for index in range(commands)
        ),
        global_flags=tuple(Flag(name=f"--flag{index}") for index in range(flags)),
    )


def test_within_limits_returns_same_tool() -> None:
    tool = _tool(commands=3, flags=3)

    trimmed, warnings = truncate_tool(tool, GenerationLimits())

    assert trimmed is tool
    assert warnings == []


def test_subcommands_truncated_to_cap() -> None:
    limits = GenerationLimits(max_subcommands=500, max_total_items=10_000)

    trimmed, warnings = truncate_tool(_tool(commands=501), limits)

    assert len(trimmed.subcommands) == 500
    assert warnings == ["truncated subcommands from 501 to 500"]


def test_global_and_command_flags_truncated() -> None:
    limits = GenerationLimits(max_flags=2, max_total_items=10_000)

    trimmed, warnings = truncate_tool(_tool(commands=1, flags=3, command_flags=4), limits)

    assert len(trimmed.global_flags) == 2
    assert len(trimmed.subcommands[0].flags) == 2
    assert warnings == [
        "truncated global flags from 3 to 2",
        "truncated flags for 'cmd0' from 4 to 2",
    ]


def test_total_item_overflow_is_reported() -> None:
    limits = GenerationLimits(max_total_items=5)

    _, warnings = truncate_tool(_tool(commands=3, command_flags=2), limits)

    assert warnings == ["tool still has 9 items after truncation (max 5)"]


def test_output_cut_at_line_boundary() -> None:
    script = "".join(f"line {index:03d}\n" for index in range(50))

    cut, warnings = check_output_size(script, "big", 100)

    assert cut.endswith(TRUNCATION_MARKER)
    body = cut.removesuffix(TRUNCATION_MARKER)
    assert body.endswith("\n")
    assert len(body.encode()) <= 100
    assert len(warnings) == 1
    assert "exceeds 100 bytes" in warnings[0]


def test_output_without_late_newline_is_cut_hard() -> None:
    script = "x" * 300

    cut, _ = check_output_size(script, "big", 100)

    assert cut == "x" * 100 + TRUNCATION_MARKER


def test_output_under_limit_untouched() -> None:
    assert check_output_size("ok\n", "big", 100) == ("ok\n", [])


def test_generate_completion_logs_warnings(logger: ToolLogger, log_buffer: StringIO) -> None:
    limits = GenerationLimits(max_subcommands=1, max_total_items=10_000)

    result = generate_completion(BashGenerator(), _tool(commands=2), limits, logger=logger)

    assert result.warnings == ("truncated subcommands from 2 to 1",)
    assert "cmd1" not in result.script
    assert "big (bash): truncated subcommands from 2 to 1" in log_buffer.getvalue()
