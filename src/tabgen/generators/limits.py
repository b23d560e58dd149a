# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Size and complexity guards applied around script generation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Final

from ..config import GenerationLimits
from ..models import Command, Tool, count_items

TRUNCATION_MARKER: Final[str] = "\n# WARNING: Script truncated due to size limits\n"


@dataclass(frozen=True, slots=True)
class GenerateResult:
    """Generated script together with any truncation warnings."""

    script: str
    warnings: tuple[str, ...] = field(default_factory=tuple)


def truncate_tool(tool: Tool, limits: GenerationLimits | None = None) -> tuple[Tool, list[str]]:
    """Return ``tool`` trimmed to ``limits`` plus a warning per truncation.

    Truncation is only attempted when the recursive subcommand count, the
    global flag count or the total item count exceeds its cap. The global
    flags, the top-level commands and every command's own flag list are then
    cut to their caps.

    Args:
        tool: Tool to check.
        limits: Caps to enforce; defaults apply when omitted.

    Returns:
        tuple[Tool, list[str]]: The original tool when it is within limits,
        otherwise a truncated copy, and the warnings describing each cut.
    """

    limits = limits or GenerationLimits()
    subcommand_total, flag_total = count_items(tool)
    needs_truncation = (
        subcommand_total > limits.max_subcommands
        or len(tool.global_flags) > limits.max_flags
        or subcommand_total + flag_total > limits.max_total_items
    )
    if not needs_truncation:
        return tool, []

    warnings: list[str] = []
    global_flags = tool.global_flags
    if len(global_flags) > limits.max_flags:
        warnings.append(f"truncated global flags from {len(global_flags)} to {limits.max_flags}")
        global_flags = global_flags[: limits.max_flags]

    subcommands = tool.subcommands
    if len(subcommands) > limits.max_subcommands:
        warnings.append(f"truncated subcommands from {len(subcommands)} to {limits.max_subcommands}")
        subcommands = subcommands[: limits.max_subcommands]
    subcommands = _truncate_command_flags(subcommands, limits.max_flags, warnings)

    truncated = tool.model_copy(update={"global_flags": global_flags, "subcommands": subcommands})
    final_subcommands, final_flags = count_items(truncated)
    if final_subcommands + final_flags > limits.max_total_items:
        warnings.append(
            f"tool still has {final_subcommands + final_flags} items after truncation (max {limits.max_total_items})",
        )
    return truncated, warnings


def _truncate_command_flags(
    commands: Sequence[Command],
    max_flags: int,
    warnings: list[str],
) -> tuple[Command, ...]:
    result: list[Command] = []
    for command in commands:
        update: dict[str, object] = {}
        if len(command.flags) > max_flags:
            warnings.append(f"truncated flags for '{command.name}' from {len(command.flags)} to {max_flags}")
            update["flags"] = command.flags[:max_flags]
        if command.subcommands:
            update["subcommands"] = _truncate_command_flags(command.subcommands, max_flags, warnings)
        result.append(command.model_copy(update=update) if update else command)
    return tuple(result)


def check_output_size(script: str, tool_name: str, max_output_size: int) -> tuple[str, list[str]]:
    """Cut ``script`` when its UTF-8 size exceeds ``max_output_size`` bytes.

    The cut lands on the last line boundary at or after the halfway point when
    one exists, and :data:`TRUNCATION_MARKER` is appended.

    Args:
        script: Generated completion script.
        tool_name: Tool the script belongs to, used in the warning.
        max_output_size: Byte cap.

    Returns:
        tuple[str, list[str]]: Possibly truncated script and its warnings.
    """

    encoded = script.encode("utf-8")
    if len(encoded) <= max_output_size:
        return script, []

    warning = (
        f"generated script for '{tool_name}' exceeds {max_output_size} bytes "
        f"({len(encoded)} bytes), truncating"
    )
    head = encoded[:max_output_size]
    newline = head.rfind(b"\n")
    if newline >= max_output_size // 2:
        head = head[: newline + 1]
    return head.decode("utf-8", errors="ignore") + TRUNCATION_MARKER, [warning]


__all__ = ["GenerateResult", "TRUNCATION_MARKER", "check_output_size", "truncate_tool"]
