# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shell completion script generators and their shared guards."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final, Protocol

from ..config import GenerationLimits, ShellKind
from ..logging import ToolLogger
from ..models import Tool
from .bash import BashGenerator
from .limits import GenerateResult, check_output_size, truncate_tool
from .zsh import ZshGenerator


class CompletionGenerator(Protocol):
    """Pure transformation from a tool to a shell-specific script."""

    shell: ShellKind

    def generate(self, tool: Tool) -> str:
        """Return the completion script for ``tool``."""
        ...


GENERATORS: Final[Mapping[ShellKind, type[CompletionGenerator]]] = {
    ShellKind.BASH: BashGenerator,
    ShellKind.ZSH: ZshGenerator,
}


def get_generator(shell: ShellKind | str) -> CompletionGenerator:
    """Return a fresh generator for ``shell``.

    Raises:
        ValueError: If ``shell`` is not a supported shell.
    """

    try:
        kind = ShellKind(shell)
    except ValueError as exc:
        supported = ", ".join(kind.value for kind in ShellKind)
        raise ValueError(f"unsupported shell '{shell}' (supported: {supported})") from exc
    return GENERATORS[kind]()


def generate_completion(
    generator: CompletionGenerator,
    tool: Tool,
    limits: GenerationLimits | None = None,
    *,
    logger: ToolLogger | None = None,
) -> GenerateResult:
    """Run the size guards around ``generator`` for ``tool``.

    Args:
        generator: Shell generator to apply.
        tool: Extracted tool.
        limits: Size and complexity caps.
        logger: Optional logger receiving one warning per truncation.

    Returns:
        GenerateResult: Final script and every truncation warning.
    """

    limits = limits or GenerationLimits()
    trimmed, warnings = truncate_tool(tool, limits)
    script, size_warnings = check_output_size(generator.generate(trimmed), tool.name, limits.max_output_size)
    warnings.extend(size_warnings)
    if logger is not None:
        for warning in warnings:
            logger.warn(f"{tool.name} ({generator.shell}): {warning}")
    return GenerateResult(script=script, warnings=tuple(warnings))


__all__ = [
    "BashGenerator",
    "CompletionGenerator",
    "GENERATORS",
    "GenerateResult",
    "ZshGenerator",
    "generate_completion",
    "get_generator",
]
