# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Depth-limited exploration of nested subcommand help."""

from __future__ import annotations

import shlex
from collections.abc import Sequence

from ..config import DEFAULT_HELP_TIMEOUT, DEFAULT_MAX_DEPTH
from ..logging import ToolLogger, null_logger
from ..models import Command
from ..probes import ProbeRunner
from .builder import CommandNodeBuilder
from .extractor import TextExtractor


class SubcommandExplorer:
    """Re-run help probes for discovered commands to fill in their subtrees.

    The top-level tool is depth 0 and its commands are explored at depth 1.
    Exploration stops once ``max_depth`` is reached, so with the default of 2
    every top-level command is probed and its nested commands are recorded
    but never probed themselves.
    """

    def __init__(
        self,
        probes: ProbeRunner,
        extractor: TextExtractor,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        timeout: float = DEFAULT_HELP_TIMEOUT,
        logger: ToolLogger | None = None,
    ) -> None:
        """Initialise the explorer.

        Args:
            probes: Probe runner used for subcommand help.
            extractor: Extractor applied to every subcommand's help text.
            max_depth: Depth at which recursion stops.
            timeout: Per-probe timeout in seconds.
            logger: Logger receiving exploration diagnostics.
        """

        self._probes = probes
        self._extractor = extractor
        self._max_depth = max_depth
        self._timeout = timeout
        self._logger = logger or null_logger()

    @property
    def max_depth(self) -> int:
        """Return the configured recursion bound."""

        return self._max_depth

    def explore(
        self,
        invocation: Sequence[str],
        commands: Sequence[Command],
        depth: int = 1,
    ) -> tuple[Command, ...]:
        """Return ``commands`` with flags and subcommands filled in from help probes.

        Args:
            invocation: Executable path followed by the parent command names.
            commands: Commands discovered at this level.
            depth: Depth of ``commands`` below the tool.

        Returns:
            tuple[Command, ...]: Newly built commands in their original order.
            A command whose probe produced nothing is returned unchanged.
        """

        if depth >= self._max_depth:
            return tuple(commands)

        explored: list[Command] = []
        for command in commands:
            result = self._probes.subcommand_help(invocation, command.name, timeout=self._timeout)
            if not result.has_output:
                self._logger.debug(f"no help for command={shlex.join([*invocation, command.name])!r} depth={depth}")
                explored.append(command)
                continue

            node = CommandNodeBuilder.from_command(command)
            report = self._extractor.scan_help(result.output, commands=node.subcommands, flags=node.flags)
            self._logger.debug(
                f"explored command={command.name} depth={depth} "
                f"subcommands={report.commands_added} flags={report.flags_added}",
            )
            children = node.subcommands.build()
            if children:
                node.replace_subcommands(self.explore([*invocation, command.name], children, depth + 1))
            explored.append(node.build())
        return tuple(explored)


__all__ = ["SubcommandExplorer"]
