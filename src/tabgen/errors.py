# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by extraction, generation and the CLI."""

from __future__ import annotations


class TabgenError(RuntimeError):
    """Base class for every error raised deliberately by tabgen."""


class ToolInputError(TabgenError):
    """Raised when a tool name or path is unusable before any probe runs."""


class ProbePermissionError(TabgenError):
    """Raised when the operating system refuses to execute a probe."""

    def __init__(self, command: str, cause: BaseException | str) -> None:
        """Initialise the error with the refused command and its cause.

        Args:
            command: Human readable command line that was refused.
            cause: Underlying exception or message describing the refusal.
        """

        super().__init__(f"cannot run {command}: {cause}")
        self.command = command
        self.cause = cause


class GenerationError(TabgenError):
    """Raised when a tool record or completion script cannot be persisted."""

    def __init__(self, tool: str, message: str) -> None:
        """Initialise the error for ``tool``.

        Args:
            tool: Name of the tool whose output could not be written.
            message: Description of the failed write.
        """

        super().__init__(message)
        self.tool = tool


class ConfigError(ValueError):
    """Raised when configuration data cannot be loaded or validated."""


__all__ = [
    "ConfigError",
    "GenerationError",
    "ProbePermissionError",
    "TabgenError",
    "ToolInputError",
]
