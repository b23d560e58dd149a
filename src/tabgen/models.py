# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Immutable data models describing an extracted command-line tool."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .fingerprint import compute_fingerprint


class ToolSource(StrEnum):
    """Describe which documentation sources produced a :class:`Tool`."""

    NONE = "none"
    HELP = "help"
    MAN = "man"
    BOTH = "both"
    HELP_ONLY = "help-only"


class Flag(BaseModel):
    """Represent a single command-line flag and its optional argument."""

    model_config = ConfigDict(frozen=True)

    name: str
    short: str = ""
    arg: str = ""
    argument_values: tuple[str, ...] = Field(default_factory=tuple)
    description: str = ""
    required: bool = False

    @property
    def identity(self) -> str:
        """Return the key used to deduplicate flags within a sibling list.

        Returns:
            str: Long name, or the short name when no long name exists.
        """

        return self.name or self.short

    @property
    def spellings(self) -> tuple[str, ...]:
        """Return every spelling a user may type for this flag.

        Returns:
            tuple[str, ...]: Long name followed by the short name when present.
        """

        return tuple(token for token in (self.name, self.short) if token)


class Command(BaseModel):
    """Represent a command or subcommand together with the items it owns."""

    model_config = ConfigDict(frozen=True)

    name: str
    aliases: tuple[str, ...] = Field(default_factory=tuple)
    description: str = ""
    subcommands: tuple[Command, ...] = Field(default_factory=tuple)
    flags: tuple[Flag, ...] = Field(default_factory=tuple)

    @property
    def spellings(self) -> tuple[str, ...]:
        """Return the primary name followed by every alias."""

        return (self.name, *self.aliases)


class Tool(BaseModel):
    """Represent a parsed command-line tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    version: str = ""
    parsed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    source: ToolSource = ToolSource.NONE
    subcommands: tuple[Command, ...] = Field(default_factory=tuple)
    global_flags: tuple[Flag, ...] = Field(default_factory=tuple)

    def content_hash(self) -> str:
        """Return the content fingerprint of the extracted tree.

        Returns:
            str: Hex digest that ignores name, path, version, timestamp and source.
        """

        return compute_fingerprint(self.subcommands, self.global_flags)


def count_items(tool: Tool) -> tuple[int, int]:
    """Return the recursive ``(subcommands, flags)`` totals for ``tool``.

    Args:
        tool: Tool whose command tree should be counted.

    Returns:
        tuple[int, int]: Number of commands at every depth and number of flags
        across the global list and every command.
    """

    subcommands = 0
    flags = len(tool.global_flags)
    for command in tool.subcommands:
        nested_commands, nested_flags = _count_command_items(command)
        subcommands += 1 + nested_commands
        flags += nested_flags
    return subcommands, flags


def _count_command_items(command: Command) -> tuple[int, int]:
    subcommands = 0
    flags = len(command.flags)
    for child in command.subcommands:
        nested_commands, nested_flags = _count_command_items(child)
        subcommands += 1 + nested_commands
        flags += nested_flags
    return subcommands, flags


__all__ = ["Command", "Flag", "Tool", "ToolSource", "count_items"]
