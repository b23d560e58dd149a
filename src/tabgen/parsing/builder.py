# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Builders that own command tree nodes until extraction finishes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..models import Command, Flag


class FlagListBuilder:
    """Collect flags in discovery order, discarding later duplicates by identity."""

    def __init__(self, initial: Iterable[Flag] = ()) -> None:
        """Seed the builder with ``initial`` flags.

        Args:
            initial: Flags already known for this sibling list.
        """

        self._flags: list[Flag] = []
        self._index: dict[str, int] = {}
        for flag in initial:
            self.add(flag)

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, identity: object) -> bool:
        return identity in self._index

    def add(self, flag: Flag) -> bool:
        """Append ``flag`` unless a flag with the same identity already exists.

        Returns:
            bool: ``True`` when the flag was added.
        """

        if flag.identity in self._index:
            return False
        self._index[flag.identity] = len(self._flags)
        self._flags.append(flag)
        return True

    def fill_description(self, identity: str, description: str) -> bool:
        """Set the description of ``identity`` when it does not have one yet.

        Args:
            identity: Identity key of a previously added flag.
            description: Text to record.

        Returns:
            bool: ``True`` when the stored flag was updated.
        """

        position = self._index.get(identity)
        if position is None or not description:
            return False
        current = self._flags[position]
        if current.description:
            return False
        self._flags[position] = current.model_copy(update={"description": description})
        return True

    def build(self) -> tuple[Flag, ...]:
        """Return the collected flags as an immutable tuple."""

        return tuple(self._flags)


class CommandListBuilder:
    """Collect commands in discovery order, discarding later duplicates by name."""

    def __init__(self, initial: Iterable[Command] = ()) -> None:
        self._commands: list[Command] = []
        self._names: set[str] = set()
        for command in initial:
            self.add(command)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def add(self, command: Command) -> bool:
        """Append ``command`` unless one with the same name already exists.

        Returns:
            bool: ``True`` when the command was added.
        """

        if command.name in self._names:
            return False
        self._names.add(command.name)
        self._commands.append(command)
        return True

    def build(self) -> tuple[Command, ...]:
        """Return the collected commands as an immutable tuple."""

        return tuple(self._commands)


@dataclass(slots=True)
class CommandNodeBuilder:
    """Exclusive, mutable owner of one command while its subtree is explored.

    Each traversal frame holds its own builder, so no finished
    :class:`~tabgen.models.Command` is ever mutated or shared between frames.
    """

    name: str
    aliases: tuple[str, ...] = ()
    description: str = ""
    subcommands: CommandListBuilder = field(default_factory=CommandListBuilder)
    flags: FlagListBuilder = field(default_factory=FlagListBuilder)

    @classmethod
    def from_command(cls, command: Command) -> CommandNodeBuilder:
        """Return a builder seeded with the contents of ``command``."""

        return cls(
            name=command.name,
            aliases=command.aliases,
            description=command.description,
            subcommands=CommandListBuilder(command.subcommands),
            flags=FlagListBuilder(command.flags),
        )

    def replace_subcommands(self, commands: Iterable[Command]) -> None:
        """Swap the collected subcommands for ``commands``, typically explored copies."""

        self.subcommands = CommandListBuilder(commands)

    def build(self) -> Command:
        """Return the finished, immutable command."""

        return Command(
            name=self.name,
            aliases=self.aliases,
            description=self.description,
            subcommands=self.subcommands.build(),
            flags=self.flags.build(),
        )


__all__ = ["CommandListBuilder", "CommandNodeBuilder", "FlagListBuilder"]
