# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bash completion script generator."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import ClassVar, Final

from ..config import ShellKind
from ..models import Command, Flag, Tool
from .escaping import escape_pattern, escape_string_literal, quote_single, sanitize_identifier

_INDENT: Final[str] = "    "
OFFER_FUNCTION: Final[str] = "__tabgen_offer"


@dataclass(frozen=True, slots=True)
class _Level:
    """One dispatch level: the canonical command path and what it offers."""

    path: tuple[str, ...]
    commands: tuple[Command, ...]
    flags: tuple[Flag, ...]


def bash_function_name(tool_name: str) -> str:
    """Return the completion function name for ``tool_name``."""

    return sanitize_identifier(tool_name)


def collect_flag_words(flags: Iterable[Flag]) -> list[str]:
    """Return every spelling of ``flags``: long name first, then the short name."""

    words: list[str] = []
    for flag in flags:
        words.extend(flag.spellings)
    return words


def shell_words(words: Iterable[str]) -> str:
    """Return ``words`` as single-quoted shell words, immune to any expansion."""

    return " ".join(f"'{quote_single(word)}'" for word in words)


def _offer(*parts: str) -> str:
    return " ".join((OFFER_FUNCTION, '"$cur"', *filter(None, parts)))


def flag_value_cases(flags: Sequence[Flag], depth: int = 1) -> list[str]:
    """Return a ``case "$prev"`` block offering each flag's argument choices.

    Args:
        flags: Flags in scope at this level.
        depth: Indentation depth of the ``case`` keyword.

    Returns:
        list[str]: Script lines, empty when no flag has argument choices.
    """

    pad = _INDENT * depth
    lines: list[str] = []
    for flag in flags:
        if not flag.argument_values:
            continue
        labels = "|".join(escape_pattern(spelling) for spelling in flag.spellings)
        lines.extend(
            [
                f"{pad}{_INDENT}{labels})",
                f"{pad}{_INDENT * 2}{_offer(shell_words(flag.argument_values))}",
                f"{pad}{_INDENT * 2}return 0",
                f"{pad}{_INDENT * 2};;",
            ],
        )
    if not lines:
        return []
    return [f'{pad}case "$prev" in', *lines, f"{pad}esac"]


def _walk(commands: Sequence[Command], parent: tuple[str, ...]) -> Iterator[_Level]:
    for command in commands:
        path = (*parent, command.name)
        yield _Level(path=path, commands=command.subcommands, flags=command.flags)
        yield from _walk(command.subcommands, path)


def _path_resolution(commands: Sequence[Command], parent: tuple[str, ...] = ()) -> Iterator[str]:
    """Yield ``case`` arms mapping every typed spelling to its canonical path."""

    for command in commands:
        canonical = " ".join((*parent, command.name))
        labels = "|".join(escape_pattern(" ".join((*parent, spelling))) for spelling in command.spellings)
        yield f'{_INDENT * 3}{labels}) cmd_path="{escape_string_literal(canonical)}" ;;'
        yield from _path_resolution(command.subcommands, (*parent, command.name))


class BashGenerator:
    """Render a bash completion function for a :class:`~tabgen.models.Tool`."""

    shell: ClassVar[ShellKind] = ShellKind.BASH

    def generate(self, tool: Tool) -> str:
        """Return the bash completion script for ``tool``.

        The script resolves the command path typed so far, completes argument
        choices for the previous word, and otherwise offers flags or
        subcommands for the resolved level. Every extracted word is emitted
        single-quoted and matched against ``$cur`` by a helper, so nothing
        taken from help text is ever expanded. Registration keeps bash's
        default and readline fallbacks so unknown positions still complete
        files.
        """

        func = bash_function_name(tool.name)
        lines: list[str] = [f"# Bash completion for {escape_string_literal(tool.name)}"]
        if tool.version:
            lines.append(f"# Tool version: {escape_string_literal(tool.version)}")
        lines.extend(["# Generated by tabgen", ""])
        lines.extend(self._offer_function())
        lines.extend([f"{func}() {{"])
        lines.extend(self._preamble())
        lines.extend(self._resolve_path(tool))
        lines.append("")
        lines.extend(flag_value_cases(tool.global_flags))
        lines.append(f"{_INDENT}local -a global_flags=({shell_words(collect_flag_words(tool.global_flags))})")
        lines.append(f'{_INDENT}case "$cmd_path" in')
        root = _Level(path=(), commands=tool.subcommands, flags=())
        for level in (root, *_walk(tool.subcommands, ())):
            lines.extend(self._level_arm(level))
        lines.extend(
            [
                f"{_INDENT}esac",
                f"{_INDENT}return 0",
                "}",
                "",
                f'complete -o default -o bashdefault -F {func} "{escape_string_literal(tool.name)}"',
                "",
            ],
        )
        return "\n".join(lines)

    @staticmethod
    def _offer_function() -> list[str]:
        return [
            f"{OFFER_FUNCTION}() {{",
            f'{_INDENT}local cur="$1" word',
            f"{_INDENT}shift",
            f"{_INDENT}COMPREPLY=()",
            f'{_INDENT}for word in "$@"; do',
            f'{_INDENT * 2}[[ "$word" == "$cur"* ]] && COMPREPLY+=("$word")',
            f"{_INDENT}done",
            f"{_INDENT}return 0",
            "}",
            "",
        ]

    @staticmethod
    def _preamble() -> list[str]:
        return [
            f"{_INDENT}local cur prev words cword",
            f"{_INDENT}if declare -F _init_completion >/dev/null 2>&1; then",
            f"{_INDENT * 2}_init_completion || return",
            f"{_INDENT}else",
            f"{_INDENT * 2}COMPREPLY=()",
            f'{_INDENT * 2}cur="${{COMP_WORDS[COMP_CWORD]}}"',
            f'{_INDENT * 2}prev="${{COMP_WORDS[COMP_CWORD-1]}}"',
            f'{_INDENT * 2}words=("${{COMP_WORDS[@]}}")',
            f"{_INDENT * 2}cword=$COMP_CWORD",
            f"{_INDENT}fi",
            "",
        ]

    @staticmethod
    def _resolve_path(tool: Tool) -> list[str]:
        lines = [f'{_INDENT}local cmd_path="" word i']
        arms = list(_path_resolution(tool.subcommands))
        if not arms:
            return lines
        lines.extend(
            [
                f"{_INDENT}for ((i = 1; i < cword; i++)); do",
                f'{_INDENT * 2}word="${{words[i]}}"',
                f'{_INDENT * 2}[[ "$word" == -* ]] && continue',
                f'{_INDENT * 2}case "${{cmd_path:+$cmd_path }}$word" in',
                *arms,
                f"{_INDENT * 2}esac",
                f"{_INDENT}done",
            ],
        )
        return lines

    @staticmethod
    def _level_arm(level: _Level) -> list[str]:
        label = escape_pattern(" ".join(level.path)) if level.path else '""'
        pad = _INDENT * 3
        offer_flags = _offer(shell_words(collect_flag_words(level.flags)), '"${global_flags[@]}"')
        lines = [f"{_INDENT * 2}{label})"]
        lines.extend(flag_value_cases(level.flags, depth=3))
        lines.extend([f'{pad}if [[ "$cur" == -* ]]; then', f"{pad}{_INDENT}{offer_flags}"])
        if level.commands:
            names = shell_words(command.name for command in level.commands)
            lines.extend([f"{pad}else", f"{pad}{_INDENT}{_offer(names)}"])
        lines.extend([f"{pad}fi", f"{pad};;"])
        return lines


__all__ = [
    "BashGenerator",
    "OFFER_FUNCTION",
    "bash_function_name",
    "collect_flag_words",
    "flag_value_cases",
    "shell_words",
]
