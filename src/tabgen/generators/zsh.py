# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Zsh completion script generator."""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar, Final

from ..config import ShellKind
from ..models import Command, Flag, Tool
from .escaping import (
    collapse_whitespace,
    escape_pattern,
    escape_string_literal,
    escape_zsh,
    escape_zsh_describe,
    escape_zsh_value,
    quote_single,
    sanitize_identifier,
)

_INDENT: Final[str] = "    "
_CONTINUATION: Final[str] = " \\"
_DEFAULT_VALUE_LABEL: Final[str] = "value"


def zsh_function_name(tool_name: str) -> str:
    """Return the completion function name for ``tool_name``."""

    return sanitize_identifier(tool_name)


def format_arg_completion(flag: Flag) -> str:
    """Return the argument part of an ``_arguments`` spec, closing quote included.

    Returns:
        str: ``:label:(a b)'`` when choices exist, ``:label:'`` for a free
        argument, and ``""`` for a flag that takes no argument.
    """

    if flag.argument_values:
        label = escape_zsh(flag.arg or _DEFAULT_VALUE_LABEL)
        values = " ".join(escape_zsh_value(value) for value in flag.argument_values)
        return f":{label}:({values})'"
    if flag.arg:
        return f":{escape_zsh(flag.arg)}:'"
    return ""


def format_flag_specs(flag: Flag) -> list[str]:
    """Return one single-quoted ``_arguments`` spec per spelling of ``flag``.

    Spellings of the same flag exclude each other once one has been typed.
    """

    spellings = flag.spellings
    exclusion = f"({' '.join(escape_zsh(spelling) for spelling in spellings)})" if len(spellings) > 1 else ""
    description = f"[{escape_zsh(flag.description)}]" if flag.description else ""
    tail = format_arg_completion(flag) or "'"
    return [f"'{exclusion}{escape_zsh(spelling)}{description}{tail}" for spelling in spellings]


def _child_function_name(parent: str, command_name: str, used: set[str]) -> str:
    candidate = sanitize_identifier(command_name, prefix=f"{parent}_")
    name = candidate
    suffix = 2
    while name in used:
        name = f"{candidate}_{suffix}"
        suffix += 1
    used.add(name)
    return name


class ZshGenerator:
    """Render a zsh ``#compdef`` script for a :class:`~tabgen.models.Tool`."""

    shell: ClassVar[ShellKind] = ShellKind.ZSH

    def generate(self, tool: Tool) -> str:
        """Return the zsh completion script for ``tool``.

        Global flag specs are stored once in an array shared by every level.
        Each command with its own subtree gets a dedicated function that
        dispatches one level further down. Unknown positions fall back to
        ``_default`` so files and other stock completions still work.
        """

        base = zsh_function_name(tool.name)
        globals_array = f"{base}_global_flags"
        used: set[str] = {base}
        functions: list[list[str]] = []

        root = self._dispatch_function(
            base,
            label=tool.name,
            commands=tool.subcommands,
            flags=(),
            globals_array=globals_array,
            used=used,
            functions=functions,
        )

        literal_name = escape_string_literal(tool.name)
        lines: list[str] = [
            f"#compdef {escape_pattern(tool.name)}",
            f"# Zsh completion for {literal_name}",
        ]
        if tool.version:
            lines.append(f"# Tool version: {escape_string_literal(tool.version)}")
        lines.extend(["# Generated by tabgen", ""])
        lines.append(f"{globals_array}=(")
        for flag in tool.global_flags:
            lines.extend(f"{_INDENT}{spec}" for spec in format_flag_specs(flag))
        lines.extend([")", ""])
        for function in functions:
            lines.extend(function)
            lines.append("")
        lines.extend(root)
        lines.extend(
            [
                "",
                f'if [[ "$funcstack[1]" == "_{literal_name}" ]]; then',
                f'{_INDENT}{base} "$@"',
                "elif (( $+functions[compdef] )); then",
                f'{_INDENT}compdef {base} "{literal_name}"',
                "fi",
                "",
            ],
        )
        return "\n".join(lines)

    def _dispatch_function(
        self,
        name: str,
        *,
        label: str,
        commands: Sequence[Command],
        flags: Sequence[Flag],
        globals_array: str,
        used: set[str],
        functions: list[list[str]],
    ) -> list[str]:
        """Return the lines of function ``name`` and queue helpers for children."""

        pad = _INDENT * 2
        specs = [spec for flag in flags for spec in format_flag_specs(flag)]
        body: list[str] = [f"{name}() {{"]
        if not commands:
            body.append(f"{_INDENT}_arguments -s -S{_CONTINUATION}")
            body.append(f'{pad}"${{{globals_array}[@]}}"{_CONTINUATION}')
            body.extend(f"{pad}{spec}{_CONTINUATION}" for spec in specs)
            body.extend([f"{pad}'*: :_default'", "}"])
            return body

        children: list[tuple[Command, str]] = []
        for command in commands:
            if command.subcommands or command.flags:
                child = _child_function_name(name, command.name, used)
                children.append((command, child))
                functions.append(
                    self._dispatch_function(
                        child,
                        label=f"{label} {command.name}",
                        commands=command.subcommands,
                        flags=command.flags,
                        globals_array=globals_array,
                        used=used,
                        functions=functions,
                    ),
                )

        body.extend(
            [
                f'{_INDENT}local curcontext="$curcontext" state line ret=1',
                f"{_INDENT}typeset -A opt_args",
                "",
                f"{_INDENT}_arguments -C{_CONTINUATION}",
                f'{pad}"${{{globals_array}[@]}}"{_CONTINUATION}',
                *(f"{pad}{spec}{_CONTINUATION}" for spec in specs),
                f"{pad}'1: :->command'{_CONTINUATION}",
                f"{pad}'*:: :->args' && ret=0",
                "",
                f"{_INDENT}case $state in",
                f"{pad}command)",
                f"{pad}{_INDENT}local -a commands",
                f"{pad}{_INDENT}commands=(",
                *(
                    f"{pad}{_INDENT * 2}'{escape_zsh_describe(spelling, command.description)}'"
                    for command in commands
                    for spelling in command.spellings
                ),
                f"{pad}{_INDENT})",
                f"{pad}{_INDENT}_describe -t commands '{quote_single(collapse_whitespace(label))} command' commands && ret=0",
                f"{pad}{_INDENT};;",
                f"{pad}args)",
                f"{pad}{_INDENT}case $words[1] in",
            ],
        )
        for command, child in children:
            labels = "|".join(escape_pattern(spelling) for spelling in command.spellings)
            body.extend(
                [
                    f"{pad}{_INDENT * 2}{labels})",
                    f"{pad}{_INDENT * 3}{child} && ret=0",
                    f"{pad}{_INDENT * 3};;",
                ],
            )
        body.extend(
            [
                f"{pad}{_INDENT * 2}*)",
                f"{pad}{_INDENT * 3}_default && ret=0",
                f"{pad}{_INDENT * 3};;",
                f"{pad}{_INDENT}esac",
                f"{pad}{_INDENT};;",
                f"{_INDENT}esac",
                f"{_INDENT}return ret",
                "}",
            ],
        )
        return body


__all__ = ["ZshGenerator", "format_arg_completion", "format_flag_specs", "zsh_function_name"]
