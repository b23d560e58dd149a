# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Line classification rules for ``--help`` and man page text.

Every line is checked against an ordered list of named
:class:`ClassificationRule` entries. The first rule that accepts the line
decides its :class:`LineKind`; lines no rule accepts are noise. Rules are
plain callables so each heuristic can be exercised on its own with
representative samples, and new help-format conventions are added by
inserting a rule rather than growing a conditional chain.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from ..models import Command, Flag

MAX_COMMAND_NAME_LENGTH: Final[int] = 30
PLACEHOLDER_ARG: Final[str] = "value"
MAN_SECTION_HEADERS: Final[tuple[str, ...]] = (
    "NAME",
    "SYNOPSIS",
    "DESCRIPTION",
    "OPTIONS",
    "ARGUMENTS",
    "COMMANDS",
    "EXIT STATUS",
    "ENVIRONMENT",
    "FILES",
    "EXAMPLES",
    "SEE ALSO",
    "BUGS",
    "AUTHOR",
    "AUTHORS",
    "HISTORY",
    "NOTES",
    "CAVEATS",
    "DIAGNOSTICS",
)
MAN_OPTIONS_HEADER: Final[str] = "OPTIONS"

_COMMAND_HEADER_PREFIXES: Final[tuple[str, ...]] = ("commands:", "available commands:", "subcommands:")
_COMMAND_HEADER_EXACT: Final[frozenset[str]] = frozenset({"commands"})
_OPTION_HEADER_PREFIXES: Final[tuple[str, ...]] = ("options:", "flags:", "global options:", "global flags:")
_OPTION_HEADER_EXACT: Final[frozenset[str]] = frozenset({"options", "flags"})
_REQUIRED_MARKERS: Final[tuple[str, ...]] = ("(required)", "[required]")

_COLUMN_GAP_RE: Final[re.Pattern[str]] = re.compile(r"\s{2,}|\t")
_COMMAND_NAME_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9_-]+")
_LONG_FLAG_RE: Final[re.Pattern[str]] = re.compile(r"(--[^=\[\s]+)(\[?=)?(.*)")
_CHOICE_SEPARATOR_RE: Final[re.Pattern[str]] = re.compile(r"[|,]")


class Section(StrEnum):
    """Help text section that the scanner is currently inside."""

    NONE = "none"
    COMMANDS = "commands"
    OPTIONS = "options"


class LineKind(StrEnum):
    """Outcome of classifying a single line."""

    BLANK = "blank"
    COMMANDS_HEADER = "commands-header"
    OPTIONS_HEADER = "options-header"
    FLAG = "flag"
    COMMAND = "command"
    NOISE = "noise"


@dataclass(frozen=True, slots=True)
class LineContext:
    """Single line of help text together with the section it appears in."""

    raw: str
    section: Section

    @property
    def trimmed(self) -> str:
        """Return the line without surrounding whitespace."""

        return self.raw.strip()


@dataclass(frozen=True, slots=True)
class LineClassification:
    """Decision produced by the first matching rule."""

    kind: LineKind
    rule: str
    flag: Flag | None = None
    command: Command | None = None

    @property
    def section(self) -> Section | None:
        """Return the section a header line switches to, if any."""

        if self.kind is LineKind.COMMANDS_HEADER:
            return Section.COMMANDS
        if self.kind is LineKind.OPTIONS_HEADER:
            return Section.OPTIONS
        return None


RuleMatcher = Callable[[LineContext], LineClassification | None]


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """Named matcher consulted in priority order."""

    name: str
    matcher: RuleMatcher

    def apply(self, context: LineContext) -> LineClassification | None:
        """Return the classification produced by this rule or ``None``."""

        return self.matcher(context)


def split_columns(text: str) -> tuple[str, str]:
    """Split ``text`` on its first gap of two or more spaces.

    Args:
        text: Trimmed help line.

    Returns:
        tuple[str, str]: Leading column and the (possibly empty) description.
    """

    parts = _COLUMN_GAP_RE.split(text.strip(), maxsplit=1)
    head = parts[0].strip()
    description = parts[1].strip() if len(parts) > 1 else ""
    return head, description


def detect_section(trimmed: str) -> Section | None:
    """Return the section introduced by a header line, or ``None``.

    Args:
        trimmed: Line with surrounding whitespace removed.

    Returns:
        Section | None: ``COMMANDS`` or ``OPTIONS`` for recognised headers.
    """

    lowered = trimmed.lower()
    if lowered.startswith(_COMMAND_HEADER_PREFIXES) or lowered in _COMMAND_HEADER_EXACT:
        return Section.COMMANDS
    if lowered.startswith(_OPTION_HEADER_PREFIXES) or lowered in _OPTION_HEADER_EXACT:
        return Section.OPTIONS
    return None


def is_valid_command_name(name: str) -> bool:
    """Return ``True`` when ``name`` is 1-30 letters, digits, ``-`` or ``_``."""

    return 0 < len(name) <= MAX_COMMAND_NAME_LENGTH and _COMMAND_NAME_RE.fullmatch(name) is not None


def is_man_section_header(trimmed: str) -> bool:
    """Return ``True`` when ``trimmed`` names a standard man page section."""

    return any(trimmed == header or trimmed.startswith(f"{header} ") for header in MAN_SECTION_HEADERS)


def is_man_options_header(trimmed: str) -> bool:
    """Return ``True`` when ``trimmed`` opens the man page ``OPTIONS`` section."""

    return trimmed.startswith(MAN_OPTIONS_HEADER)


def _split_choices(text: str) -> tuple[str, ...]:
    return tuple(choice for choice in (part.strip() for part in _CHOICE_SEPARATOR_RE.split(text)) if choice)


def _parse_argument(text: str) -> tuple[str, tuple[str, ...]]:
    """Return the placeholder name and choice list encoded by ``text``.

    ``FILE`` and ``<file>`` are plain placeholders; ``json|yaml``,
    ``<json|yaml>``, ``{a,b}`` and ``(a|b)`` are choice lists whose
    placeholder becomes ``value``.
    """

    if not text:
        return "", ()
    if text[:1] in "{(" and text[-1:] in "})":
        choices = _split_choices(text[1:-1])
        return (PLACEHOLDER_ARG, choices) if choices else ("", ())
    inner = text.strip("<>[]")
    if "|" in inner:
        choices = _split_choices(inner)
        return (PLACEHOLDER_ARG, choices) if choices else ("", ())
    return inner, ()


def _is_required(description: str) -> bool:
    lowered = description.lower()
    return any(marker in lowered for marker in _REQUIRED_MARKERS)


def parse_flag_line(line: str) -> Flag | None:
    """Parse a flag definition such as ``-o, --output <file>  Write here``.

    Args:
        line: Raw help line.

    Returns:
        Flag | None: Parsed flag, or ``None`` when the line carries neither a
        long nor a short name.
    """

    trimmed = line.strip()
    if not trimmed.startswith("-"):
        return None

    head, description = split_columns(trimmed)
    name = short = arg = ""
    choices: tuple[str, ...] = ()
    for raw_token in head.split():
        token = raw_token.removesuffix(",")
        if not token:
            continue
        if token.startswith("--"):
            match = _LONG_FLAG_RE.fullmatch(token)
            if match is None:
                continue
            name = match.group(1)
            if match.group(2):
                value = match.group(3)
                if match.group(2) == "[=":
                    value = value.removesuffix("]")
                if value:
                    arg, choices = _parse_argument(value)
        elif token.startswith("-") and len(token) == 2:
            short = token
        elif token[0] in "<[{(":
            arg, choices = _parse_argument(token)

    if not name and not short:
        return None
    if not name:
        name, short = short, ""
    return Flag(
        name=name,
        short=short,
        arg=arg,
        argument_values=choices,
        description=description,
        required=_is_required(description),
    )


def parse_command_line(line: str) -> Command | None:
    """Parse a ``Commands:`` section entry such as ``remove, rm  Delete it``.

    The longest valid comma-separated name is the primary name; equally long
    names keep the first listed one. The remaining valid names are aliases.

    Args:
        line: Raw help line.

    Returns:
        Command | None: Parsed command, or ``None`` when no valid name exists.
    """

    trimmed = line.strip()
    if not trimmed or trimmed.startswith("-"):
        return None

    head, description = split_columns(trimmed)
    names: list[str] = []
    for candidate in (part.strip() for part in head.split(",")):
        if is_valid_command_name(candidate) and candidate not in names:
            names.append(candidate)
    if not names:
        return None

    primary = max(names, key=len)
    aliases = tuple(name for name in names if name != primary)
    return Command(name=primary, aliases=aliases, description=description)


def parse_indented_command(line: str) -> Command | None:
    """Parse a git-style indented entry such as ``   clone     Clone a repo``.

    Args:
        line: Raw help line including its leading indentation.

    Returns:
        Command | None: Parsed command when the line is indented, has a valid
        name and a non-empty description column.
    """

    if len(line) <= 3 or line[0] not in " \t":
        return None
    trimmed = line.strip()
    if not trimmed or trimmed[0] in "-(":
        return None
    parts = _COLUMN_GAP_RE.split(trimmed, maxsplit=1)
    if len(parts) < 2:
        return None
    name, description = parts[0].strip(), parts[1].strip()
    if not is_valid_command_name(name) or not description:
        return None
    return Command(name=name, description=description)


def _match_blank(context: LineContext) -> LineClassification | None:
    if context.trimmed:
        return None
    return LineClassification(LineKind.BLANK, "blank")


def _match_commands_header(context: LineContext) -> LineClassification | None:
    if detect_section(context.trimmed) is not Section.COMMANDS:
        return None
    return LineClassification(LineKind.COMMANDS_HEADER, "commands_header")


def _match_options_header(context: LineContext) -> LineClassification | None:
    if detect_section(context.trimmed) is not Section.OPTIONS:
        return None
    return LineClassification(LineKind.OPTIONS_HEADER, "options_header")


def _match_structured_flag(context: LineContext) -> LineClassification | None:
    if context.section is not Section.OPTIONS:
        return None
    flag = parse_flag_line(context.raw)
    return LineClassification(LineKind.FLAG, "structured_flag", flag=flag) if flag else None


def _match_inline_flag(context: LineContext) -> LineClassification | None:
    if context.section is Section.OPTIONS or not context.trimmed.startswith("-"):
        return None
    flag = parse_flag_line(context.raw)
    return LineClassification(LineKind.FLAG, "inline_flag", flag=flag) if flag else None


def _match_structured_command(context: LineContext) -> LineClassification | None:
    if context.section is not Section.COMMANDS:
        return None
    command = parse_command_line(context.raw)
    return LineClassification(LineKind.COMMAND, "structured_command", command=command) if command else None


def _match_indented_command(context: LineContext) -> LineClassification | None:
    if context.section is not Section.NONE:
        return None
    command = parse_indented_command(context.raw)
    return LineClassification(LineKind.COMMAND, "indented_command", command=command) if command else None


DEFAULT_RULES: Final[tuple[ClassificationRule, ...]] = (
    ClassificationRule("blank", _match_blank),
    ClassificationRule("commands_header", _match_commands_header),
    ClassificationRule("options_header", _match_options_header),
    ClassificationRule("structured_flag", _match_structured_flag),
    ClassificationRule("inline_flag", _match_inline_flag),
    ClassificationRule("structured_command", _match_structured_command),
    ClassificationRule("indented_command", _match_indented_command),
)

_NOISE: Final[LineClassification] = LineClassification(LineKind.NOISE, "noise")


def classify_line(
    line: str,
    section: Section = Section.NONE,
    rules: Sequence[ClassificationRule] = DEFAULT_RULES,
) -> LineClassification:
    """Classify ``line`` using the first rule that accepts it.

    Args:
        line: Raw help line.
        section: Section the scanner is currently inside.
        rules: Ordered rules to consult.

    Returns:
        LineClassification: Result of the first matching rule, or noise.
    """

    context = LineContext(raw=line, section=section)
    for rule in rules:
        result = rule.apply(context)
        if result is not None:
            return result
    return _NOISE


__all__ = [
    "ClassificationRule",
    "DEFAULT_RULES",
    "LineClassification",
    "LineContext",
    "LineKind",
    "MAN_SECTION_HEADERS",
    "Section",
    "classify_line",
    "detect_section",
    "is_man_options_header",
    "is_man_section_header",
    "is_valid_command_name",
    "parse_command_line",
    "parse_flag_line",
    "parse_indented_command",
    "split_columns",
]
