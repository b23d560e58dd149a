# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Escaping helpers for text embedded in generated shell scripts.

Two contexts are distinguished. String-literal context covers text placed
inside double quotes. Pattern context covers words used as ``case`` labels,
where glob metacharacters and whitespace must lose their special meaning as
well. Zsh ``_arguments`` specs additionally reserve brackets and colons.
"""

from __future__ import annotations

import re
from typing import Final

FUNCTION_PREFIX: Final[str] = "_tabgen_"

_STRING_LITERAL_SPECIALS: Final[frozenset[str]] = frozenset('\\"$`')
_PATTERN_SPECIALS: Final[frozenset[str]] = _STRING_LITERAL_SPECIALS | frozenset("*?[]|()&;<>'! \t")
_ZSH_SPEC_SPECIALS: Final[frozenset[str]] = frozenset("\\[]:")
_ZSH_VALUE_SPECIALS: Final[frozenset[str]] = _ZSH_SPEC_SPECIALS | frozenset("() \t$`\"';&|<>{}*?~#!^=")
_IDENTIFIER_UNSAFE_RE: Final[re.Pattern[str]] = re.compile(r"[^A-Za-z0-9]")
_WHITESPACE_RE: Final[re.Pattern[str]] = re.compile(r"\s+")


def _backslash(text: str, specials: frozenset[str]) -> str:
    return "".join(f"\\{char}" if char in specials else char for char in text)


def collapse_whitespace(text: str) -> str:
    """Return ``text`` on a single line with runs of whitespace reduced to one space."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def escape_string_literal(text: str) -> str:
    """Escape ``text`` for use inside a double-quoted shell string.

    Backslash, double quote, dollar sign and backtick are prefixed with a
    backslash; newlines are folded into spaces.
    """

    return _backslash(collapse_whitespace(text), _STRING_LITERAL_SPECIALS)


def escape_pattern(text: str) -> str:
    """Escape ``text`` for use as an unquoted ``case`` pattern.

    Everything :func:`escape_string_literal` escapes is escaped, plus glob
    metacharacters, pattern separators, shell operators and whitespace.
    """

    return _backslash(text, _PATTERN_SPECIALS)


def sanitize_identifier(name: str, prefix: str = FUNCTION_PREFIX) -> str:
    """Return a shell function name derived from ``name``.

    Every character outside ``[A-Za-z0-9]`` becomes ``_``. Distinct names may
    map to the same identifier (``my-tool`` and ``my.tool``).

    Args:
        name: Tool or command path to derive the identifier from.
        prefix: Namespace prepended to the sanitized name.

    Returns:
        str: Identifier safe to use as a function name in bash and zsh.
    """

    return f"{prefix}{_IDENTIFIER_UNSAFE_RE.sub('_', name)}"


def quote_single(text: str) -> str:
    """Return ``text`` escaped for inclusion between single quotes."""

    return text.replace("'", "'\\''")


def escape_zsh(text: str) -> str:
    """Escape ``text`` for an ``_arguments`` spec inside single quotes.

    Brackets, colons and backslashes are backslash-escaped for ``_arguments``
    and single quotes are closed, escaped and reopened.
    """

    return quote_single(_backslash(collapse_whitespace(text), _ZSH_SPEC_SPECIALS))


def escape_zsh_value(text: str) -> str:
    """Escape one entry of an ``_arguments`` ``(a b c)`` value list.

    ``_arguments`` evaluates the list, so every character with meaning to the
    shell is backslash-escaped and the entry stays a literal word.
    """

    return quote_single(_backslash(text, _ZSH_VALUE_SPECIALS))


def escape_zsh_describe(name: str, description: str) -> str:
    """Return a ``name:description`` entry for ``_describe`` inside single quotes."""

    entry = _backslash(name, frozenset(":\\"))
    summary = collapse_whitespace(description)
    if summary:
        entry = f"{entry}:{summary}"
    return quote_single(entry)


__all__ = [
    "FUNCTION_PREFIX",
    "collapse_whitespace",
    "escape_pattern",
    "escape_string_literal",
    "escape_zsh",
    "escape_zsh_describe",
    "escape_zsh_value",
    "quote_single",
    "sanitize_identifier",
]
