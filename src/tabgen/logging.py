# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers with optional colour and emoji support."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Final

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

_KEY_VALUE_RE: Final[re.Pattern[str]] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")
_SNIPPET_PREFIX: Final[str] = "  | "


def emoji(symbol: str, enable: bool) -> str:
    """Select an emoji symbol based on the caller's preference.

    Args:
        symbol: Emoji text to include in the output.
        enable: Flag indicating whether emoji output is desired.

    Returns:
        str: Emoji symbol when enabled, otherwise an empty string.
    """

    return symbol if enable else ""


def stderr_is_terminal() -> bool:
    """Return ``True`` when standard error is attached to a terminal."""

    try:
        return sys.stderr.isatty()
    except (AttributeError, ValueError):
        return False


@lru_cache(maxsize=4)
def stderr_console(*, color: bool, emoji: bool) -> Console:
    """Return the process-wide stderr console for one colour and emoji setting."""

    styled = color and stderr_is_terminal()
    return Console(
        stderr=True,
        color_system="auto" if styled else None,
        no_color=not styled,
        emoji=emoji,
        soft_wrap=True,
    )


@dataclass(slots=True)
class ToolLogger:
    """Explicit logging context handed to every extraction and generation component.

    Status messages (``info``, ``ok``, ``warn``, ``fail``) always print. Debug
    output (``debug``, ``section``, ``snippet``) only prints when ``verbose``
    is set, which replaces any process-wide verbosity switch.
    """

    console: Console
    use_emoji: bool = True
    verbose: bool = False
    use_color: bool = field(default=True)

    def _print_line(self, msg: str, *, style: str | None) -> None:
        text = Text(msg)
        if style and self.use_color:
            text.stylize(style)
        self.console.print(text)

    def info(self, msg: str) -> None:
        """Emit an informational message."""

        self._print_line(f"{emoji('ℹ️ ', self.use_emoji)}{msg}", style="cyan")

    def ok(self, msg: str) -> None:
        """Emit a success message."""

        self._print_line(f"{emoji('✅ ', self.use_emoji)}{msg}", style="green")

    def warn(self, msg: str) -> None:
        """Emit a warning message."""

        self._print_line(f"{emoji('⚠️ ', self.use_emoji)}{msg}", style="yellow")

    def fail(self, msg: str) -> None:
        """Emit an error message."""

        self._print_line(f"{emoji('❌ ', self.use_emoji)}{msg}", style="red")

    def debug(self, message: str) -> None:
        """Emit a debug message when verbose logging is enabled.

        ``key=value`` pairs inside ``message`` are highlighted so probe
        commands and counts stand out in long traces.

        Args:
            message: Debug payload rendered with simple highlighting.
        """

        if not self.verbose:
            return
        text = Text("[verbose] ", style="bold cyan")
        cursor = 0
        for match in _KEY_VALUE_RE.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            key, raw_value = match.group(1), match.group(2)
            text.append(key, style="bold magenta")
            text.append("=", style="dim")
            text.append(raw_value, style="bold blue" if key in {"command", "cmd"} else "bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)

    def section(self, title: str) -> None:
        """Render a section header when verbose logging is enabled."""

        if not self.verbose:
            return
        if self.use_color:
            self.console.print()
            self.console.print(Rule(title))
        else:
            self.console.print(f"\n[verbose] === {title} ===", markup=False)

    def snippet(self, label: str, text: str, max_lines: int = 20) -> None:
        """Print the first ``max_lines`` lines of ``text`` when verbose.

        Args:
            label: Heading describing where the text came from.
            text: Multi-line probe output.
            max_lines: Number of lines shown before the remainder is summarised.
        """

        if not self.verbose or not text:
            return
        lines = text.splitlines()
        self.console.print(f"[verbose] {label}:", markup=False)
        for line in lines[:max_lines]:
            self.console.print(f"{_SNIPPET_PREFIX}{line}", markup=False, highlight=False)
        if len(lines) > max_lines:
            self.console.print(f"{_SNIPPET_PREFIX}... ({len(lines) - max_lines} more lines)", markup=False)


def build_logger(
    *,
    verbose: bool = False,
    use_emoji: bool = True,
    use_color: bool = True,
    console: Console | None = None,
) -> ToolLogger:
    """Return a :class:`ToolLogger` bound to ``console`` or the shared stderr console.

    Args:
        verbose: Whether debug output should be printed.
        use_emoji: Whether log output may include emoji glyphs.
        use_color: Whether terminal colour output is desired.
        console: Optional console; tests pass one backed by ``StringIO``.

    Returns:
        ToolLogger: Logger instance ready to be passed to components.
    """

    if console is None:
        console = stderr_console(color=use_color, emoji=use_emoji)
    return ToolLogger(
        console=console,
        use_emoji=use_emoji,
        verbose=verbose,
        use_color=use_color and stderr_is_terminal(),
    )


def null_logger() -> ToolLogger:
    """Return a quiet logger whose output is discarded."""

    return ToolLogger(console=Console(quiet=True), use_emoji=False, verbose=False, use_color=False)


__all__ = ["ToolLogger", "build_logger", "emoji", "null_logger", "stderr_console", "stderr_is_terminal"]
