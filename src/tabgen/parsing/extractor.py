# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Text extraction of commands and flags from ``--help`` and man output."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..logging import ToolLogger, null_logger
from ..models import Command, Flag
from .builder import CommandListBuilder, FlagListBuilder
from .classifier import (
    DEFAULT_RULES,
    ClassificationRule,
    Section,
    classify_line,
    is_man_options_header,
    is_man_section_header,
    parse_flag_line,
)


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Counts describing what a single scan contributed."""

    commands_added: int = 0
    flags_added: int = 0
    sections: tuple[str, ...] = ()


class TextExtractor:
    """Populate command and flag builders from documentation text.

    The extractor is stateless between calls; every scan writes into the
    builders it is handed, so the same instance serves the top-level tool
    and every explored subcommand.
    """

    def __init__(
        self,
        logger: ToolLogger | None = None,
        rules: Sequence[ClassificationRule] = DEFAULT_RULES,
    ) -> None:
        """Initialise the extractor.

        Args:
            logger: Logger receiving section and count diagnostics.
            rules: Ordered classification rules applied to every line.
        """

        self._logger = logger or null_logger()
        self._rules = tuple(rules)

    def scan_help(
        self,
        text: str,
        *,
        commands: CommandListBuilder,
        flags: FlagListBuilder,
    ) -> ScanReport:
        """Classify every line of ``text`` and record commands and flags.

        Section headers switch the active section until the next header; blank
        lines never end a section.

        Args:
            text: Combined help output.
            commands: Builder receiving discovered commands.
            flags: Builder receiving discovered flags.

        Returns:
            ScanReport: Number of new commands and flags plus the headers seen.
        """

        section = Section.NONE
        commands_added = flags_added = 0
        sections: list[str] = []
        for line in text.splitlines():
            result = classify_line(line, section, self._rules)
            if result.section is not None:
                section = result.section
                sections.append(line.strip())
                self._logger.debug(f"detected section={section} header={line.strip()!r}")
                continue
            if result.flag is not None and flags.add(result.flag):
                flags_added += 1
            elif result.command is not None and commands.add(result.command):
                commands_added += 1
        return ScanReport(commands_added=commands_added, flags_added=flags_added, sections=tuple(sections))

    def scan_man(self, text: str, *, flags: FlagListBuilder) -> int:
        """Record flags from the ``OPTIONS`` section of a formatted man page.

        A non-flag line directly describing a newly added flag fills in that
        flag's description when it has none yet.

        Args:
            text: Man page text with overstrike sequences removed.
            flags: Builder receiving discovered flags.

        Returns:
            int: Number of flags added.
        """

        in_options = False
        current: str | None = None
        added = 0
        for line in text.splitlines():
            trimmed = line.strip()
            if is_man_options_header(trimmed):
                in_options = True
                continue
            if in_options and line and line[0] not in " \t" and is_man_section_header(trimmed):
                in_options = False
                current = None
                continue
            if not in_options:
                continue
            if trimmed.startswith("-"):
                flag = parse_flag_line(line)
                if flag is not None and flags.add(flag):
                    current = flag.identity
                    added += 1
            elif current is not None and trimmed:
                flags.fill_description(current, trimmed)
        return added

    def extract(self, help_text: str, man_text: str = "") -> tuple[tuple[Command, ...], tuple[Flag, ...]]:
        """Return the top-level commands and global flags found in both texts.

        Args:
            help_text: ``--help`` output, possibly empty.
            man_text: Man page output, possibly empty.

        Returns:
            tuple[tuple[Command, ...], tuple[Flag, ...]]: Commands and flags.
        """

        commands = CommandListBuilder()
        flags = FlagListBuilder()
        if help_text:
            report = self.scan_help(help_text, commands=commands, flags=flags)
            self._logger.debug(f"help scan commands={report.commands_added} flags={report.flags_added}")
        if man_text:
            added = self.scan_man(man_text, flags=flags)
            self._logger.debug(f"man scan flags={added} total_flags={len(flags)}")
        return commands.build(), flags.build()


__all__ = ["ScanReport", "TextExtractor"]
