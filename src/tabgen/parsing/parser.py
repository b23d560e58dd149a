# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn a tool executable into an immutable :class:`~tabgen.models.Tool`."""

from __future__ import annotations

import os
import stat
from datetime import UTC, datetime

from ..config import ExtractionConfig
from ..errors import ProbePermissionError, ToolInputError
from ..logging import ToolLogger, null_logger
from ..models import Tool, ToolSource
from ..probes import ProbeRunner
from ..process import RunnerCallable, run_command
from .explorer import SubcommandExplorer
from .extractor import TextExtractor
from .version import VersionDetector

_EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def validate_tool_input(name: str, path: str) -> None:
    """Reject unusable tool names and paths before any probe runs.

    Args:
        name: Tool name as typed by users.
        path: Filesystem path of the executable.

    Raises:
        ToolInputError: If ``name`` or ``path`` is empty, the path is missing,
            malformed, is a directory, or carries no executable bit.
    """

    if not name:
        raise ToolInputError("name cannot be empty")
    if not path:
        raise ToolInputError("path cannot be empty")
    try:
        info = os.stat(path)
    except FileNotFoundError as exc:
        raise ToolInputError(f"path does not exist: {path}") from exc
    except ValueError as exc:
        raise ToolInputError(f"invalid path {path!r}: {exc}") from exc
    except OSError as exc:
        raise ToolInputError(f"cannot access path {path}: {exc}") from exc
    if stat.S_ISDIR(info.st_mode):
        raise ToolInputError(f"path is a directory, not an executable: {path}")
    if not info.st_mode & _EXECUTABLE_BITS:
        raise ToolInputError(f"path is not executable: {path}")


def resolve_source(*, has_help: bool, has_man: bool, man_denied: bool) -> ToolSource:
    """Return the source tag for the documentation that was obtained."""

    if has_help and man_denied:
        return ToolSource.HELP_ONLY
    if has_help and has_man:
        return ToolSource.BOTH
    if has_help:
        return ToolSource.HELP
    if has_man:
        return ToolSource.MAN
    return ToolSource.NONE


class ToolParser:
    """Extract a tool's command tree from its help output and man page.

    Each parser owns its probe runner, extractor, explorer and version
    detector, so a worker thread holding its own parser shares no mutable
    extraction state with other workers.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        *,
        runner: RunnerCallable = run_command,
        logger: ToolLogger | None = None,
    ) -> None:
        """Initialise the parser.

        Args:
            config: Extraction bounds and probe settings.
            runner: Subprocess runner used for every probe.
            logger: Logger receiving diagnostics.
        """

        self._config = config or ExtractionConfig()
        self._logger = logger or null_logger()
        self._probes = ProbeRunner(runner)
        self._extractor = TextExtractor(self._logger)
        self._versions = VersionDetector(
            self._probes,
            flags=self._config.version_flags,
            timeout=self._config.version_timeout,
            logger=self._logger,
        )
        self._explorer = SubcommandExplorer(
            self._probes,
            self._extractor,
            max_depth=self._config.max_depth,
            timeout=self._config.help_timeout,
            logger=self._logger,
        )

    @property
    def config(self) -> ExtractionConfig:
        """Return the extraction configuration in use."""

        return self._config

    def parse(self, name: str, path: str) -> Tool:
        """Probe ``path`` and return the extracted tool.

        Args:
            name: Tool name, used for the man page lookup.
            path: Executable to probe.

        Returns:
            Tool: Extracted tool. ``source`` is ``none`` when neither help nor
            man output was obtained.

        Raises:
            ToolInputError: If ``name`` or ``path`` is unusable.
            ProbePermissionError: If the help probe is refused by the OS.
        """

        validate_tool_input(name, path)
        logger = self._logger
        logger.section(f"Parsing {name}")
        logger.debug(f"path={path}")

        version = self._versions.detect(path)
        logger.debug(f"detected version={version!r}" if version else "no version detected")

        try:
            help_result = self._probes.help_text(path, timeout=self._config.help_timeout)
        except ProbePermissionError as exc:
            logger.debug(f"help probe refused error={exc}")
            raise
        help_text = help_result.output if help_result.has_output else ""
        if help_text:
            logger.debug(f"help output bytes={len(help_text.encode())}")
            logger.snippet("--help output", help_text)
        else:
            logger.debug("help probe returned no output")

        man_text = ""
        man_denied = False
        if not self._config.quick:
            try:
                man_result = self._probes.man_page(name, timeout=self._config.help_timeout)
            except ProbePermissionError as exc:
                logger.debug(f"man probe refused error={exc}")
                man_denied = True
            else:
                man_text = man_result.output
                if man_text:
                    logger.debug(f"man output bytes={len(man_text.encode())}")

        source = resolve_source(has_help=bool(help_text), has_man=bool(man_text), man_denied=man_denied)
        subcommands, global_flags = self._extractor.extract(help_text, man_text)
        if subcommands and not self._config.quick:
            logger.debug(f"exploring subcommands count={len(subcommands)} max_depth={self._explorer.max_depth}")
            subcommands = self._explorer.explore([path], subcommands)

        logger.debug(f"parse complete source={source} subcommands={len(subcommands)} flags={len(global_flags)}")
        return Tool(
            name=name,
            path=path,
            version=version,
            parsed_at=datetime.now(UTC),
            source=source,
            subcommands=subcommands,
            global_flags=global_flags,
        )


__all__ = ["ToolParser", "resolve_source", "validate_tool_input"]
