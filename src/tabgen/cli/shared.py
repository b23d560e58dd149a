# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared CLI option types, errors and helpers."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Annotated

import typer

from ..config import Config, ShellKind, load_config
from ..errors import ConfigError
from ..logging import ToolLogger, build_logger


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Configuration file (defaults to $TABGEN_HOME/config.toml)."),
]
FORCE_OPTION = Annotated[
    bool,
    typer.Option("--force", "-f", help="Regenerate even when version and fingerprint are unchanged."),
]
JOBS_OPTION = Annotated[
    int | None,
    typer.Option("--jobs", "-j", min=1, help="Number of parallel workers (defaults to CPU count)."),
]
DEPTH_OPTION = Annotated[
    int | None,
    typer.Option("--depth", min=0, help="Maximum subcommand exploration depth."),
]
QUICK_OPTION = Annotated[
    bool,
    typer.Option("--quick", help="Skip man pages and subcommand exploration."),
]
VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Print probe and extraction details."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
PATH_OPTION = Annotated[
    str | None,
    typer.Option("--path", "-p", help="Executable to probe instead of the PATH lookup."),
]
SHELL_OPTION = Annotated[
    ShellKind,
    typer.Option("--shell", "-s", case_sensitive=False, help="Shell to render the completion script for."),
]


def load_cli_config(
    path: Path | None,
    *,
    verbose: bool = False,
    emoji: bool = True,
    depth: int | None = None,
    quick: bool = False,
) -> Config:
    """Load configuration and apply command-line overrides.

    Raises:
        CLIError: If the configuration cannot be loaded.
    """

    try:
        config = load_config(path)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    if verbose:
        config.output.verbose = True
    if not emoji:
        config.output.emoji = False
    if depth is not None:
        config.extraction.max_depth = depth
    if quick:
        config.extraction.quick = True
    return config


def build_cli_logger(config: Config) -> ToolLogger:
    """Return a stderr logger honouring the output configuration."""

    return build_logger(
        verbose=config.output.verbose,
        use_emoji=config.output.emoji,
        use_color=config.output.color,
    )


def resolve_executable(name: str, explicit: str | None = None) -> str:
    """Return the executable path for ``name``.

    Raises:
        CLIError: If ``name`` cannot be found on ``PATH``.
    """

    if explicit:
        return explicit
    resolved = shutil.which(name)
    if resolved is None:
        raise CLIError(f"{name}: not found on PATH")
    return resolved


__all__ = [
    "CLIError",
    "CONFIG_OPTION",
    "DEPTH_OPTION",
    "EMOJI_OPTION",
    "FORCE_OPTION",
    "JOBS_OPTION",
    "PATH_OPTION",
    "QUICK_OPTION",
    "SHELL_OPTION",
    "VERBOSE_OPTION",
    "build_cli_logger",
    "load_cli_config",
    "resolve_executable",
]
