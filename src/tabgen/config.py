# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for extraction and generation."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_VERSION_FLAGS: Final[tuple[str, ...]] = ("--version", "-V", "version", "-v")
DEFAULT_MAX_DEPTH: Final[int] = 2
DEFAULT_HELP_TIMEOUT: Final[float] = 5.0
DEFAULT_VERSION_TIMEOUT: Final[float] = 2.0
HOME_ENV_VAR: Final[str] = "TABGEN_HOME"
CONFIG_ENV_VAR: Final[str] = "TABGEN_CONFIG"
CONFIG_FILENAME: Final[str] = "config.toml"
_ENV_REFERENCE_RE: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class ShellKind(StrEnum):
    """Shells that completion scripts can be generated for."""

    BASH = "bash"
    ZSH = "zsh"


def default_parallel_jobs() -> int:
    """Return the number of available execution units, never less than one."""

    return max(1, os.cpu_count() or 1)


def default_home() -> Path:
    """Return the default data directory, ``~/.tabgen``."""

    return Path.home() / ".tabgen"


class ExtractionConfig(BaseModel):
    """Bounds and probe settings used while extracting a tool's command tree."""

    model_config = ConfigDict(validate_assignment=True)

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)
    help_timeout: float = Field(default=DEFAULT_HELP_TIMEOUT, gt=0)
    version_timeout: float = Field(default=DEFAULT_VERSION_TIMEOUT, gt=0)
    version_flags: list[str] = Field(default_factory=lambda: list(DEFAULT_VERSION_FLAGS))
    quick: bool = False

    @field_validator("version_flags")
    @classmethod
    def _default_when_empty(cls, value: list[str]) -> list[str]:
        """Fall back to the default probe order when no flags are configured."""

        cleaned = [flag.strip() for flag in value if flag.strip()]
        return cleaned or list(DEFAULT_VERSION_FLAGS)


class GenerationLimits(BaseModel):
    """Size and complexity guards applied before and after script generation."""

    model_config = ConfigDict(validate_assignment=True)

    max_output_size: int = Field(default=1024 * 1024, gt=0)
    max_subcommands: int = Field(default=500, gt=0)
    max_flags: int = Field(default=200, gt=0)
    max_total_items: int = Field(default=2000, gt=0)


class GenerationConfig(BaseModel):
    """Execution behaviour of the generation pipeline."""

    model_config = ConfigDict(validate_assignment=True)

    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    force: bool = False
    shells: list[ShellKind] = Field(default_factory=lambda: [ShellKind.BASH, ShellKind.ZSH])


class OutputConfig(BaseModel):
    """Configuration for console output."""

    model_config = ConfigDict(validate_assignment=True)

    verbose: bool = False
    emoji: bool = True
    color: bool = True


class Config(BaseModel):
    """Top-level configuration consumed by the CLI and the pipeline."""

    model_config = ConfigDict(validate_assignment=True)

    home: Path = Field(default_factory=default_home)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    limits: GenerationLimits = Field(default_factory=GenerationLimits)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def _expand_env(value: Any, env: Mapping[str, str]) -> Any:
    """Expand ``${VAR}`` references inside string values of ``value``."""

    if isinstance(value, str):
        return _ENV_REFERENCE_RE.sub(lambda match: env.get(match.group(1), match.group(0)), value)
    if isinstance(value, Mapping):
        return {key: _expand_env(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item, env) for item in value]
    return value


def _read_toml(path: Path) -> dict[str, Any]:
    """Return the TOML document at ``path`` or an empty mapping when it is absent.

    Raises:
        ConfigError: If the file exists but is not valid TOML.
    """

    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(f"Cannot read configuration at {path}: {exc}") from exc


def load_config(path: Path | None = None, *, env: Mapping[str, str] | None = None) -> Config:
    """Load configuration from TOML layered over the built-in defaults.

    Resolution order for the file: ``path``, then ``$TABGEN_CONFIG``, then
    ``<home>/config.toml`` where ``home`` honours ``$TABGEN_HOME``.

    Args:
        path: Explicit configuration file.
        env: Environment used for overrides and ``${VAR}`` expansion.

    Returns:
        Config: Validated configuration.

    Raises:
        ConfigError: If the document is malformed or fails validation.
    """

    environ = os.environ if env is None else env
    home_override = environ.get(HOME_ENV_VAR)
    home = Path(home_override).expanduser() if home_override else default_home()
    if path is None:
        configured = environ.get(CONFIG_ENV_VAR)
        path = Path(configured).expanduser() if configured else home / CONFIG_FILENAME

    document = _expand_env(_read_toml(path), environ)
    if not isinstance(document, Mapping):
        raise ConfigError(f"Configuration at {path} must be a table")
    payload = dict(document)
    if home_override:
        payload["home"] = home
    elif "home" in payload:
        payload["home"] = Path(str(payload["home"])).expanduser()
    try:
        return Config.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration at {path}: {exc}") from exc


__all__ = [
    "Config",
    "DEFAULT_VERSION_FLAGS",
    "ExtractionConfig",
    "GenerationConfig",
    "GenerationLimits",
    "OutputConfig",
    "ShellKind",
    "default_parallel_jobs",
    "load_config",
]
