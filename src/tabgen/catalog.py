# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Persistence of the tool catalog, tool records and completion scripts.

Layout below the tabgen home directory::

    catalog.json
    tools/<name>.json
    completions/bash/<name>
    completions/zsh/_<name>
"""

from __future__ import annotations

import json
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Final, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import ShellKind
from .errors import GenerationError
from .models import Tool, ToolSource

CATALOG_FILENAME: Final[str] = "catalog.json"
TOOLS_DIRNAME: Final[str] = "tools"
COMPLETIONS_DIRNAME: Final[str] = "completions"
_HELP_SOURCES: Final[frozenset[ToolSource]] = frozenset({ToolSource.HELP, ToolSource.BOTH, ToolSource.HELP_ONLY})
_MAN_SOURCES: Final[frozenset[ToolSource]] = frozenset({ToolSource.MAN, ToolSource.BOTH})


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CatalogEntry(BaseModel):
    """Long-lived cache record for one tool, keyed by its name."""

    model_config = ConfigDict(validate_assignment=True)

    name: str
    path: str
    version: str = ""
    generated_version: str = ""
    content_hash: str = ""
    generated: bool = False
    last_scan: datetime | None = None
    has_help: bool = False
    has_man_page: bool = False

    def record_generation(self, tool: Tool, content_hash: str, *, when: datetime | None = None) -> None:
        """Record that completions were written for ``tool``.

        Args:
            tool: Tool that was generated.
            content_hash: Fingerprint of ``tool``'s extracted content.
            when: Scan timestamp; defaults to now.
        """

        self.path = tool.path
        self.version = tool.version
        self.generated_version = tool.version
        self.content_hash = content_hash
        self.generated = True
        self.last_scan = when or _utcnow()
        self.has_help = tool.source in _HELP_SOURCES
        self.has_man_page = tool.source in _MAN_SOURCES

    def record_scan(self, tool: Tool, *, when: datetime | None = None) -> None:
        """Record a scan that did not regenerate completions."""

        self.path = tool.path
        self.version = tool.version
        self.last_scan = when or _utcnow()
        self.has_help = tool.source in _HELP_SOURCES
        self.has_man_page = tool.source in _MAN_SOURCES


class Catalog(BaseModel):
    """Every known tool together with the time of the last full scan."""

    model_config = ConfigDict(validate_assignment=True)

    last_scan: datetime | None = None
    tools: dict[str, CatalogEntry] = Field(default_factory=dict)

    def entry_for(self, name: str, path: str) -> CatalogEntry:
        """Return the entry for ``name``, creating it with ``path`` when absent."""

        entry = self.tools.get(name)
        if entry is None:
            entry = CatalogEntry(name=name, path=path)
            self.tools[name] = entry
        return entry


class CompletionStore(Protocol):
    """Persistence collaborator consumed by the generation pipeline."""

    def save_tool(self, tool: Tool) -> Path:
        """Persist the extracted ``tool`` record."""
        ...

    def save_completion(self, name: str, shell: ShellKind, script: str) -> Path:
        """Persist ``script`` for ``name`` and ``shell``."""
        ...


def _validate_name(name: str) -> str:
    if not name or name in {".", ".."} or os.sep in name or (os.altsep and os.altsep in name):
        raise GenerationError(name, f"invalid tool name for storage: {name!r}")
    return name


class FileCompletionStore:
    """Store catalog, tool records and scripts as files under ``home``."""

    def __init__(self, home: Path) -> None:
        """Initialise the store rooted at ``home``."""

        self._home = home

    @property
    def home(self) -> Path:
        """Return the root directory of the store."""

        return self._home

    @property
    def catalog_path(self) -> Path:
        """Return the location of ``catalog.json``."""

        return self._home / CATALOG_FILENAME

    def tool_path(self, name: str) -> Path:
        """Return the record location for tool ``name``."""

        return self._home / TOOLS_DIRNAME / f"{_validate_name(name)}.json"

    def completion_path(self, name: str, shell: ShellKind) -> Path:
        """Return the script location for ``name`` and ``shell``.

        Zsh scripts are prefixed with ``_`` so the directory can be placed on
        ``fpath`` directly.
        """

        filename = f"_{_validate_name(name)}" if shell is ShellKind.ZSH else _validate_name(name)
        return self._home / COMPLETIONS_DIRNAME / shell.value / filename

    def load_catalog(self) -> Catalog:
        """Return the stored catalog, or an empty one when missing or unreadable."""

        path = self.catalog_path
        if not path.is_file():
            return Catalog()
        try:
            return Catalog.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError):
            return Catalog()

    def save_catalog(self, catalog: Catalog) -> Path:
        """Write ``catalog`` to disk.

        Raises:
            GenerationError: If the catalog cannot be written.
        """

        return self._write(CATALOG_FILENAME, self.catalog_path, catalog.model_dump_json(indent=2))

    def load_tool(self, name: str) -> Tool | None:
        """Return the stored record for ``name`` or ``None`` when unavailable."""

        path = self.tool_path(name)
        if not path.is_file():
            return None
        try:
            return Tool.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError):
            return None

    def save_tool(self, tool: Tool) -> Path:
        """Write the JSON record for ``tool``.

        Raises:
            GenerationError: If the record cannot be written.
        """

        payload = json.dumps(tool.model_dump(mode="json"), indent=2, ensure_ascii=False)
        return self._write(tool.name, self.tool_path(tool.name), payload)

    def save_completion(self, name: str, shell: ShellKind, script: str) -> Path:
        """Write ``script`` for ``name`` and ``shell``.

        Raises:
            GenerationError: If the script cannot be written.
        """

        return self._write(name, self.completion_path(name, shell), script)

    @staticmethod
    def _write(owner: str, path: Path, content: str) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise GenerationError(owner, f"cannot write {path}: {exc}") from exc
        return path


__all__ = [
    "Catalog",
    "CatalogEntry",
    "CompletionStore",
    "FileCompletionStore",
]
