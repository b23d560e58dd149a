# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for catalog persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from tabgen.catalog import Catalog, CatalogEntry, FileCompletionStore
from tabgen.config import ShellKind
from tabgen.errors import GenerationError
from tabgen.models import Flag, Tool, ToolSource


def make_tool(source: ToolSource = ToolSource.BOTH) -> Tool:
    return Tool(name="demo", path="/usr/bin/demo", version="1.0", source=source, global_flags=(Flag(name="--all"),))


def test_store_layout(tmp_path: Path) -> None:
    store = FileCompletionStore(tmp_path)
    tool = make_tool()

    record = store.save_tool(tool)
    bash = store.save_completion("demo", ShellKind.BASH, "# bash\n")
    zsh = store.save_completion("demo", ShellKind.ZSH, "#compdef demo\n")

    assert record == tmp_path / "tools" / "demo.json"
    assert bash == tmp_path / "completions" / "bash" / "demo"
    assert zsh == tmp_path / "completions" / "zsh" / "_demo"
    assert zsh.read_text(encoding="utf-8") == "#compdef demo\n"
    assert store.load_tool("demo") == tool


def test_catalog_round_trip(tmp_path: Path) -> None:
    store = FileCompletionStore(tmp_path)
    catalog = Catalog(last_scan=datetime(2025, 1, 2, tzinfo=UTC))
    catalog.entry_for("demo", "/usr/bin/demo").record_generation(make_tool(), "abc")

    store.save_catalog(catalog)
    loaded = store.load_catalog()

    entry = loaded.tools["demo"]
    assert loaded.last_scan == catalog.last_scan
    assert entry.generated is True
    assert entry.generated_version == "1.0"
    assert entry.content_hash == "abc"
    assert entry.has_help and entry.has_man_page


def test_missing_or_corrupt_catalog_is_empty(tmp_path: Path) -> None:
    store = FileCompletionStore(tmp_path)

    assert store.load_catalog() == Catalog()
    store.catalog_path.write_text("{not json", encoding="utf-8")
    assert store.load_catalog() == Catalog()
    assert store.load_tool("absent") is None


def test_record_scan_keeps_generation_fields() -> None:
    entry = CatalogEntry(name="demo", path="/old", generated=True, generated_version="0.9", content_hash="h")

    entry.record_scan(make_tool(ToolSource.HELP_ONLY))

    assert entry.path == "/usr/bin/demo"
    assert entry.version == "1.0"
    assert entry.generated_version == "0.9"
    assert entry.content_hash == "h"
    assert entry.has_help and not entry.has_man_page
    assert entry.last_scan is not None


@pytest.mark.parametrize("name", ["", "..", "a/b"])
def test_unsafe_names_are_rejected(tmp_path: Path, name: str) -> None:
    with pytest.raises(GenerationError, match="invalid tool name"):
        FileCompletionStore(tmp_path).save_completion(name, ShellKind.BASH, "")


def test_write_failure_becomes_generation_error(tmp_path: Path) -> None:
    blocker = tmp_path / "completions"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(GenerationError, match="cannot write"):
        FileCompletionStore(tmp_path).save_completion("demo", ShellKind.BASH, "# script\n")
