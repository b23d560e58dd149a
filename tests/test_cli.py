# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests driving a small shell script as the documented tool."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tabgen import __version__
from tabgen.catalog import FileCompletionStore
from tabgen.cli.app import app

FAKE_TOOL = """\
#!/bin/sh
case "$1" in
  --version) echo "fake 1.2.3" ;;
  --help|-h)
    cat <<'EOF'
Usage: fake [options] <command>

Commands:
  build   Build it
  test    Run it

Options:
  --format=json|yaml  Output format
  -q, --quiet         Less output
EOF
    ;;
  *) exit 1 ;;
esac
"""


@pytest.fixture
def tool_env(tmp_path: Path, monkeypatch) -> tuple[Path, Path]:
    """Put a fake tool on PATH and point the data directory into ``tmp_path``."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "fake"
    script.write_text(FAKE_TOOL, encoding="utf-8")
    script.chmod(0o755)
    home = tmp_path / "home"
    monkeypatch.setenv("TABGEN_HOME", str(home))
    monkeypatch.delenv("TABGEN_CONFIG", raising=False)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return script, home


def test_version_option() -> None:
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"tabgen {__version__}" in result.stdout


def test_inspect_prints_tool_and_fingerprint(tool_env: tuple[Path, Path]) -> None:
    script, _ = tool_env

    result = CliRunner().invoke(app, ["inspect", "fake", "--quick", "--path", str(script)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["tool"]["version"] == "1.2.3"
    assert payload["tool"]["source"] == "help"
    assert [command["name"] for command in payload["tool"]["subcommands"]] == ["build", "test"]
    assert payload["tool"]["global_flags"][0]["argument_values"] == ["json", "yaml"]
    assert len(payload["content_hash"]) == 64


def test_render_bash(tool_env: tuple[Path, Path]) -> None:
    result = CliRunner().invoke(app, ["render", "fake", "--shell", "bash", "--quick"])

    assert result.exit_code == 0
    assert result.stdout.startswith("# Bash completion for fake\n# Tool version: 1.2.3\n")
    assert "__tabgen_offer \"$cur\" 'build' 'test'" in result.stdout


def test_generate_writes_scripts_then_skips(tool_env: tuple[Path, Path]) -> None:
    _, home = tool_env
    runner = CliRunner()

    first = runner.invoke(app, ["generate", "fake", "--quick", "--jobs", "1", "--no-emoji"])

    assert first.exit_code == 0
    assert (home / "completions" / "bash" / "fake").is_file()
    assert (home / "completions" / "zsh" / "_fake").read_text(encoding="utf-8").startswith("#compdef fake")
    catalog = FileCompletionStore(home).load_catalog()
    entry = catalog.tools["fake"]
    assert entry.generated and entry.generated_version == "1.2.3"
    assert catalog.last_scan is not None

    bash_script = home / "completions" / "bash" / "fake"
    bash_script.write_text("# stale\n", encoding="utf-8")
    second = runner.invoke(app, ["generate", "--quick", "--no-emoji"])

    assert second.exit_code == 0
    assert bash_script.read_text(encoding="utf-8") == "# stale\n"

    forced = runner.invoke(app, ["generate", "--quick", "--force", "--no-emoji"])

    assert forced.exit_code == 0
    assert bash_script.read_text(encoding="utf-8").startswith("# Bash completion for fake")


def test_generate_unknown_tool_fails(tool_env: tuple[Path, Path]) -> None:
    result = CliRunner().invoke(app, ["generate", "tabgen-no-such-tool", "--no-emoji"])

    assert result.exit_code == 1


def test_render_rejects_non_executable(tool_env: tuple[Path, Path]) -> None:
    script, _ = tool_env
    script.chmod(0o644)

    result = CliRunner().invoke(app, ["render", "fake", "--shell", "zsh", "--path", str(script)])

    assert result.exit_code == 1


def test_invalid_config_exits_with_two(tool_env: tuple[Path, Path]) -> None:
    _, home = tool_env
    home.mkdir()
    (home / "config.toml").write_text("[extraction\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["generate"])

    assert result.exit_code == 2
