# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the subprocess wrapper."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from tabgen.process import TIMEOUT_RETURNCODE, CommandOptions, SubprocessExecutionError, run_command


def test_with_timeout_rejects_negative() -> None:
    with pytest.raises(ValueError):
        CommandOptions().with_timeout(-1)


def test_with_env_layers_overrides(monkeypatch) -> None:
    monkeypatch.setenv("TABGEN_PROBE", "base")

    options = CommandOptions().with_env({"LC_ALL": "C"})

    assert options.env is not None
    assert options.env["LC_ALL"] == "C"
    assert options.env["TABGEN_PROBE"] == "base"


def test_missing_executable_raises() -> None:
    with pytest.raises(FileNotFoundError):
        run_command(["tabgen-definitely-missing-binary"])


def test_empty_command_raises() -> None:
    with pytest.raises(ValueError):
        run_command([])


def test_timeout_becomes_completed_process(monkeypatch) -> None:
    def fake_run(*args, **kwargs):
        raise subprocess.TimeoutExpired(cmd=args[0], timeout=kwargs["timeout"], output=b"partial")

    monkeypatch.setattr(subprocess, "run", fake_run)

    completed = run_command(["/bin/demo", "--help"], options=CommandOptions(timeout=1.5))

    assert completed.returncode == TIMEOUT_RETURNCODE
    assert completed.stdout == "partial"
    assert "timed out after 1.5s" in completed.stderr


def test_check_raises_on_failure(monkeypatch) -> None:
    def fake_run(args, **kwargs):
        return subprocess.CompletedProcess(args=args, returncode=3, stdout="", stderr="boom")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(SubprocessExecutionError, match="exited with status 3"):
        run_command([str(Path("/bin/demo"))], options=CommandOptions(check=True))
