# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from tabgen.logging import ToolLogger


class FakeRunner:
    """Stand-in for ``run_command`` returning canned output keyed by argv."""

    def __init__(self) -> None:
        self.responses: dict[tuple[str, ...], subprocess.CompletedProcess[str] | BaseException] = {}
        self.calls: list[tuple[str, ...]] = []
        self.options: list[object] = []

    def add(self, argv: Sequence[str], stdout: str = "", *, returncode: int = 0, stderr: str = "") -> None:
        command = tuple(argv)
        self.responses[command] = subprocess.CompletedProcess(
            args=list(command),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )

    def fail(self, argv: Sequence[str], exc: BaseException) -> None:
        self.responses[tuple(argv)] = exc

    def __call__(self, args: Sequence[str], *, options: object = None) -> subprocess.CompletedProcess[str]:
        command = tuple(args)
        self.calls.append(command)
        self.options.append(options)
        response = self.responses.get(command)
        if response is None:
            return subprocess.CompletedProcess(args=list(command), returncode=1, stdout="", stderr="")
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Return a runner that answers every unknown command with empty output."""
    return FakeRunner()


@pytest.fixture
def log_buffer() -> StringIO:
    return StringIO()


@pytest.fixture
def logger(log_buffer: StringIO) -> ToolLogger:
    """Return a verbose logger writing plain text into ``log_buffer``."""
    console = Console(file=log_buffer, width=200, color_system=None, soft_wrap=True, emoji=False)
    return ToolLogger(console=console, use_emoji=False, verbose=True, use_color=False)


@pytest.fixture
def executable(tmp_path: Path) -> Path:
    """Return an executable file usable as a tool path."""
    path = tmp_path / "bin" / "demo"
    path.parent.mkdir()
    path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    path.chmod(0o755)
    return path
