# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for version detection."""

from __future__ import annotations

import pytest

from tabgen.parsing.version import VersionDetector, extract_version
from tabgen.probes import ProbeRunner


@pytest.mark.parametrize(
    ("output", "expected"),
    [
        ("git version 2.43.0\n", "2.43.0"),
        ("demo v1.2.3-rc.1 (build 7)\n", "1.2.3-rc.1"),
        ("Version 10.4\nCopyright someone\n", "10.4"),
        ("jq-1.7\n", "1.7"),
        ("nightly\n", "nightly"),
        ("x" * 60 + "\n", ""),
        ("   \n", ""),
    ],
)
def test_extract_version(output: str, expected: str) -> None:
    assert extract_version(output) == expected


def test_detector_tries_flags_in_order(fake_runner) -> None:
    fake_runner.add(["/bin/demo", "--version"], "unknown option\n", returncode=2)
    fake_runner.add(["/bin/demo", "-V"], "demo 3.1.4\n")

    detector = VersionDetector(ProbeRunner(fake_runner), timeout=1.0)

    assert detector.detect("/bin/demo") == "3.1.4"
    assert fake_runner.calls == [("/bin/demo", "--version"), ("/bin/demo", "-V")]


def test_detector_returns_empty_when_nothing_matches(fake_runner) -> None:
    detector = VersionDetector(ProbeRunner(fake_runner), flags=("--version", "version"), timeout=1.0)

    assert detector.detect("/bin/demo") == ""
    assert len(fake_runner.calls) == 2


def test_detector_skips_permission_errors(fake_runner) -> None:
    fake_runner.fail(["/bin/demo", "--version"], PermissionError("Permission denied"))
    fake_runner.add(["/bin/demo", "-V"], "1.0\n")

    detector = VersionDetector(ProbeRunner(fake_runner), flags=("--version", "-V"), timeout=1.0)

    assert detector.detect("/bin/demo") == "1.0"
