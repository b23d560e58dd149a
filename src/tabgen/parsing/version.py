# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Version detection from ``--version`` style probes."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Final

from ..config import DEFAULT_VERSION_FLAGS, DEFAULT_VERSION_TIMEOUT
from ..errors import ProbePermissionError
from ..logging import ToolLogger, null_logger
from ..probes import ProbeRunner

VERBATIM_VERSION_MAX_CHARS: Final[int] = 50
VERSION_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    # "version 1.2.3", "v1.2.3", "1.2.3-rc.1"
    re.compile(r"(?:version\s+)?v?(\d+\.\d+(?:\.\d+)?(?:[-+][a-zA-Z0-9.]+)?)", re.IGNORECASE),
    # bare number at line start
    re.compile(r"^(\d+\.\d+(?:\.\d+)?)", re.MULTILINE),
)


def extract_version(output: str) -> str:
    """Return the version token found on the first line of ``output``.

    Args:
        output: Text printed by a version probe.

    Returns:
        str: Matched version, the first line itself when it is short and no
        pattern matched, or ``""`` when nothing usable was printed.
    """

    stripped = output.strip()
    if not stripped:
        return ""
    first_line = stripped.splitlines()[0].strip()
    for pattern in VERSION_PATTERNS:
        match = pattern.search(first_line)
        if match:
            return match.group(1)
    if 0 < len(first_line) < VERBATIM_VERSION_MAX_CHARS:
        return first_line
    return ""


class VersionDetector:
    """Try version flags in order until one yields a version."""

    def __init__(
        self,
        probes: ProbeRunner,
        *,
        flags: Sequence[str] = DEFAULT_VERSION_FLAGS,
        timeout: float = DEFAULT_VERSION_TIMEOUT,
        logger: ToolLogger | None = None,
    ) -> None:
        self._probes = probes
        self._flags = tuple(flags)
        self._timeout = timeout
        self._logger = logger or null_logger()

    def detect(self, path: str) -> str:
        """Return the version reported by ``path`` or ``""`` when none is found.

        Only probes that exit successfully are considered. Permission refusals
        and timeouts move on to the next flag.
        """

        for flag in self._flags:
            try:
                result = self._probes.run([path, flag], timeout=self._timeout)
            except ProbePermissionError as exc:
                self._logger.debug(f"version probe flag={flag} error={exc}")
                continue
            if not result.succeeded:
                continue
            version = extract_version(result.output)
            if version:
                self._logger.debug(f"version probe flag={flag} version={version!r}")
                return version
        return ""


__all__ = ["VERSION_PATTERNS", "VersionDetector", "extract_version"]
