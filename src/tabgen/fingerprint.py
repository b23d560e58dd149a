# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Content fingerprints used to detect drift in extracted command trees."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from .models import Command, Flag, Tool

_HASH_ENCODING: Final[str] = "utf-8"
SUBCOMMANDS_FIELD: Final[str] = "subcommands"
GLOBAL_FLAGS_FIELD: Final[str] = "global_flags"


def compute_fingerprint(subcommands: Sequence[Command], global_flags: Sequence[Flag]) -> str:
    """Return a SHA-256 digest over the canonical form of a command tree.

    Only the two content lists participate; identity, version, timestamp and
    source are never part of the payload. List order is preserved, so a
    reordering of flags in the help output yields a different digest.

    Args:
        subcommands: Top-level commands, including their nested trees.
        global_flags: Flags available to every command.

    Returns:
        str: 64 character hexadecimal digest.
    """

    payload = {
        SUBCOMMANDS_FIELD: [command.model_dump(mode="json") for command in subcommands],
        GLOBAL_FLAGS_FIELD: [flag.model_dump(mode="json") for flag in global_flags],
    }
    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(serialized.encode(_HASH_ENCODING), usedforsecurity=False).hexdigest()


def tool_fingerprint(tool: Tool) -> str:
    """Return the fingerprint of ``tool``'s extracted content."""

    return compute_fingerprint(tool.subcommands, tool.global_flags)


__all__ = ["compute_fingerprint", "tool_fingerprint"]
