# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Extraction of command trees from help and man text."""

from __future__ import annotations

from .builder import CommandListBuilder, CommandNodeBuilder, FlagListBuilder
from .classifier import (
    DEFAULT_RULES,
    ClassificationRule,
    LineClassification,
    LineKind,
    Section,
    classify_line,
    parse_command_line,
    parse_flag_line,
    parse_indented_command,
)
from .explorer import SubcommandExplorer
from .extractor import ScanReport, TextExtractor
from .parser import ToolParser, resolve_source, validate_tool_input
from .version import VersionDetector, extract_version

__all__ = [
    "DEFAULT_RULES",
    "ClassificationRule",
    "CommandListBuilder",
    "CommandNodeBuilder",
    "FlagListBuilder",
    "LineClassification",
    "LineKind",
    "ScanReport",
    "Section",
    "SubcommandExplorer",
    "TextExtractor",
    "ToolParser",
    "VersionDetector",
    "classify_line",
    "extract_version",
    "parse_command_line",
    "parse_flag_line",
    "parse_indented_command",
    "resolve_source",
    "validate_tool_input",
]
