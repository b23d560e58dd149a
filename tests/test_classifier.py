# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the line classification rules."""

from __future__ import annotations

import pytest

from tabgen.parsing.classifier import (
    DEFAULT_RULES,
    ClassificationRule,
    LineClassification,
    LineKind,
    Section,
    classify_line,
    detect_section,
    is_man_section_header,
    is_valid_command_name,
    parse_command_line,
    parse_flag_line,
    parse_indented_command,
    split_columns,
)


def test_flag_with_choice_list() -> None:
    flag = parse_flag_line("  --format=json|yaml  Output format")

    assert flag is not None
    assert flag.name == "--format"
    assert flag.arg == "value"
    assert flag.argument_values == ("json", "yaml")
    assert flag.description == "Output format"


def test_flag_with_short_and_placeholder() -> None:
    flag = parse_flag_line("  -o, --output <file>   Write the result here")

    assert flag is not None
    assert flag.name == "--output"
    assert flag.short == "-o"
    assert flag.arg == "file"
    assert flag.argument_values == ()


@pytest.mark.parametrize(
    ("line", "arg", "choices"),
    [
        ("--color {auto,always,never}  When to colour", "value", ("auto", "always", "never")),
        ("--level (low|high)  Level", "value", ("low", "high")),
        ("--mode <fast|slow>  Mode", "value", ("fast", "slow")),
        ("--depth[=N]  Optional depth", "N", ()),
        ("--verbose  Chatty", "", ()),
    ],
)
def test_flag_argument_forms(line: str, arg: str, choices: tuple[str, ...]) -> None:
    flag = parse_flag_line(line)

    assert flag is not None
    assert flag.arg == arg
    assert flag.argument_values == choices


def test_short_only_flag_is_promoted_to_name() -> None:
    flag = parse_flag_line("  -q  Quiet output")

    assert flag is not None
    assert flag.name == "-q"
    assert flag.short == ""
    assert flag.identity == "-q"


def test_required_marker_detected() -> None:
    flag = parse_flag_line("  --token TOKEN  API token (REQUIRED)")

    assert flag is not None
    assert flag.required is True


def test_non_flag_line_is_rejected() -> None:
    assert parse_flag_line("usage: demo [options]") is None
    assert parse_flag_line("-") is None


def test_command_aliases_and_longest_name() -> None:
    command = parse_command_line("  rm, remove, del   Delete an entry")

    assert command is not None
    assert command.name == "remove"
    assert command.aliases == ("rm", "del")
    assert command.description == "Delete an entry"


def test_command_alias_tie_keeps_first_listed() -> None:
    command = parse_command_line("  ls, ll  List entries")

    assert command is not None
    assert command.name == "ls"
    assert command.aliases == ("ll",)


def test_command_line_with_invalid_name_is_rejected() -> None:
    assert parse_command_line("  foo/bar  Not a command") is None
    assert parse_command_line("  --flag  Not a command") is None
    assert parse_command_line("  " + "x" * 31 + "  Too long") is None


def test_indented_command_requires_description() -> None:
    command = parse_indented_command("   clone     Clone a repository")

    assert command is not None
    assert command.name == "clone"
    assert command.description == "Clone a repository"
    assert parse_indented_command("   clone") is None
    assert parse_indented_command("clone     Not indented") is None
    assert parse_indented_command("   (see below)   note") is None


def test_split_columns_on_tab_and_spaces() -> None:
    assert split_columns("build\tBuild it") == ("build", "Build it")
    assert split_columns("build   Build  it") == ("build", "Build  it")
    assert split_columns("build") == ("build", "")


@pytest.mark.parametrize(
    ("header", "section"),
    [
        ("Commands:", Section.COMMANDS),
        ("Available Commands:", Section.COMMANDS),
        ("SUBCOMMANDS:", Section.COMMANDS),
        ("commands", Section.COMMANDS),
        ("Options:", Section.OPTIONS),
        ("Global Flags:", Section.OPTIONS),
        ("flags", Section.OPTIONS),
        ("Usage: demo", None),
    ],
)
def test_detect_section(header: str, section: Section | None) -> None:
    assert detect_section(header) is section


def test_valid_command_names() -> None:
    assert is_valid_command_name("build_all-2")
    assert not is_valid_command_name("")
    assert not is_valid_command_name("a.b")


def test_man_section_headers() -> None:
    assert is_man_section_header("SEE ALSO")
    assert is_man_section_header("DESCRIPTION of things")
    assert not is_man_section_header("DESCRIPTIONS")


def test_classify_uses_section_context() -> None:
    commands_line = classify_line("  build   Build it", Section.COMMANDS)
    indented_line = classify_line("  build   Build it", Section.NONE)
    options_line = classify_line("  build   Build it", Section.OPTIONS)

    assert commands_line.kind is LineKind.COMMAND
    assert commands_line.rule == "structured_command"
    assert indented_line.rule == "indented_command"
    assert options_line.kind is LineKind.NOISE


def test_classify_inline_flag_outside_options() -> None:
    result = classify_line("  -v, --verbose  Verbose output", Section.COMMANDS)

    assert result.kind is LineKind.FLAG
    assert result.rule == "inline_flag"
    assert result.flag is not None and result.flag.name == "--verbose"


def test_header_classification_switches_section() -> None:
    result = classify_line("Options:", Section.COMMANDS)

    assert result.kind is LineKind.OPTIONS_HEADER
    assert result.section is Section.OPTIONS
    assert classify_line("   ").kind is LineKind.BLANK


def test_custom_rule_takes_priority() -> None:
    def ignore_todo(context):
        if context.trimmed.startswith("TODO"):
            return LineClassification(LineKind.NOISE, "ignore_todo")
        return None

    rules = (ClassificationRule("ignore_todo", ignore_todo), *DEFAULT_RULES)

    assert classify_line("  TODO  later", Section.NONE, rules).rule == "ignore_todo"
    assert classify_line("  build  Build it", Section.NONE, rules).kind is LineKind.COMMAND
