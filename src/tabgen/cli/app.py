# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point for tabgen."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Annotated

import typer

from .. import __version__
from ..catalog import Catalog, FileCompletionStore
from ..errors import GenerationError, ProbePermissionError, ToolInputError
from ..generators import generate_completion, get_generator
from ..logging import ToolLogger
from ..models import Tool, ToolSource
from ..parsing import ToolParser
from ..pipeline import GenerationPipeline, GenerationTask
from .shared import (
    CONFIG_OPTION,
    DEPTH_OPTION,
    EMOJI_OPTION,
    FORCE_OPTION,
    JOBS_OPTION,
    PATH_OPTION,
    QUICK_OPTION,
    SHELL_OPTION,
    VERBOSE_OPTION,
    CLIError,
    build_cli_logger,
    load_cli_config,
    resolve_executable,
)

app = typer.Typer(
    name="tabgen",
    help="Generate bash and zsh completions from --help and man pages.",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tabgen {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Generate bash and zsh completions from --help and man pages."""


def _build_tasks(
    names: list[str],
    catalog: Catalog,
    logger: ToolLogger,
) -> tuple[list[GenerationTask], int]:
    """Return tasks for ``names`` (or the whole catalog) and the unresolved count."""

    tasks: list[GenerationTask] = []
    if not names:
        for name, entry in sorted(catalog.tools.items()):
            tasks.append(GenerationTask(name=name, path=entry.path, entry=entry))
        return tasks, 0

    unresolved = 0
    for name in dict.fromkeys(names):
        entry = catalog.tools.get(name)
        try:
            path = entry.path if entry is not None else resolve_executable(name)
        except CLIError as exc:
            logger.fail(str(exc))
            unresolved += 1
            continue
        tasks.append(GenerationTask(name=name, path=path, entry=entry))
    return tasks, unresolved


def _parse_single(parser: ToolParser, name: str, path: str) -> Tool:
    try:
        tool = parser.parse(name, path)
    except (ToolInputError, ProbePermissionError) as exc:
        raise CLIError(str(exc)) from exc
    if tool.source is ToolSource.NONE:
        raise CLIError(f"{name}: no help output or man page found")
    return tool


@app.command("generate")
def generate_command(
    tools: Annotated[list[str] | None, typer.Argument(help="Tools to generate; defaults to every catalog entry.")] = None,
    force: FORCE_OPTION = False,
    jobs: JOBS_OPTION = None,
    depth: DEPTH_OPTION = None,
    quick: QUICK_OPTION = False,
    verbose: VERBOSE_OPTION = False,
    emoji: EMOJI_OPTION = True,
    config: CONFIG_OPTION = None,
) -> None:
    """Extract tools and write their completion scripts, skipping unchanged ones."""

    try:
        cfg = load_cli_config(config, verbose=verbose, emoji=emoji, depth=depth, quick=quick)
    except CLIError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=exc.exit_code) from exc
    if jobs is not None:
        cfg.generation.jobs = jobs
    if force:
        cfg.generation.force = True

    logger = build_cli_logger(cfg)
    store = FileCompletionStore(cfg.home)
    catalog = store.load_catalog()
    tasks, unresolved = _build_tasks(list(tools or ()), catalog, logger)
    if not tasks:
        if unresolved:
            raise typer.Exit(code=1)
        logger.warn("no tools to generate")
        return

    pipeline = GenerationPipeline(
        store,
        extraction=cfg.extraction,
        limits=cfg.limits,
        shells=cfg.generation.shells,
        jobs=cfg.generation.jobs,
        force=cfg.generation.force,
        logger=logger,
    )
    summary = pipeline.run(tasks, catalog)
    catalog.last_scan = datetime.now(UTC)
    try:
        store.save_catalog(catalog)
    except GenerationError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc

    logger.info(f"succeeded={summary.succeeded} skipped={summary.skipped} failed={summary.failed}")
    if summary.failed or unresolved:
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect_command(
    name: Annotated[str, typer.Argument(help="Tool to extract.")],
    path: PATH_OPTION = None,
    depth: DEPTH_OPTION = None,
    quick: QUICK_OPTION = False,
    verbose: VERBOSE_OPTION = False,
    emoji: EMOJI_OPTION = True,
    config: CONFIG_OPTION = None,
) -> None:
    """Print the extracted command tree of NAME as JSON together with its fingerprint."""

    logger: ToolLogger | None = None
    try:
        cfg = load_cli_config(config, verbose=verbose, emoji=emoji, depth=depth, quick=quick)
        logger = build_cli_logger(cfg)
        parser = ToolParser(cfg.extraction, logger=logger)
        tool = _parse_single(parser, name, resolve_executable(name, path))
    except CLIError as exc:
        _report_cli_error(exc, logger)
        raise typer.Exit(code=exc.exit_code) from exc

    payload = {"tool": tool.model_dump(mode="json"), "content_hash": tool.content_hash()}
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command("render")
def render_command(
    name: Annotated[str, typer.Argument(help="Tool to render completions for.")],
    shell: SHELL_OPTION,
    path: PATH_OPTION = None,
    depth: DEPTH_OPTION = None,
    quick: QUICK_OPTION = False,
    verbose: VERBOSE_OPTION = False,
    emoji: EMOJI_OPTION = True,
    config: CONFIG_OPTION = None,
) -> None:
    """Print the completion script for NAME without writing anything."""

    logger: ToolLogger | None = None
    try:
        cfg = load_cli_config(config, verbose=verbose, emoji=emoji, depth=depth, quick=quick)
        logger = build_cli_logger(cfg)
        parser = ToolParser(cfg.extraction, logger=logger)
        tool = _parse_single(parser, name, resolve_executable(name, path))
    except CLIError as exc:
        _report_cli_error(exc, logger)
        raise typer.Exit(code=exc.exit_code) from exc

    result = generate_completion(get_generator(shell), tool, cfg.limits, logger=logger)
    typer.echo(result.script, nl=False)


def _report_cli_error(exc: CLIError, logger: ToolLogger | None) -> None:
    if logger is None:
        typer.echo(str(exc), err=True)
    else:
        logger.fail(str(exc))


def main() -> None:
    """Run the tabgen command-line interface."""

    app()


__all__ = ["app", "main"]
