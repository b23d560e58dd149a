# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Concurrent extraction and generation across many tools."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final

from .catalog import Catalog, CatalogEntry, CompletionStore
from .config import ExtractionConfig, GenerationLimits, ShellKind, default_parallel_jobs
from .errors import GenerationError, ProbePermissionError, ToolInputError
from .generators import CompletionGenerator, generate_completion, get_generator
from .logging import ToolLogger, null_logger
from .models import Tool, ToolSource
from .parsing import ToolParser
from .process import RunnerCallable, run_command

HASH_CHANGED_REASON: Final[str] = "help output changed"
FIRST_GENERATION_REASON: Final[str] = "first generation"
FORCED_REASON: Final[str] = "forced regeneration"


class GenerationStatus(StrEnum):
    """Per-tool outcome of a pipeline run."""

    SKIPPED = "skipped"
    GENERATED = "generated"
    VERSION_CHANGED = "regenerated-version-changed"
    HASH_CHANGED = "regenerated-hash-changed"
    FAILED = "failed"

    @property
    def succeeded(self) -> bool:
        """Return ``True`` for outcomes that wrote completion scripts."""

        return self in _SUCCESS_STATUSES


_SUCCESS_STATUSES: Final[frozenset[GenerationStatus]] = frozenset(
    {GenerationStatus.GENERATED, GenerationStatus.VERSION_CHANGED, GenerationStatus.HASH_CHANGED},
)


@dataclass(frozen=True, slots=True)
class GenerationTask:
    """One unit of work: a tool and its cached record, if any."""

    name: str
    path: str
    entry: CatalogEntry | None = None


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Outcome for a single tool."""

    name: str
    status: GenerationStatus
    reason: str = ""
    tool: Tool | None = None
    content_hash: str = ""
    warnings: tuple[str, ...] = ()


@dataclass(slots=True)
class GenerationSummary:
    """Aggregated results of a pipeline run."""

    results: list[ToolResult] = field(default_factory=list)

    def add(self, result: ToolResult) -> None:
        """Append ``result``."""

        self.results.append(result)

    @property
    def succeeded(self) -> int:
        """Return the number of tools whose scripts were written."""

        return sum(1 for result in self.results if result.status.succeeded)

    @property
    def skipped(self) -> int:
        """Return the number of unchanged tools."""

        return sum(1 for result in self.results if result.status is GenerationStatus.SKIPPED)

    @property
    def failed(self) -> int:
        """Return the number of tools that failed."""

        return sum(1 for result in self.results if result.status is GenerationStatus.FAILED)

    def reasons(self) -> dict[str, str]:
        """Return the reason string of every non-skipped result keyed by tool name."""

        return {
            result.name: result.reason for result in self.results if result.status is not GenerationStatus.SKIPPED
        }


def classify_change(
    entry: CatalogEntry | None,
    tool: Tool,
    content_hash: str,
    *,
    force: bool = False,
) -> tuple[GenerationStatus, str]:
    """Decide whether ``tool`` must be regenerated.

    Args:
        entry: Cached record from the previous run.
        tool: Freshly extracted tool.
        content_hash: Fingerprint of ``tool``.
        force: Regenerate even when nothing changed.

    Returns:
        tuple[GenerationStatus, str]: Outcome and a human readable reason.
    """

    if entry is None or not entry.generated or not entry.content_hash:
        return GenerationStatus.GENERATED, FIRST_GENERATION_REASON
    if entry.generated_version != tool.version:
        return GenerationStatus.VERSION_CHANGED, f"version changed ({entry.generated_version} → {tool.version})"
    if entry.content_hash != content_hash:
        return GenerationStatus.HASH_CHANGED, HASH_CHANGED_REASON
    if force:
        return GenerationStatus.GENERATED, FORCED_REASON
    return GenerationStatus.SKIPPED, ""


@dataclass(slots=True)
class _Worker:
    """Extraction and generation instances owned by a single worker thread."""

    parser: ToolParser
    generators: tuple[CompletionGenerator, ...]


class GenerationPipeline:
    """Extract, fingerprint and generate completions for many tools in parallel.

    Each worker thread lazily builds its own :class:`ToolParser` and
    generators. Results are funnelled back to the calling thread, which is the
    only place catalog entries are updated.
    """

    def __init__(
        self,
        store: CompletionStore,
        *,
        extraction: ExtractionConfig | None = None,
        limits: GenerationLimits | None = None,
        shells: Sequence[ShellKind] = (ShellKind.BASH, ShellKind.ZSH),
        jobs: int | None = None,
        force: bool = False,
        runner: RunnerCallable = run_command,
        logger: ToolLogger | None = None,
        parser_factory: Callable[[], ToolParser] | None = None,
    ) -> None:
        """Initialise the pipeline.

        Args:
            store: Persistence collaborator receiving records and scripts.
            extraction: Extraction bounds handed to every parser.
            limits: Generation guards.
            shells: Shells to generate scripts for.
            jobs: Worker count; defaults to the number of available CPUs.
            force: Regenerate even when nothing changed.
            runner: Subprocess runner used by the default parser factory.
            logger: Logger shared by all workers.
            parser_factory: Callable building one parser per worker.
        """

        self._store = store
        self._extraction = extraction or ExtractionConfig()
        self._limits = limits or GenerationLimits()
        self._shells = tuple(shells)
        self._jobs = jobs if jobs is not None else default_parallel_jobs()
        self._force = force
        self._runner = runner
        self._logger = logger or null_logger()
        self._parser_factory = parser_factory or self._default_parser
        self._local = threading.local()

    def worker_count(self, task_count: int) -> int:
        """Return the pool width for ``task_count`` tasks, never more than the tasks."""

        return max(1, min(self._jobs, task_count))

    def run(self, tasks: Sequence[GenerationTask], catalog: Catalog | None = None) -> GenerationSummary:
        """Process every task and return the aggregated summary.

        Tools whose documentation could not be obtained (``source`` is
        ``none``) are left out of the summary. When ``catalog`` is supplied,
        its entries are updated from each result as it arrives.

        Args:
            tasks: Fully enumerated work list.
            catalog: Catalog to update with versions and fingerprints.

        Returns:
            GenerationSummary: Per-tool results in completion order.
        """

        summary = GenerationSummary()
        if not tasks:
            return summary

        workers = self.worker_count(len(tasks))
        self._logger.debug(f"generation tasks={len(tasks)} workers={workers} force={self._force}")
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tabgen") as executor:
            future_map = {executor.submit(self.process, task): task for task in tasks}
            for future in as_completed(future_map):
                task = future_map[future]
                try:
                    result = future.result()
                except Exception as exc:
                    # One tool must not abort the batch.
                    self._logger.debug(f"worker error tool={task.name} error={exc!r}")
                    result = ToolResult(
                        name=task.name,
                        status=GenerationStatus.FAILED,
                        reason=f"unexpected error: {exc}",
                    )
                if result is None:
                    continue
                summary.add(result)
                self._report(result)
                if catalog is not None:
                    self._apply(catalog, task, result)
        return summary

    def process(self, task: GenerationTask) -> ToolResult | None:
        """Extract and generate a single tool.

        Returns:
            ToolResult | None: Outcome, or ``None`` when the tool produced no
            usable documentation.
        """

        worker = self._worker()
        try:
            tool = worker.parser.parse(task.name, task.path)
        except (ToolInputError, ProbePermissionError) as exc:
            return ToolResult(name=task.name, status=GenerationStatus.FAILED, reason=str(exc))

        if tool.source is ToolSource.NONE:
            self._logger.debug(f"excluded tool={task.name} source=none")
            return None

        content_hash = tool.content_hash()
        status, reason = classify_change(task.entry, tool, content_hash, force=self._force)
        if status is GenerationStatus.SKIPPED:
            return ToolResult(name=tool.name, status=status, tool=tool, content_hash=content_hash)

        warnings: list[str] = []
        try:
            self._store.save_tool(tool)
            for generator in worker.generators:
                result = generate_completion(generator, tool, self._limits, logger=self._logger)
                self._store.save_completion(tool.name, generator.shell, result.script)
                warnings.extend(result.warnings)
        except GenerationError as exc:
            return ToolResult(name=tool.name, status=GenerationStatus.FAILED, reason=str(exc), tool=tool)

        return ToolResult(
            name=tool.name,
            status=status,
            reason=reason,
            tool=tool,
            content_hash=content_hash,
            warnings=tuple(warnings),
        )

    def _default_parser(self) -> ToolParser:
        return ToolParser(self._extraction, runner=self._runner, logger=self._logger)

    def _worker(self) -> _Worker:
        worker: _Worker | None = getattr(self._local, "worker", None)
        if worker is None:
            worker = _Worker(
                parser=self._parser_factory(),
                generators=tuple(get_generator(shell) for shell in self._shells),
            )
            self._local.worker = worker
        return worker

    def _report(self, result: ToolResult) -> None:
        logger = self._logger
        if result.status is GenerationStatus.FAILED:
            logger.fail(f"{result.name}: {result.reason}")
        elif result.status is GenerationStatus.GENERATED:
            logger.ok(f"{result.name}: generated ({result.reason})")
        elif result.status.succeeded:
            logger.info(f"{result.name}: regenerated, {result.reason}")
        else:
            logger.debug(f"unchanged tool={result.name}")

    @staticmethod
    def _apply(catalog: Catalog, task: GenerationTask, result: ToolResult) -> None:
        if result.tool is None:
            return
        entry = catalog.entry_for(task.name, task.path)
        if result.status.succeeded:
            entry.record_generation(result.tool, result.content_hash)
        else:
            entry.record_scan(result.tool)


__all__ = [
    "GenerationPipeline",
    "GenerationStatus",
    "GenerationSummary",
    "GenerationTask",
    "ToolResult",
    "classify_change",
]
