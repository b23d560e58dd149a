# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Time-boxed documentation probes (``--help``, ``man``, version flags)."""

from __future__ import annotations

import errno
import re
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from .errors import ProbePermissionError
from .process import TIMEOUT_RETURNCODE, CommandOptions, RunnerCallable, run_command

MAN_ENV: Final[Mapping[str, str]] = {
    "MANWIDTH": "120",
    "LC_ALL": "C",
    "MANPAGER": "cat",
    "PAGER": "cat",
    "MAN_KEEP_FORMATTING": "",
}
_OVERSTRIKE_RE: Final[re.Pattern[str]] = re.compile(r".\x08")
_MAN_MISSING_MARKERS: Final[tuple[str, ...]] = (
    "no manual entry",
    "no entry for",
    "nothing appropriate",
    "man: no entry",
    "not found",
)
_MAN_ERROR_MAX_CHARS: Final[int] = 300
_PERMISSION_MARKERS: Final[tuple[str, ...]] = ("permission denied", "eacces", "operation not permitted")


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of a single probe invocation."""

    command: tuple[str, ...]
    output: str = ""
    returncode: int | None = None
    timed_out: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Return ``True`` when the probe ran to completion with exit status zero."""

        return self.returncode == 0 and not self.timed_out

    @property
    def has_output(self) -> bool:
        """Return ``True`` when the probe printed anything other than whitespace."""

        return bool(self.output.strip())


def is_permission_error(exc: BaseException) -> bool:
    """Return ``True`` when ``exc`` signals an OS-level permission refusal.

    Args:
        exc: Exception raised while launching a probe.

    Returns:
        bool: ``True`` for ``EACCES``/``EPERM`` class failures; ``False`` for
        missing executables and every other error.
    """

    if isinstance(exc, FileNotFoundError):
        return False
    if isinstance(exc, PermissionError):
        return True
    if isinstance(exc, OSError) and exc.errno in {errno.EACCES, errno.EPERM}:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _PERMISSION_MARKERS)


def strip_overstrike(text: str) -> str:
    """Remove ``X\\bX`` bold and ``_\\bX`` underline sequences from man output."""

    return _OVERSTRIKE_RE.sub("", text)


def is_missing_man_output(text: str) -> bool:
    """Return ``True`` when ``text`` is a short "no manual entry" style message."""

    stripped = text.strip()
    if not stripped:
        return True
    if len(stripped) > _MAN_ERROR_MAX_CHARS:
        return False
    lowered = stripped.lower()
    return any(marker in lowered for marker in _MAN_MISSING_MARKERS)


class ProbeRunner:
    """Run documentation probes through an injectable subprocess runner."""

    def __init__(self, runner: RunnerCallable = run_command) -> None:
        """Initialise the probe runner.

        Args:
            runner: Callable compatible with :func:`tabgen.process.run_command`.
        """

        self._runner = runner

    def run(
        self,
        argv: Sequence[str],
        *,
        timeout: float,
        env: Mapping[str, str] | None = None,
        combine_output: bool = True,
    ) -> ProbeResult:
        """Execute ``argv`` bounded by ``timeout`` seconds.

        Args:
            argv: Command line to execute.
            timeout: Wall clock limit in seconds.
            env: Environment overrides layered onto the current environment.
            combine_output: Append stderr to stdout when ``True``.

        Returns:
            ProbeResult: Captured output. Timeouts, missing executables and
            other launch failures yield an empty result rather than raising.

        Raises:
            ProbePermissionError: If the operating system refuses to run ``argv``.
        """

        command = tuple(argv)
        options = CommandOptions().with_timeout(timeout)
        if env:
            options = options.with_env(env)
        try:
            completed = self._runner(command, options=options)
        except OSError as exc:
            if is_permission_error(exc):
                raise ProbePermissionError(shlex.join(command), exc) from exc
            return ProbeResult(command=command, error=str(exc))
        except ValueError as exc:
            return ProbeResult(command=command, error=str(exc))

        if completed.returncode == TIMEOUT_RETURNCODE:
            return ProbeResult(command=command, returncode=completed.returncode, timed_out=True)
        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        output = stdout + stderr if combine_output else stdout
        return ProbeResult(command=command, output=output, returncode=completed.returncode)

    def help_text(self, path: str, *, timeout: float) -> ProbeResult:
        """Return ``<path> --help`` output, falling back to ``<path> -h``.

        Raises:
            ProbePermissionError: If the tool cannot be executed.
        """

        result = self.run([path, "--help"], timeout=timeout)
        if result.has_output:
            return result
        return self.run([path, "-h"], timeout=timeout)

    def man_page(self, name: str, *, timeout: float) -> ProbeResult:
        """Return the formatted manual page for ``name`` with overstrikes removed.

        Only standard output is considered, and a non-zero exit or a short
        "no manual entry" message produce an empty result.

        Raises:
            ProbePermissionError: If ``man`` cannot be executed.
        """

        result = self.run(["man", name], timeout=timeout, env=MAN_ENV, combine_output=False)
        if not result.succeeded or is_missing_man_output(result.output):
            return ProbeResult(command=result.command, returncode=result.returncode, timed_out=result.timed_out)
        return ProbeResult(
            command=result.command,
            output=strip_overstrike(result.output),
            returncode=result.returncode,
        )

    def subcommand_help(self, invocation: Sequence[str], name: str, *, timeout: float) -> ProbeResult:
        """Return help for ``name`` nested under ``invocation``.

        Tries ``<invocation> <name> --help`` first and ``<invocation> help <name>``
        when that prints nothing. Permission refusals are treated as empty output.

        Args:
            invocation: Executable path followed by any parent command names.
            name: Command whose help should be fetched.
            timeout: Wall clock limit per attempt in seconds.

        Returns:
            ProbeResult: Output of the first attempt that printed anything.
        """

        attempts = ([*invocation, name, "--help"], [*invocation, "help", name])
        result = ProbeResult(command=tuple(attempts[0]))
        for argv in attempts:
            try:
                result = self.run(argv, timeout=timeout)
            except ProbePermissionError as exc:
                result = ProbeResult(command=tuple(argv), error=str(exc))
            if result.has_output:
                return result
        return result


__all__ = [
    "MAN_ENV",
    "ProbeResult",
    "ProbeRunner",
    "is_missing_man_output",
    "is_permission_error",
    "strip_overstrike",
]
