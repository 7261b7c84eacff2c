"""Error reporting and process exit codes."""

from __future__ import annotations

import enum
import os
import signal
import sys
from dataclasses import dataclass
from typing import ClassVar, Iterable, NoReturn


def print_error(msg) -> None:
    """Write an error message to standard error."""
    print(f"[fd error]: {msg}", file=sys.stderr)


class _Kind(enum.Enum):
    SUCCESS = "success"
    HAS_RESULTS = "has_results"
    GENERAL_ERROR = "general_error"
    KILLED_BY_SIGINT = "killed_by_sigint"


@dataclass(frozen=True)
class ExitCode:
    """Outcome of a search or command run, convertible to a process exit status."""

    kind: _Kind
    found: bool = False

    SUCCESS: ClassVar[ExitCode]
    GENERAL_ERROR: ClassVar[ExitCode]
    KILLED_BY_SIGINT: ClassVar[ExitCode]

    @classmethod
    def has_results(cls, found) -> ExitCode:
        """Exit code for quiet mode: success if anything was found."""
        return cls(_Kind.HAS_RESULTS, bool(found))

    def code(self) -> int:
        """The numeric process exit status."""
        if self.kind is _Kind.SUCCESS:
            return 0
        if self.kind is _Kind.HAS_RESULTS:
            return 0 if self.found else 1
        if self.kind is _Kind.GENERAL_ERROR:
            return 1
        return 130

    def __int__(self) -> int:
        return self.code()

    def is_error(self) -> bool:
        return self.code() != 0

    def exit(self) -> NoReturn:
        """Terminate the process with this exit code."""
        if self.kind is _Kind.KILLED_BY_SIGINT and os.name == "posix":
            try:
                signal.signal(signal.SIGINT, signal.SIG_DFL)
                signal.raise_signal(signal.SIGINT)
            except (OSError, ValueError):
                pass
        sys.exit(self.code())


ExitCode.SUCCESS = ExitCode(_Kind.SUCCESS)
ExitCode.GENERAL_ERROR = ExitCode(_Kind.GENERAL_ERROR)
ExitCode.KILLED_BY_SIGINT = ExitCode(_Kind.KILLED_BY_SIGINT)


def merge_exitcodes(results: Iterable[ExitCode]) -> ExitCode:
    """Collapse several exit codes: any error makes the whole a general error."""
    if any(code.is_error() for code in results):
        return ExitCode.GENERAL_ERROR
    return ExitCode.SUCCESS