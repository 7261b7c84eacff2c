"""Command-line options of a search and the values derived from them."""

from __future__ import annotations

import enum
import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Optional

from . import filesystem
from .errors import print_error
from .execution import CommandSet

_MAX_DEFAULT_THREADS = 64
_MILLIS = re.compile(r"\+?[0-9]+", re.ASCII)


class _AliasedEnum(enum.Enum):
    """An enum whose members may also be looked up by a short alias."""

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            canonical = cls._aliases().get(value)
            if canonical is not None:
                return cls(canonical)
        return None


class FileType(_AliasedEnum):
    """Kinds of entries that a search may be limited to."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    BLOCK_DEVICE = "block-device"
    CHAR_DEVICE = "char-device"
    EXECUTABLE = "executable"
    EMPTY = "empty"
    SOCKET = "socket"
    PIPE = "pipe"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {
            "f": "file",
            "d": "directory",
            "dir": "directory",
            "l": "symlink",
            "b": "block-device",
            "c": "char-device",
            "x": "executable",
            "e": "empty",
            "s": "socket",
            "p": "pipe",
        }


class ColorWhen(enum.Enum):
    """When to colorize output."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


class StripCwdWhen(enum.Enum):
    """When to strip the leading './' from results."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


class HyperlinkWhen(enum.Enum):
    """When to wrap output paths in terminal hyperlinks."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


def _is_current_dir(text: str) -> bool:
    """True if *text* names the current directory as '.', './', './.' and so on."""
    parts = text.replace("\\", "/").split("/") if os.name == "nt" else text.split("/")
    return parts[0] == "." and all(part in ("", ".") for part in parts[1:])


@dataclass
class Opts:
    """The parsed options of one invocation."""

    hidden: bool = False
    no_ignore: bool = False
    no_ignore_vcs: bool = False
    no_require_git: bool = False
    no_ignore_parent: bool = False
    no_global_ignore_file: bool = False
    unrestricted: int = 0
    case_sensitive: bool = False
    ignore_case: bool = False
    glob: bool = False
    regex: bool = False
    fixed_strings: bool = False
    exprs: Optional[list[str]] = None
    absolute_path: bool = False
    list_details: bool = False
    follow: bool = False
    full_path: bool = False
    null_separator: bool = False
    max_depth: Optional[int] = None
    min_depth: Optional[int] = None
    exact_depth: Optional[int] = None
    exclude: list[str] = field(default_factory=list)
    prune: bool = False
    filetype: Optional[list[FileType]] = None
    extensions: Optional[list[str]] = None
    size: list[Any] = field(default_factory=list)
    changed_within: Optional[str] = None
    changed_before: Optional[str] = None
    owner: Any = None
    format: Optional[str] = None
    command: Optional[CommandSet] = None
    batch_size: int = 0
    ignore_file: list[str] = field(default_factory=list)
    color: ColorWhen = ColorWhen.AUTO
    hyperlink: HyperlinkWhen = HyperlinkWhen.NEVER
    threads: Optional[int] = None
    max_buffer_time: Optional[timedelta] = None
    max_results: Optional[int] = None
    max_one_result: bool = False
    quiet: bool = False
    show_errors: bool = False
    base_directory: Optional[str] = None
    pattern: str = ""
    path_separator: Optional[str] = None
    path: list[str] = field(default_factory=list)
    search_path: list[str] = field(default_factory=list)
    strip_cwd_prefix: Optional[StripCwdWhen] = None
    one_file_system: bool = False

    def __post_init__(self) -> None:
        if self.threads is not None and self.threads < 1:
            raise ValueError("number of threads must be greater than zero")

    def search_paths(self) -> list[str]:
        """The directories to search; non-directories are reported and skipped."""
        paths = self.path or self.search_path
        if not paths:
            current_directory = "./"
            ensure_current_directory_exists(current_directory)
            return [self._normalize_path(current_directory)]
        result = []
        for path in paths:
            if filesystem.is_existing_directory(path):
                result.append(self._normalize_path(path))
            else:
                print_error(f"Search path '{os.fspath(path)}' is not a directory.")
        return result

    def _normalize_path(self, path) -> str:
        text = os.fspath(path)
        if self.absolute_path:
            if not os.path.exists(text):
                raise FileNotFoundError(f"No such file or directory: '{text}'")
            return str(filesystem.absolute_path(os.path.abspath(text)))
        if _is_current_dir(text):
            return "./"
        return text

    def no_search_paths(self) -> bool:
        return not self.path and not self.search_path

    def rg_alias_ignore(self) -> bool:
        """Whether '-u' was given at least once."""
        return self.unrestricted > 0

    def resolved_max_depth(self) -> Optional[int]:
        return self.max_depth if self.max_depth is not None else self.exact_depth

    def resolved_min_depth(self) -> Optional[int]:
        return self.min_depth if self.min_depth is not None else self.exact_depth

    def resolved_threads(self) -> int:
        return self.threads if self.threads is not None else default_num_threads()

    def resolved_max_results(self) -> Optional[int]:
        if self.max_results is not None and self.max_results > 0:
            return self.max_results
        return 1 if self.max_one_result else None

    def strip_cwd_prefix_enabled(self, auto_pred: Callable[[], bool]) -> bool:
        """Whether to strip './'; *auto_pred* decides in automatic mode."""
        if not self.no_search_paths():
            return False
        when = self.strip_cwd_prefix if self.strip_cwd_prefix is not None else StripCwdWhen.AUTO
        if when is StripCwdWhen.AUTO:
            return bool(auto_pred())
        return when is StripCwdWhen.ALWAYS


def default_num_threads() -> int:
    """Available parallelism, at least 1 and at most 64."""
    try:
        available = len(os.sched_getaffinity(0))
    except (AttributeError, OSError):
        available = os.cpu_count() or 1
    return max(1, min(available, _MAX_DEFAULT_THREADS))


def parse_millis(arg: str) -> timedelta:
    """Parse a non-negative number of milliseconds."""
    if not _MILLIS.fullmatch(arg):
        raise ValueError(f"invalid number of milliseconds: {arg!r}")
    return timedelta(milliseconds=int(arg))


def ensure_current_directory_exists(path) -> None:
    """Raise FileNotFoundError if the current directory cannot be used."""
    if not filesystem.is_existing_directory(path):
        raise FileNotFoundError(
            "Could not retrieve current directory (has it been deleted?)."
        )