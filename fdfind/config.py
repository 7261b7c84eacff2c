"""Settings that govern a search run."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional

from .filetypes import FileTypes


@dataclass
class Config:
    """Configuration options for a search."""

    case_sensitive: bool = False
    search_full_path: bool = False
    ignore_hidden: bool = True
    read_fdignore: bool = True
    read_parent_ignore: bool = True
    read_vcsignore: bool = True
    require_git_to_read_vcsignore: bool = True
    read_global_ignore: bool = True
    follow_links: bool = False
    one_file_system: bool = False
    null_separator: bool = False
    max_depth: Optional[int] = None
    min_depth: Optional[int] = None
    prune: bool = False
    threads: int = 1
    quiet: bool = False
    max_buffer_time: Optional[float] = None
    ls_colors: Any = None
    interactive_terminal: bool = False
    file_types: Optional[FileTypes] = None
    extensions: Any = None
    format: Any = None
    command: Any = None
    batch_size: int = 0
    exclude_patterns: list[str] = field(default_factory=list)
    ignore_files: list[str] = field(default_factory=list)
    size_constraints: list[Any] = field(default_factory=list)
    time_constraints: list[Any] = field(default_factory=list)
    owner_constraint: Any = None
    show_filesystem_errors: bool = False
    path_separator: Optional[str] = None
    actual_path_separator: str = os.sep
    max_results: Optional[int] = None
    strip_cwd_prefix: bool = False
    hyperlink: bool = False

    def is_printing(self) -> bool:
        """Whether results are printed rather than passed to a command."""
        return self.command is None