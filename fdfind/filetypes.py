"""Filtering of search results by the kind of filesystem entry."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass

from .filesystem import is_block_device, is_char_device, is_empty, is_pipe, is_socket


def _is_executable(path: str) -> bool:
    effective = os.access in os.supports_effective_ids
    return os.access(path, os.X_OK, effective_ids=effective)


@dataclass
class FileTypes:
    """Which kinds of entries to show."""

    files: bool = False
    directories: bool = False
    symlinks: bool = False
    block_devices: bool = False
    char_devices: bool = False
    sockets: bool = False
    pipes: bool = False
    executables_only: bool = False
    empty_only: bool = False

    def should_ignore(self, entry) -> bool:
        """True if the entry is not one of the selected kinds."""
        mode = entry.file_type()
        if mode is None:
            return True
        known = (
            stat.S_ISREG(mode)
            or stat.S_ISDIR(mode)
            or stat.S_ISLNK(mode)
            or is_block_device(mode)
            or is_char_device(mode)
            or is_socket(mode)
            or is_pipe(mode)
        )
        return (
            (not self.files and stat.S_ISREG(mode))
            or (not self.directories and stat.S_ISDIR(mode))
            or (not self.symlinks and stat.S_ISLNK(mode))
            or (not self.block_devices and is_block_device(mode))
            or (not self.char_devices and is_char_device(mode))
            or (not self.sockets and is_socket(mode))
            or (not self.pipes and is_pipe(mode))
            or (self.executables_only and not _is_executable(entry.path))
            or (self.empty_only and not is_empty(entry))
            or not known
        )