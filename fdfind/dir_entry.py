"""A single search result found while walking the filesystem."""

from __future__ import annotations

import functools
import os
import re
import stat

from .filesystem import strip_current_dir

_SEPARATORS = "/\\" if os.name == "nt" else "/"
_SPLIT = re.compile("[" + re.escape(_SEPARATORS) + "]")
_UNSET = object()


def _components(path: str) -> tuple[str, ...]:
    parts: list[str] = []
    if path[:1] and path[:1] in _SEPARATORS:
        parts.append(os.sep)
    for index, part in enumerate(_SPLIT.split(path)):
        if not part or (part == "." and index > 0):
            continue
        parts.append(part)
    return tuple(parts)


@functools.total_ordering
class DirEntry:
    """A path found during traversal, with lazily read metadata."""

    def __init__(self, path, *, depth: int | None, follow_links: bool, broken: bool):
        self.path: str = os.fspath(path)
        self.depth = depth
        self._follow_links = follow_links
        self._broken = broken
        self._metadata = _UNSET

    @classmethod
    def normal(cls, path, depth, follow_links) -> DirEntry:
        """An entry found by the walker at the given depth."""
        return cls(path, depth=depth, follow_links=follow_links, broken=False)

    @classmethod
    def broken_symlink(cls, path) -> DirEntry:
        """An entry for a symlink whose target does not exist."""
        return cls(path, depth=None, follow_links=False, broken=True)

    def stripped_path(self, config) -> str:
        """The path as it should be presented to the user."""
        if config.strip_cwd_prefix:
            return strip_current_dir(self.path)
        return self.path

    def metadata(self) -> os.stat_result | None:
        """Stat result of the entry, or None if it cannot be read."""
        if self._metadata is _UNSET:
            follow = self._follow_links and not self._broken
            try:
                self._metadata = os.stat(self.path) if follow else os.lstat(self.path)
            except OSError:
                self._metadata = None
        return self._metadata

    def file_type(self) -> int | None:
        """The file-type bits of the entry's mode, or None if unknown."""
        metadata = self.metadata()
        return None if metadata is None else stat.S_IFMT(metadata.st_mode)

    def file_name(self) -> str:
        """The final component of the path."""
        parts = _components(self.path)
        if self._broken:
            return parts[-1] if parts else self.path
        if parts and parts[-1] not in (".", "..", os.sep):
            return parts[-1]
        return self.path

    def __eq__(self, other):
        if not isinstance(other, DirEntry):
            return NotImplemented
        return _components(self.path) == _components(other.path)

    def __lt__(self, other):
        if not isinstance(other, DirEntry):
            return NotImplemented
        return _components(self.path) < _components(other.path)

    def __hash__(self):
        return hash(_components(self.path))

    def __repr__(self):
        return f"DirEntry({self.path!r}, depth={self.depth!r})"