"""Filesystem helpers: path forms, entry kinds and emptiness checks."""

from __future__ import annotations

import os
import stat
from pathlib import Path

_SEPARATORS = "/\\" if os.name == "nt" else "/"


def _strip_leading_curdir(text: str) -> str | None:
    """Remove a leading current-directory component, or return None if there is none."""
    if not (text == "." or (text[:1] == "." and text[1:2] and text[1:2] in _SEPARATORS)):
        return None
    rest = text[1:]
    while True:
        rest = rest.lstrip(_SEPARATORS)
        if rest == "." or (rest[:1] == "." and rest[1:2] and rest[1:2] in _SEPARATORS):
            rest = rest[1:]
            continue
        return rest


def path_absolute_form(path) -> Path:
    """Return an absolute form of *path*, joined onto the current directory if needed."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    text = os.fspath(path)
    stripped = _strip_leading_curdir(text)
    return Path.cwd() / (stripped if stripped is not None else text)


def absolute_path(path) -> Path:
    """Absolute path without the Windows verbatim prefix."""
    result = path_absolute_form(path)
    if os.name == "nt":
        text = str(result)
        while text.startswith("\\\\?\\"):
            text = text[4:]
        result = Path(text)
    return result


def _has_file_name(text: str) -> bool:
    parts = [
        part
        for index, part in enumerate(text.replace("\\", "/").split("/") if os.name == "nt" else text.split("/"))
        if part and not (part == "." and index > 0)
    ]
    return bool(parts) and parts[-1] not in (".", "..")


def is_existing_directory(path) -> bool:
    """True if *path* is a directory that can actually be resolved."""
    text = os.fspath(path)
    if not os.path.isdir(text):
        return False
    if _has_file_name(text):
        return True
    try:
        os.path.realpath(text, strict=True)
    except OSError:
        return False
    return True


def is_empty(entry) -> bool:
    """True for an empty directory or a zero-length regular file."""
    mode = entry.file_type()
    if mode is None:
        return False
    if stat.S_ISDIR(mode):
        try:
            with os.scandir(entry.path) as entries:
                return next(entries, None) is None
        except OSError:
            return False
    if stat.S_ISREG(mode):
        metadata = entry.metadata()
        return metadata is not None and metadata.st_size == 0
    return False


def is_block_device(mode: int) -> bool:
    return os.name != "nt" and stat.S_ISBLK(mode)


def is_char_device(mode: int) -> bool:
    return os.name != "nt" and stat.S_ISCHR(mode)


def is_socket(mode: int) -> bool:
    return os.name != "nt" and stat.S_ISSOCK(mode)


def is_pipe(mode: int) -> bool:
    return os.name != "nt" and stat.S_ISFIFO(mode)


def osstr_to_bytes(value) -> bytes:
    """Raw bytes of a path or name, lossily decoded on Windows."""
    if os.name == "nt":
        return os.fsdecode(value).encode("utf-8", errors="replace")
    return os.fsencode(value)


def strip_current_dir(path) -> str:
    """Remove the `./` prefix from a path."""
    text = os.fspath(path)
    stripped = _strip_leading_curdir(text)
    return text if stripped is None else stripped


def default_path_separator() -> str | None:
    """'/' under MSYS on Windows, otherwise None for the platform default."""
    if os.name == "nt" and os.environ.get("MSYSTEM"):
        return "/"
    return None