"""Command templates with path placeholders, run per result or in batches."""

from __future__ import annotations

import enum
import errno
import os
import re
import subprocess
import threading
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .command import execute_commands, handle_cmd_error
from .errors import ExitCode, merge_exitcodes
from .filesystem import strip_current_dir


class ExecutionMode(enum.Enum):
    """How a command set is run over the results."""

    ONE_BY_ONE = "one-by-one"
    BATCH = "batch"


class Token(enum.Enum):
    """A placeholder inside a command argument."""

    PLACEHOLDER = "{}"
    BASENAME = "{/}"
    PARENT = "{//}"
    NO_EXT = "{.}"
    BASENAME_NO_EXT = "{/.}"


_PATTERNS = ("{{", "}}", "{}", "{/}", "{//}", "{.}", "{/.}")
_TOKEN_FOR = {token.value: token for token in Token}

_SEPARATORS = "/\\" if os.name == "nt" else "/"
_SPLIT = re.compile("[" + re.escape(_SEPARATORS) + "]")


def _find_pattern(text: str) -> Optional[tuple[str, int, int]]:
    """The pattern occurrence that ends first in *text*."""
    for end in range(1, len(text) + 1):
        for pattern in _PATTERNS:
            if text.endswith(pattern, 0, end):
                return pattern, end - len(pattern), end
    return None


def _split_path(path: str) -> tuple[str, bool, list[str]]:
    drive, rest = os.path.splitdrive(path)
    has_root = bool(rest) and rest[0] in _SEPARATORS
    names = [
        part
        for index, part in enumerate(_SPLIT.split(rest))
        if part and not (part == "." and index > 0)
    ]
    return drive, has_root, names


def _file_name(path: str) -> Optional[str]:
    _, _, names = _split_path(path)
    if names and names[-1] not in (".", ".."):
        return names[-1]
    return None


def _basename(path: str) -> str:
    name = _file_name(path)
    return path if name is None else name


def _file_stem(path: str) -> Optional[str]:
    name = _file_name(path)
    if name is None:
        return None
    dot = name.rfind(".")
    return name if dot <= 0 else name[:dot]


def _parent(path: str) -> Optional[str]:
    drive, has_root, names = _split_path(path)
    if not names:
        return None
    return drive + (os.sep if has_root else "") + os.sep.join(names[:-1])


def _dirname(path: str) -> str:
    parent = _parent(path)
    if parent is None:
        return path
    return parent or "."


def _remove_extension(path: str) -> str:
    stem = _file_stem(path)
    joined = os.path.join(_dirname(path), path if stem is None else stem)
    return strip_current_dir(joined)


def _replace_separator(path: str, separator: Optional[str]) -> str:
    if separator is None:
        return path
    drive, has_root, names = _split_path(path)
    out = ""
    if drive:
        if drive[:2] in ("\\\\", "//"):
            out += separator * 2 + separator.join(p for p in _SPLIT.split(drive[2:]) if p)
        else:
            out += drive
    if has_root:
        out += separator
    return out + separator.join(names)


@dataclass(frozen=True)
class ArgTemplate:
    """One command argument: literal text, or text mixed with placeholder tokens.

    A literal argument holds a single string part; otherwise the parts are
    tokens and non-empty strings.
    """

    parts: tuple[Union[Token, str], ...]

    @classmethod
    def parse(cls, text: str) -> ArgTemplate:
        """Parse placeholders; '{{' and '}}' stand for literal braces."""
        parts: list[Union[Token, str]] = []
        buf = ""
        remaining = text
        while (found := _find_pattern(remaining)) is not None:
            pattern, start, end = found
            if pattern in ("{{", "}}"):
                buf += remaining[: start + 1]
                remaining = remaining[end:]
            elif not remaining[end:].startswith("}"):
                buf += remaining[:start]
                if buf:
                    parts.append(buf)
                    buf = ""
                parts.append(_TOKEN_FOR[pattern])
                remaining = remaining[end:]
            else:
                buf += remaining[:end]
                remaining = remaining[end + 1 :]
        buf += remaining
        if not parts:
            return cls((buf,))
        if buf:
            parts.append(buf)
        return cls(tuple(parts))

    def has_tokens(self) -> bool:
        return any(isinstance(part, Token) for part in self.parts)

    def generate(self, path, path_separator: Optional[str] = None) -> str:
        """Substitute *path* into the placeholders."""
        path = os.fspath(path)
        pieces = []
        for part in self.parts:
            if part is Token.PLACEHOLDER:
                pieces.append(_replace_separator(path, path_separator))
            elif part is Token.BASENAME:
                pieces.append(_replace_separator(_basename(path), path_separator))
            elif part is Token.PARENT:
                pieces.append(_replace_separator(_dirname(path), path_separator))
            elif part is Token.NO_EXT:
                pieces.append(_replace_separator(_remove_extension(path), path_separator))
            elif part is Token.BASENAME_NO_EXT:
                pieces.append(
                    _replace_separator(_remove_extension(_basename(path)), path_separator)
                )
            else:
                pieces.append(part)
        return "".join(pieces)


def _arg_size(arg: str) -> int:
    if os.name == "nt":
        return len(arg) + 3
    return len(os.fsencode(arg)) + 1 + 8


def _arg_limit() -> int:
    if os.name == "nt":
        return 32767
    try:
        arg_max = os.sysconf("SC_ARG_MAX")
    except (ValueError, OSError):
        arg_max = -1
    if arg_max <= 0:
        arg_max = 4096
    environment = sum(_arg_size(f"{key}={value}") for key, value in os.environ.items())
    return max(arg_max - environment - 2048, 0)


class _Argv:
    """A command line that refuses arguments beyond the system's size limit."""

    def __init__(self, program: str):
        self._limit = _arg_limit()
        self.argv = [program]
        self._size = _arg_size(program)

    def args_would_fit(self, args: Iterable[str]) -> bool:
        return self._size + sum(_arg_size(arg) for arg in args) <= self._limit

    def try_arg(self, arg: str) -> None:
        if not self.args_would_fit([arg]):
            raise OSError(errno.E2BIG, "Argument list too long")
        self.argv.append(arg)
        self._size += _arg_size(arg)

    def try_args(self, args: Iterable[str]) -> None:
        for arg in args:
            self.try_arg(arg)


@dataclass(frozen=True)
class CommandTemplate:
    """The arguments of one command, the first being the program."""

    args: tuple[ArgTemplate, ...]

    def number_of_tokens(self) -> int:
        """How many arguments hold placeholders."""
        return sum(1 for arg in self.args if arg.has_tokens())

    def generate(self, path, path_separator: Optional[str] = None) -> list[str]:
        """Build the command line for *path*; OSError if it would be too long."""
        argv = _Argv(self.args[0].generate(path, path_separator))
        for arg in self.args[1:]:
            argv.try_arg(arg.generate(path, path_separator))
        return argv.argv


def _parse_command(args: Iterable[str]) -> CommandTemplate:
    templates = [ArgTemplate.parse(arg) for arg in args]
    if not templates:
        raise ValueError("No executable provided for --exec or --exec-batch")
    if not any(template.has_tokens() for template in templates):
        templates.append(ArgTemplate((Token.PLACEHOLDER,)))
    return CommandTemplate(tuple(templates))


class _CommandBuilder:
    """Accumulates paths into one command line, running it when full."""

    def __init__(self, template: CommandTemplate, limit: int):
        self.pre_args: list[str] = []
        self.post_args: list[str] = []
        path_arg: Optional[ArgTemplate] = None
        for arg in template.args:
            if arg.has_tokens():
                path_arg = arg
            elif path_arg is None:
                self.pre_args.append(arg.generate("", None))
            else:
                self.post_args.append(arg.generate("", None))
        assert path_arg is not None
        self.path_arg = path_arg
        self.limit = limit
        self.count = 0
        self.exit_code = ExitCode.SUCCESS
        self.cmd = self._new_command()

    def _new_command(self) -> _Argv:
        cmd = _Argv(self.pre_args[0])
        cmd.try_args(self.pre_args[1:])
        return cmd

    def push(self, path, separator: Optional[str]) -> None:
        if self.limit > 0 and self.count >= self.limit:
            self.finish()
        arg = self.path_arg.generate(path, separator)
        if not self.cmd.args_would_fit([arg, *self.post_args]):
            self.finish()
        self.cmd.try_arg(arg)
        self.count += 1

    def finish(self) -> None:
        if self.count > 0:
            self.cmd.try_args(self.post_args)
            if subprocess.run(self.cmd.argv).returncode != 0:
                self.exit_code = ExitCode.GENERAL_ERROR
            self.cmd = self._new_command()
            self.count = 0


@dataclass(frozen=True)
class CommandSet:
    """One or more command templates and how they are run."""

    mode: ExecutionMode
    commands: tuple[CommandTemplate, ...]

    @classmethod
    def new(cls, commands: Iterable[Sequence[str]]) -> CommandSet:
        """Commands run once for each search result."""
        return cls(ExecutionMode.ONE_BY_ONE, tuple(_parse_command(args) for args in commands))

    @classmethod
    def new_batch(cls, commands: Iterable[Sequence[str]]) -> CommandSet:
        """Commands run with many search results at once."""
        templates = []
        for args in commands:
            template = _parse_command(args)
            if template.number_of_tokens() > 1:
                raise ValueError("Only one placeholder allowed for batch commands")
            if template.args[0].has_tokens():
                raise ValueError(
                    "First argument of exec-batch is expected to be a fixed executable"
                )
            templates.append(template)
        return cls(ExecutionMode.BATCH, tuple(templates))

    def in_batch_mode(self) -> bool:
        return self.mode is ExecutionMode.BATCH

    def execute(
        self,
        path,
        path_separator: Optional[str],
        out_perm: threading.Lock,
        buffer_output: bool,
    ) -> ExitCode:
        """Run every command for a single path."""
        commands = (command.generate(path, path_separator) for command in self.commands)
        return execute_commands(commands, out_perm, buffer_output)

    def execute_batch(self, paths: Iterable, limit: int, path_separator: Optional[str]) -> ExitCode:
        """Run every command over all *paths*, at most *limit* per run (0: no limit)."""
        try:
            builders = [_CommandBuilder(command, limit) for command in self.commands]
        except OSError as err:
            return handle_cmd_error(None, err)

        for path in paths:
            for builder in builders:
                try:
                    builder.push(path, path_separator)
                except OSError as err:
                    return handle_cmd_error(builder.cmd.argv, err)

        for builder in builders:
            try:
                builder.finish()
            except OSError as err:
                return handle_cmd_error(builder.cmd.argv, err)

        return merge_exitcodes(builder.exit_code for builder in builders)