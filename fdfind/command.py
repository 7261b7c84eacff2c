"""Running generated commands and reporting their failures."""

from __future__ import annotations

import subprocess
import sys
import threading
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .errors import ExitCode, print_error


def _write_stream(stream, data: bytes) -> None:
    if not data:
        return
    stream.flush()
    raw = getattr(stream, "buffer", None)
    if raw is not None:
        raw.write(data)
        raw.flush()
    else:
        stream.write(data.decode(errors="replace"))
        stream.flush()


@dataclass
class _OutputBuffer:
    """Collected outputs of commands, written together while holding a lock."""

    output_permission: threading.Lock
    outputs: list[tuple[bytes, bytes]] = field(default_factory=list)

    def push(self, stdout: bytes, stderr: bytes) -> None:
        self.outputs.append((stdout, stderr))

    def write(self) -> None:
        if not self.outputs:
            return
        with self.output_permission:
            for stdout, stderr in self.outputs:
                try:
                    _write_stream(sys.stdout, stdout)
                    _write_stream(sys.stderr, stderr)
                except OSError:
                    pass
        self.outputs.clear()


def execute_commands(
    cmds: Iterable[Sequence[str]],
    out_perm: threading.Lock,
    enable_output_buffering: bool,
) -> ExitCode:
    """Run each command in turn, stopping at the first failure.

    When buffering is enabled, each command's output is captured and written
    out in one go under *out_perm*, so output from parallel jobs does not mix.
    """
    output_buffer = _OutputBuffer(out_perm)
    commands = iter(cmds)
    while True:
        try:
            cmd = next(commands)
        except StopIteration:
            break
        except OSError as err:
            return handle_cmd_error(None, err)

        argv = list(cmd)
        try:
            completed = subprocess.run(argv, capture_output=enable_output_buffering)
        except OSError as err:
            output_buffer.write()
            return handle_cmd_error(argv, err)

        if enable_output_buffering:
            output_buffer.push(completed.stdout or b"", completed.stderr or b"")
        if completed.returncode != 0:
            output_buffer.write()
            return ExitCode.GENERAL_ERROR

    output_buffer.write()
    return ExitCode.SUCCESS


def handle_cmd_error(cmd: Optional[Sequence[str]], err: OSError) -> ExitCode:
    """Report a failure to start or build a command."""
    if cmd and isinstance(err, FileNotFoundError):
        print_error(f"Command not found: {cmd[0]}")
    else:
        print_error(f"Problem while executing command: {err}")
    return ExitCode.GENERAL_ERROR