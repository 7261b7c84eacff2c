"""Running commands over the stream of search results."""

from __future__ import annotations

import threading
from typing import Iterable, Iterator

from .errors import ExitCode, merge_exitcodes, print_error


def job(results: Iterable, cmd, out_perm: threading.Lock, config) -> ExitCode:
    """Run *cmd* once for each entry in *results*.

    Items that are exceptions stand for filesystem errors met during the walk;
    they are reported only if the configuration asks for it.
    """
    buffer_output = config.threads > 1
    ret = ExitCode.SUCCESS
    for result in results:
        if isinstance(result, BaseException):
            if config.show_filesystem_errors:
                print_error(str(result))
            continue
        code = cmd.execute(
            result.stripped_path(config),
            config.path_separator,
            out_perm,
            buffer_output,
        )
        ret = merge_exitcodes([ret, code])
    return ret


def batch(results: Iterable, cmd, config) -> ExitCode:
    """Run *cmd* with all entries in *results* as arguments, in batches."""

    def paths() -> Iterator[str]:
        for result in results:
            if isinstance(result, BaseException):
                if config.show_filesystem_errors:
                    print_error(str(result))
                continue
            yield result.stripped_path(config)

    return cmd.execute_batch(paths(), config.batch_size, config.path_separator)