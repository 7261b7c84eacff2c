"""Command-line parsing into search options."""

from __future__ import annotations

import argparse
import os
import re
import sys
from typing import Iterable, Optional

from .execution import CommandSet
from .options import (
    ColorWhen,
    FileType,
    HyperlinkWhen,
    Opts,
    StripCwdWhen,
    parse_millis,
)

_UINT = re.compile(r"\+?[0-9]+", re.ASCII)

_EXEC_OPTIONS = {"-x": "exec", "--exec": "exec", "-X": "exec_batch", "--exec-batch": "exec_batch"}
_EXEC_TERMINATOR = ";"
_HYPHEN_VALUE_OPTIONS = frozenset({"--and", "--size", "-S"})
_EQUALS_DEFAULTS = {
    "--hyperlink": "auto",
    "--hyper": "auto",
    "--strip-cwd-prefix": "always",
}

_USAGE = "fd [OPTIONS] [pattern] [path]..."


class _Flag(argparse.Action):
    """A flag that sets its destination and resets the options it overrides."""

    def __init__(self, option_strings, dest, value=True, resets=(), default=False, **kwargs):
        super().__init__(option_strings, dest, nargs=0, default=default, **kwargs)
        self.value = value
        self.resets = tuple(resets)

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, self.value)
        for name, value in self.resets:
            setattr(namespace, name, value)


class _Count(argparse.Action):
    """A flag counting how often it was given."""

    def __init__(self, option_strings, dest, default=0, **kwargs):
        super().__init__(option_strings, dest, nargs=0, default=default, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, (getattr(namespace, self.dest, 0) or 0) + 1)


class _StoreOverriding(argparse.Action):
    """Store a value and reset the options it overrides."""

    def __init__(self, option_strings, dest, resets=(), **kwargs):
        super().__init__(option_strings, dest, **kwargs)
        self.resets = tuple(resets)

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, values)
        for name, value in self.resets:
            setattr(namespace, name, value)


def _usize(text: str) -> int:
    if not _UINT.fullmatch(text):
        raise argparse.ArgumentTypeError(f"invalid value '{text}': expected a non-negative integer")
    return int(text)


def _positive(text: str) -> int:
    value = _usize(text)
    if value == 0:
        raise argparse.ArgumentTypeError("number would be zero for non-zero type")
    return value


def _millis(text: str):
    try:
        return parse_millis(text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from err


def _enum_type(cls):
    def convert(text: str):
        try:
            return cls(text)
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise argparse.ArgumentTypeError(
                f"invalid value '{text}' (possible values: {choices})"
            ) from None

    convert.__name__ = cls.__name__
    return convert


def build_parser() -> argparse.ArgumentParser:
    """The parser for every option except the positional pattern and paths."""
    parser = argparse.ArgumentParser(
        prog="fd",
        usage=_USAGE,
        description="A program to find entries in your filesystem",
        allow_abbrev=False,
    )
    add = parser.add_argument
    hidden = argparse.SUPPRESS

    add("-H", "--hidden", action=_Flag, help="Search hidden files and directories")
    add("--no-hidden", dest="hidden", action=_Flag, value=False,
        resets=[("unrestricted", 0)], help=hidden)
    add("-I", "--no-ignore", action=_Flag, help="Do not respect .(git|fd)ignore files")
    add("--ignore", dest="no_ignore", action=_Flag, value=False,
        resets=[("unrestricted", 0)], help=hidden)
    add("--no-ignore-vcs", action=_Flag, help="Do not respect .gitignore files")
    add("--ignore-vcs", dest="no_ignore_vcs", action=_Flag, value=False, help=hidden)
    add("--no-require-git", action=_Flag,
        help="Do not require a git repository to respect gitignores")
    add("--require-git", dest="no_require_git", action=_Flag, value=False, help=hidden)
    add("--no-ignore-parent", action=_Flag,
        help="Do not respect .(git|fd)ignore files in parent directories")
    add("--no-global-ignore-file", action=_Flag, help=hidden)
    add("-u", "--unrestricted", action=_Count,
        help="Unrestricted search, alias for '--no-ignore --hidden'")

    add("-s", "--case-sensitive", action=_Flag, resets=[("ignore_case", False)],
        help="Case-sensitive search (default: smart case)")
    add("-i", "--ignore-case", action=_Flag, resets=[("case_sensitive", False)],
        help="Case-insensitive search (default: smart case)")
    add("-g", "--glob", action=_Flag, resets=[("regex", False)],
        help="Glob-based search (default: regular expression)")
    add("--regex", action=_Flag, resets=[("glob", False)],
        help="Regular-expression based search (default)")
    add("-F", "--fixed-strings", "--literal", dest="fixed_strings", action=_Flag,
        help="Treat pattern as literal string instead of regex")
    add("--and", dest="exprs", action="append", default=None, metavar="pattern",
        help="Additional search patterns that need to be matched")

    add("-a", "--absolute-path", action=_Flag, help="Show absolute instead of relative paths")
    add("--relative-path", dest="absolute_path", action=_Flag, value=False, help=hidden)
    add("-l", "--list-details", action=_Flag, help="Use a long listing format with file metadata")
    add("-L", "--follow", "--dereference", dest="follow", action=_Flag,
        help="Follow symbolic links")
    add("--no-follow", dest="follow", action=_Flag, value=False, help=hidden)
    add("-p", "--full-path", action=_Flag, help="Search full abs. path (default: filename only)")
    add("-0", "--print0", dest="null_separator", action=_Flag,
        help="Separate search results by the null character")

    add("-d", "--max-depth", "--maxdepth", dest="max_depth", type=_usize, metavar="depth",
        help="Set maximum search depth (default: none)")
    add("--min-depth", "--mindepth", dest="min_depth", type=_usize, metavar="depth",
        help="Only show search results starting at the given depth.")
    add("--exact-depth", type=_usize, metavar="depth",
        help="Only show search results at the exact given depth")
    add("-E", "--exclude", action="append", default=[], metavar="pattern",
        help="Exclude entries that match the given glob pattern")
    add("--prune", action=_Flag, help="Do not traverse into directories that match the search criteria")
    add("-t", "--type", dest="filetype", action="append", default=None,
        type=_enum_type(FileType), metavar="filetype",
        help="Filter by type: file (f), directory (d/dir), symlink (l), executable (x), "
             "empty (e), socket (s), pipe (p), char-device (c), block-device (b)")
    add("-e", "--extension", dest="extensions", action="append", default=None, metavar="ext",
        help="Filter by file extension")
    add("-S", "--size", action="append", default=[], metavar="size",
        help="Limit results based on the size of files")
    add("--changed-within", "--change-newer-than", "--newer", "--changed-after",
        dest="changed_within", metavar="date|dur",
        help="Filter by file modification time (newer than)")
    add("--changed-before", "--change-older-than", "--older", dest="changed_before",
        metavar="date|dur", help="Filter by file modification time (older than)")
    if os.name == "posix":
        add("-o", "--owner", metavar="user:group", help="Filter by owning user and/or group")

    add("--format", metavar="fmt", help="Print results according to template")
    add("-x", "--exec", dest="exec", action="append", nargs="+", default=None, metavar="cmd",
        help="Execute a command for each search result")
    add("-X", "--exec-batch", dest="exec_batch", action="append", nargs="+", default=None,
        metavar="cmd", help="Execute a command with all search results at once")
    add("--batch-size", type=_usize, default=None, metavar="size",
        help="Max number of arguments to run as a batch size with -X")
    add("--ignore-file", action="append", default=[], metavar="path",
        help="Add a custom ignore-file in '.gitignore' format")
    add("-c", "--color", type=_enum_type(ColorWhen), default=ColorWhen.AUTO, metavar="when",
        help="When to use colors")
    add("--hyperlink", "--hyper", dest="hyperlink", type=_enum_type(HyperlinkWhen),
        default=HyperlinkWhen.NEVER, metavar="when", help="Add hyperlinks to output paths")
    add("-j", "--threads", type=_positive, default=None, metavar="num",
        help="Set number of threads to use for searching and executing")
    add("--max-buffer-time", type=_millis, default=None, help=hidden)
    add("--max-results", type=_usize, default=None, action=_StoreOverriding,
        resets=[("max_one_result", False)], metavar="count",
        help="Limit the number of search results")
    add("-1", dest="max_one_result", action=_Flag, resets=[("max_results", None)],
        help="Limit search to a single result")
    add("-q", "--quiet", "--has-results", dest="quiet", action=_Flag,
        help="Print nothing, exit code 0 if match found, 1 otherwise")
    add("--show-errors", action=_Flag, help="Show filesystem errors")
    add("--base-directory", metavar="path", help="Change current working directory")
    add("--path-separator", metavar="separator", help="Set path separator when printing file paths")
    add("--search-path", action="append", default=[], metavar="search-path",
        help="Provides paths to search as an alternative to the positional <path> argument")
    add("--strip-cwd-prefix", type=_enum_type(StripCwdWhen), default=None, metavar="when",
        help="By default, relative paths are prefixed with './' when -x/--exec, "
             "-X/--exec-batch, or -0/--print0 are given")
    add("--one-file-system", "--mount", "--xdev", dest="one_file_system", action=_Flag,
        help="Do not descend into a different file system")
    return parser


def _preprocess(argv: Iterable[str]):
    """Pull out exec commands and normalise options argparse cannot take as given.

    Returns the option tokens, the tokens after '--', and the exec and
    exec-batch command lists.
    """
    options: list[str] = []
    trailing: list[str] = []
    commands: dict[str, list[list[str]]] = {"exec": [], "exec_batch": []}
    tokens = iter(argv)
    for token in tokens:
        if token == "--":
            trailing.extend(tokens)
            break
        if token in _EXEC_OPTIONS:
            command = []
            for arg in tokens:
                if arg == _EXEC_TERMINATOR:
                    break
                command.append(arg)
            commands[_EXEC_OPTIONS[token]].append(command)
        elif token in _HYPHEN_VALUE_OPTIONS:
            value = next(tokens, None)
            if value is None:
                options.append(token)
            elif token.startswith("--"):
                options.append(f"{token}={value}")
            else:
                options.append(token + value)
        elif token in _EQUALS_DEFAULTS:
            options.append(f"{token}={_EQUALS_DEFAULTS[token]}")
        else:
            options.append(token)
    return options, trailing, commands["exec"], commands["exec_batch"]


def _check_conflicts(parser, ns, execs, batches, path, search_path) -> None:
    list_details = ns.list_details
    conflicts = [
        (ns.glob and ns.fixed_strings, "--glob", "--fixed-strings"),
        (list_details and ns.absolute_path, "--list-details", "--absolute-path"),
        (ns.null_separator and list_details, "--print0", "--list-details"),
        (ns.exact_depth is not None and ns.max_depth is not None, "--exact-depth", "--max-depth"),
        (ns.exact_depth is not None and ns.min_depth is not None, "--exact-depth", "--min-depth"),
        (ns.prune and bool(ns.size), "--prune", "--size"),
        (ns.prune and ns.exact_depth is not None, "--prune", "--exact-depth"),
        (ns.format is not None and list_details, "--format", "--list-details"),
        (bool(execs) and list_details, "--exec", "--list-details"),
        (bool(batches) and bool(execs), "--exec-batch", "--exec"),
        (bool(batches) and list_details, "--exec-batch", "--list-details"),
        (ns.quiet and ns.max_results is not None, "--quiet", "--max-results"),
        (bool(search_path) and bool(path), "--search-path", "<path>"),
        (ns.strip_cwd_prefix is not None and bool(path), "--strip-cwd-prefix", "<path>"),
        (ns.strip_cwd_prefix is not None and bool(search_path), "--strip-cwd-prefix", "--search-path"),
    ]
    for present, first, second in conflicts:
        if present:
            parser.error(f"the argument '{first}' cannot be used with '{second}'")

    group = [("--exec", bool(execs)), ("--exec-batch", bool(batches)), ("--list-details", list_details)]
    limited = [
        ("--max-results", ns.max_results is not None),
        ("--quiet", ns.quiet),
        ("-1", ns.max_one_result),
    ]
    for first, first_present in group:
        for second, second_present in limited:
            if first_present and second_present:
                parser.error(f"the argument '{first}' cannot be used with '{second}'")

    if ns.batch_size is not None and not batches:
        parser.error("the argument '--batch-size' requires '--exec-batch'")


def _build_command(parser, execs, batches) -> Optional[CommandSet]:
    try:
        if execs:
            return CommandSet.new(execs)
        if batches:
            return CommandSet.new_batch(batches)
    except ValueError as err:
        parser.error(str(err))
    return None


def parse_opts(argv=None) -> Opts:
    """Parse command-line arguments; usage errors exit with status 2."""
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    options, trailing, execs, batches = _preprocess(argv)
    ns, extras = parser.parse_known_args(options)

    unknown = [arg for arg in extras if arg.startswith("-") and arg != "-"]
    if unknown:
        parser.error(f"unrecognized arguments: {' '.join(unknown)}")

    execs = execs + (ns.exec or [])
    batches = batches + (ns.exec_batch or [])
    positionals = extras + trailing
    pattern = positionals[0] if positionals else ""
    path = positionals[1:]

    _check_conflicts(parser, ns, execs, batches, path, ns.search_path)
    command = _build_command(parser, execs, batches)

    return Opts(
        hidden=ns.hidden,
        no_ignore=ns.no_ignore,
        no_ignore_vcs=ns.no_ignore_vcs,
        no_require_git=ns.no_require_git,
        no_ignore_parent=ns.no_ignore_parent,
        no_global_ignore_file=ns.no_global_ignore_file,
        unrestricted=ns.unrestricted,
        case_sensitive=ns.case_sensitive,
        ignore_case=ns.ignore_case,
        glob=ns.glob,
        regex=ns.regex,
        fixed_strings=ns.fixed_strings,
        exprs=ns.exprs,
        absolute_path=ns.absolute_path,
        list_details=ns.list_details,
        follow=ns.follow,
        full_path=ns.full_path,
        null_separator=ns.null_separator,
        max_depth=ns.max_depth,
        min_depth=ns.min_depth,
        exact_depth=ns.exact_depth,
        exclude=ns.exclude,
        prune=ns.prune,
        filetype=ns.filetype,
        extensions=ns.extensions,
        size=ns.size,
        changed_within=ns.changed_within,
        changed_before=ns.changed_before,
        owner=getattr(ns, "owner", None),
        format=ns.format,
        command=command,
        batch_size=ns.batch_size or 0,
        ignore_file=ns.ignore_file,
        color=ns.color,
        hyperlink=ns.hyperlink,
        threads=ns.threads,
        max_buffer_time=ns.max_buffer_time,
        max_results=ns.max_results,
        max_one_result=ns.max_one_result,
        quiet=ns.quiet,
        show_errors=ns.show_errors,
        base_directory=ns.base_directory,
        pattern=pattern,
        path_separator=ns.path_separator,
        path=path,
        search_path=ns.search_path,
        strip_cwd_prefix=ns.strip_cwd_prefix,
        one_file_system=ns.one_file_system,
    )