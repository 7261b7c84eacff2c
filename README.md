# fdfind

Building blocks for a fast, user-friendly file finder. The package covers
command-line option parsing, filtering of entries by file type, directory
entries with cached metadata, exit codes, and running a command for each
search result or once for a whole batch of results.

## Installation

Install the package from a checkout with your usual Python package tool. It
has no dependencies outside the standard library. Python 3.10 or later is
required. The tests use pytest (the `test` extra).

## Modules

| Module               | What it holds                                                     |
|----------------------|-------------------------------------------------------------------|
| `fdfind.cli`         | `build_parser()` and `parse_opts(argv)`, which return an `Opts`   |
| `fdfind.options`     | `Opts`, `FileType`, `ColorWhen`, `StripCwdWhen`, `HyperlinkWhen`  |
| `fdfind.config`      | `Config`, the settings of a search run                            |
| `fdfind.dir_entry`   | `DirEntry`, a found path with lazily read metadata                |
| `fdfind.filetypes`   | `FileTypes`, deciding which kinds of entries to show              |
| `fdfind.filesystem`  | path helpers such as `strip_current_dir` and `is_empty`           |
| `fdfind.execution`   | `CommandSet`, `CommandTemplate`, `ArgTemplate`, `Token`           |
| `fdfind.command`     | `execute_commands` and `handle_cmd_error`                         |
| `fdfind.job`         | `job` and `batch`, running a `CommandSet` over results            |
| `fdfind.errors`      | `ExitCode`, `merge_exitcodes`, `print_error`                      |

## Parsing options

```python
from fdfind.cli import parse_opts

opts = parse_opts(["--type", "f", "--max-depth", "2", "needle"])
print(opts.pattern)               # needle
print(opts.resolved_max_depth())  # 2
```

`parse_opts()` reads `sys.argv` when called without arguments. Usage errors,
such as conflicting options, end the process with status 2 in the usual
`argparse` way. Everything after `-x`/`--exec` or `-X`/`--exec-batch` up to
a `;` (or the end of the arguments) is taken as the command.

`Opts` offers derived values: `resolved_max_depth()` and
`resolved_min_depth()` fall back to `--exact-depth`, `resolved_max_results()`
honours `-1`, `resolved_threads()` defaults to the available CPUs (at most
64), and `search_paths()` returns the directories to search, reporting and
skipping those that are not directories.

## Command templates

`CommandSet` turns the arguments given to `--exec` or `--exec-batch` into
command templates. These placeholders are recognised:

| Placeholder | Replaced with                  |
|-------------|--------------------------------|
| `{}`        | the path of the search result  |
| `{/}`       | the basename                   |
| `{//}`      | the parent directory           |
| `{.}`       | the path without extension     |
| `{/.}`      | the basename without extension |
| `{{`, `}}`  | a literal `{` or `}`           |

If no placeholder is given, `{}` is added at the end.

```python
from fdfind.execution import ArgTemplate, CommandSet

commands = CommandSet.new([["convert", "{}", "{.}.png"]])
assert not commands.in_batch_mode()

arg = ArgTemplate.parse("{/.}.ext")
print(arg.generate("dir/photo.jpg", None))  # photo.ext
print(ArgTemplate.parse("{}").generate("foo/bar", "#"))  # foo#bar
```

Batch commands accept at most one placeholder, and the executable itself
must be a fixed string:

```python
batch = CommandSet.new_batch([["wc", "-l"]])
assert batch.in_batch_mode()
```

A template that is not valid raises `ValueError`.

`CommandSet.execute(path, path_separator, out_perm, buffer_output)` runs
every command for one path; `execute_batch(paths, limit, path_separator)`
passes many paths per run, starting a new run when `limit` is reached (0
means no limit) or when the command line would grow too long for the system.
Both return an `ExitCode`.

`fdfind.job.job` and `fdfind.job.batch` feed a stream of `DirEntry` results
to a `CommandSet`; items in the stream that are exceptions stand for
filesystem errors and are printed only when `Config.show_filesystem_errors`
is set.

## Exit codes

```python
from fdfind.errors import ExitCode, merge_exitcodes

assert merge_exitcodes([ExitCode.SUCCESS, ExitCode.GENERAL_ERROR]) is ExitCode.GENERAL_ERROR
assert ExitCode.has_results(True).code() == 0
```

Any code other than zero counts as an error. An interrupt gives code 130.

## What the package does not do

There is no command to run and no directory walker: nothing here traverses
the filesystem, reads ignore files, matches the search pattern, or prints
and colours results. `Config` holds the settings a walker would use, and
`DirEntry.normal(path, depth, follow_links)` builds entries for one, but
those entries have to come from your own traversal code.