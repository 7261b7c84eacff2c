from datetime import timedelta

import pytest

from fdfind.cli import build_parser, parse_opts
from fdfind.execution import CommandSet
from fdfind.options import ColorWhen, FileType, HyperlinkWhen, StripCwdWhen


def _usage_error(argv):
    with pytest.raises(SystemExit) as info:
        parse_opts(argv)
    return info.value.code


def test_parser_program_name():
    assert build_parser().prog == "fd"


def test_defaults():
    opts = parse_opts([])
    assert opts.pattern == ""
    assert opts.path == []
    assert opts.color is ColorWhen.AUTO
    assert opts.hyperlink is HyperlinkWhen.NEVER
    assert opts.batch_size == 0
    assert opts.command is None
    assert opts.no_search_paths()


def test_pattern_and_paths():
    opts = parse_opts(["foo", "a", "b"])
    assert opts.pattern == "foo"
    assert opts.path == ["a", "b"]


def test_options_between_positionals():
    opts = parse_opts(["foo", "-H", "a"])
    assert opts.hidden is True
    assert opts.pattern == "foo"
    assert opts.path == ["a"]


def test_double_dash_allows_dash_pattern():
    opts = parse_opts(["--", "-foo", "dir"])
    assert opts.pattern == "-foo"
    assert opts.path == ["dir"]


@pytest.mark.parametrize(
    "argv, expected",
    [(["-H", "--no-hidden"], False), (["--no-hidden", "-H"], True)],
)
def test_hidden_override(argv, expected):
    assert parse_opts(argv).hidden is expected


def test_case_flags_override_each_other():
    opts = parse_opts(["-s", "-i"])
    assert (opts.case_sensitive, opts.ignore_case) == (False, True)
    opts = parse_opts(["-i", "-s"])
    assert (opts.case_sensitive, opts.ignore_case) == (True, False)


def test_regex_overrides_glob():
    opts = parse_opts(["--glob", "--regex"])
    assert (opts.glob, opts.regex) == (False, True)


def test_glob_conflicts_with_fixed_strings():
    assert _usage_error(["-g", "-F"]) == 2


def test_unrestricted_counts_and_is_reset():
    opts = parse_opts(["-uu"])
    assert opts.unrestricted == 2
    assert opts.rg_alias_ignore()
    assert not parse_opts(["-u", "--no-hidden"]).rg_alias_ignore()


def test_exec_with_terminator():
    opts = parse_opts(["-x", "echo", "{}", ";", "foo"])
    assert opts.command == CommandSet.new([["echo", "{}"]])
    assert opts.pattern == "foo"


def test_exec_consumes_rest_without_terminator():
    opts = parse_opts(["foo", "-x", "echo", "-n"])
    assert opts.command == CommandSet.new([["echo", "-n"]])
    assert opts.pattern == "foo"


def test_multiple_exec_commands():
    opts = parse_opts(["-x", "echo", ";", "--exec", "ls", "{/}"])
    assert opts.command == CommandSet.new([["echo"], ["ls", "{/}"]])


def test_exec_batch():
    opts = parse_opts(["-X", "wc", "-l"])
    assert opts.command.in_batch_mode()
    assert opts.command == CommandSet.new_batch([["wc", "-l"]])


def test_exec_and_exec_batch_conflict():
    assert _usage_error(["-x", "echo", ";", "-X", "ls"]) == 2


def test_exec_batch_with_two_placeholders_is_rejected():
    assert _usage_error(["-X", "echo", "{}", "{.}"]) == 2


def test_exec_without_command_is_rejected():
    assert _usage_error(["-x"]) == 2


@pytest.mark.parametrize(
    "argv",
    [["--max-results", "3", "-x", "echo"], ["-1", "-X", "echo"], ["-q", "-l"]],
)
def test_exec_group_conflicts_with_limits(argv):
    assert _usage_error(argv) == 2


def test_batch_size_requires_exec_batch():
    assert _usage_error(["--batch-size", "5"]) == 2
    assert parse_opts(["--batch-size", "5", "-X", "echo"]).batch_size == 5


def test_size_accepts_hyphen_values():
    assert parse_opts(["-S", "-1k", "--size", "+2M"]).size == ["-1k", "+2M"]


def test_and_accepts_hyphen_values():
    assert parse_opts(["--and", "-bar", "foo"]).exprs == ["-bar"]


def test_type_aliases():
    opts = parse_opts(["-tf", "-t", "dir", "--type", "x"])
    assert opts.filetype == [FileType.FILE, FileType.DIRECTORY, FileType.EXECUTABLE]


def test_invalid_type_is_rejected():
    assert _usage_error(["-t", "nonsense"]) == 2


def test_hyperlink_requires_equals():
    assert parse_opts(["--hyperlink"]).hyperlink is HyperlinkWhen.AUTO
    assert parse_opts(["--hyperlink=always"]).hyperlink is HyperlinkWhen.ALWAYS
    opts = parse_opts(["--hyperlink", "always"])
    assert opts.hyperlink is HyperlinkWhen.AUTO
    assert opts.pattern == "always"


def test_strip_cwd_prefix_values():
    assert parse_opts(["--strip-cwd-prefix"]).strip_cwd_prefix is StripCwdWhen.ALWAYS
    assert parse_opts(["--strip-cwd-prefix=never"]).strip_cwd_prefix is StripCwdWhen.NEVER
    assert parse_opts(["--strip-cwd-prefix"]).strip_cwd_prefix_enabled(lambda: False)


def test_strip_cwd_prefix_conflicts_with_paths():
    assert _usage_error(["--strip-cwd-prefix", "foo", "a"]) == 2


def test_search_path_conflicts_with_path():
    assert _usage_error(["foo", "a", "--search-path", "b"]) == 2


def test_threads():
    assert parse_opts(["-j", "4"]).resolved_threads() == 4
    assert _usage_error(["-j", "0"]) == 2


def test_max_results_and_one_result_override():
    opts = parse_opts(["--max-results", "3", "-1"])
    assert opts.max_results is None
    assert opts.resolved_max_results() == 1
    opts = parse_opts(["-1", "--max-results", "3"])
    assert opts.max_one_result is False
    assert opts.resolved_max_results() == 3


def test_exact_depth():
    opts = parse_opts(["--exact-depth", "2"])
    assert opts.resolved_max_depth() == 2
    assert opts.resolved_min_depth() == 2
    assert _usage_error(["--exact-depth", "2", "-d", "3"]) == 2


def test_max_buffer_time():
    assert parse_opts(["--max-buffer-time", "250"]).max_buffer_time == timedelta(milliseconds=250)
    assert _usage_error(["--max-buffer-time", "abc"]) == 2


def test_aliases():
    opts = parse_opts(["--literal", "--dereference", "--has-results", "--maxdepth", "7", "--xdev"])
    assert opts.fixed_strings and opts.follow and opts.quiet and opts.one_file_system
    assert opts.max_depth == 7


def test_unknown_option_is_rejected():
    assert _usage_error(["--definitely-not-an-option"]) == 2


def test_color_option():
    assert parse_opts(["--color", "never"]).color is ColorWhen.NEVER
    assert _usage_error(["-c", "sometimes"]) == 2