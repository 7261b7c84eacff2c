import sys
import threading

import pytest

from fdfind.errors import ExitCode
from fdfind.execution import (
    ArgTemplate,
    CommandSet,
    CommandTemplate,
    ExecutionMode,
    Token,
)

APPEND = "import sys; open(sys.argv[1], 'a').write(' '.join(sys.argv[2:]) + chr(10))"


def _text(value):
    return ArgTemplate((value,))


def _tokens(*parts):
    return ArgTemplate(tuple(parts))


def _py(code):
    return [sys.executable, "-c", code]


def test_tokens_with_placeholder():
    assert CommandSet.new([["echo", "${SHELL}:"]]) == CommandSet(
        mode=ExecutionMode.ONE_BY_ONE,
        commands=(
            CommandTemplate(
                args=(_text("echo"), _text("${SHELL}:"), _tokens(Token.PLACEHOLDER))
            ),
        ),
    )


@pytest.mark.parametrize(
    "placeholder, token",
    [
        ("{.}", Token.NO_EXT),
        ("{/}", Token.BASENAME),
        ("{//}", Token.PARENT),
        ("{/.}", Token.BASENAME_NO_EXT),
    ],
)
def test_tokens_with_single_placeholder(placeholder, token):
    assert CommandSet.new([["echo", placeholder]]) == CommandSet(
        mode=ExecutionMode.ONE_BY_ONE,
        commands=(CommandTemplate(args=(_text("echo"), _tokens(token))),),
    )


def test_tokens_with_literal_braces():
    template = CommandSet.new([["{{}}", "{{", "{.}}"]]).commands[0]
    assert template.generate("foo", None) == ["{}", "{", "{.}", "foo"]


def test_tokens_with_literal_braces_and_placeholder():
    template = CommandSet.new([["{{{},end}"]]).commands[0]
    assert template.generate("foo", None) == ["{foo,end}"]


def test_tokens_multiple():
    assert CommandSet.new([["cp", "{}", "{/.}.ext"]]) == CommandSet(
        mode=ExecutionMode.ONE_BY_ONE,
        commands=(
            CommandTemplate(
                args=(
                    _text("cp"),
                    _tokens(Token.PLACEHOLDER),
                    _tokens(Token.BASENAME_NO_EXT, ".ext"),
                )
            ),
        ),
    )


def test_tokens_single_batch():
    assert CommandSet.new_batch([["echo", "{.}"]]) == CommandSet(
        mode=ExecutionMode.BATCH,
        commands=(CommandTemplate(args=(_text("echo"), _tokens(Token.NO_EXT))),),
    )


def test_tokens_multiple_batch():
    with pytest.raises(ValueError):
        CommandSet.new_batch([["echo", "{.}", "{}"]])


def test_batch_requires_fixed_executable():
    with pytest.raises(ValueError, match="fixed executable"):
        CommandSet.new_batch([["{}", "x"]])


def test_template_no_args():
    with pytest.raises(ValueError, match="No executable"):
        CommandSet.new([[]])


def test_command_set_no_args():
    with pytest.raises(ValueError):
        CommandSet.new([["echo"], []])


@pytest.mark.parametrize(
    "path, expected",
    [("foo", "foo"), ("foo/bar", "foo#bar"), ("/foo/bar/baz", "#foo#bar#baz")],
)
def test_generate_custom_path_separator(path, expected):
    arg = _tokens(Token.PLACEHOLDER)
    assert arg.generate(path, "#") == expected


def test_parse_plain_text_has_no_tokens():
    arg = ArgTemplate.parse("echo")
    assert arg == _text("echo")
    assert not arg.has_tokens()
    assert arg.generate("ignored", None) == "echo"


@pytest.mark.parametrize(
    "template, expected",
    [
        ("{}", "foo/bar.txt"),
        ("{/}", "bar.txt"),
        ("{//}", "foo"),
        ("{.}", "foo/bar"),
        ("{/.}", "bar"),
    ],
)
def test_placeholder_substitution(template, expected):
    assert ArgTemplate.parse(template).generate("foo/bar.txt", None) == expected


def test_no_extension_strips_current_dir():
    assert ArgTemplate.parse("{.}").generate("./foo.txt", None) == "foo"


def test_parent_of_bare_name_is_current_dir():
    assert ArgTemplate.parse("{//}").generate("foo.txt", None) == "."


def test_in_batch_mode():
    assert CommandSet.new_batch([["echo"]]).in_batch_mode()
    assert not CommandSet.new([["echo"]]).in_batch_mode()


def test_number_of_tokens():
    template = CommandSet.new([["cp", "{}", "{/.}.ext"]]).commands[0]
    assert template.number_of_tokens() == 2


def test_execute_runs_command(tmp_path):
    log = tmp_path / "log.txt"
    commands = CommandSet.new([_py(APPEND) + [str(log)]])
    code = commands.execute("some/file.txt", None, threading.Lock(), False)
    assert code == ExitCode.SUCCESS
    assert log.read_text().splitlines() == ["some/file.txt"]


def test_execute_with_path_separator(tmp_path):
    log = tmp_path / "log.txt"
    commands = CommandSet.new([_py(APPEND) + [str(log), "{}"]])
    code = commands.execute("a/b", "#", threading.Lock(), True)
    assert code == ExitCode.SUCCESS
    assert log.read_text().splitlines() == ["a#b"]


def test_execute_failure():
    commands = CommandSet.new([_py("import sys; sys.exit(3)")])
    assert commands.execute("x", None, threading.Lock(), False) == ExitCode.GENERAL_ERROR


def test_execute_missing_program(capsys):
    commands = CommandSet.new([["fdfind-no-such-program"]])
    assert commands.execute("x", None, threading.Lock(), False) == ExitCode.GENERAL_ERROR
    assert "Command not found: fdfind-no-such-program" in capsys.readouterr().err


def test_execute_batch_respects_limit(tmp_path):
    log = tmp_path / "log.txt"
    commands = CommandSet.new_batch([_py(APPEND) + [str(log)]])
    code = commands.execute_batch(iter(["a", "b", "c", "d", "e"]), 2, None)
    assert code == ExitCode.SUCCESS
    assert log.read_text().splitlines() == ["a b", "c d", "e"]


def test_execute_batch_unlimited(tmp_path):
    log = tmp_path / "log.txt"
    commands = CommandSet.new_batch([_py(APPEND) + [str(log)]])
    code = commands.execute_batch(iter(["a", "b", "c"]), 0, None)
    assert code == ExitCode.SUCCESS
    assert log.read_text().splitlines() == ["a b c"]


def test_execute_batch_keeps_post_args(tmp_path):
    log = tmp_path / "log.txt"
    commands = CommandSet.new_batch([_py(APPEND) + [str(log), "{}", "end"]])
    assert commands.execute_batch(iter(["a", "b"]), 0, None) == ExitCode.SUCCESS
    assert log.read_text().splitlines() == ["a b end"]


def test_execute_batch_without_paths_runs_nothing(tmp_path):
    log = tmp_path / "log.txt"
    commands = CommandSet.new_batch([_py(APPEND) + [str(log)]])
    assert commands.execute_batch(iter([]), 0, None) == ExitCode.SUCCESS
    assert not log.exists()


def test_execute_batch_failure():
    commands = CommandSet.new_batch([_py("import sys; sys.exit(1)")])
    assert commands.execute_batch(iter(["a"]), 0, None) == ExitCode.GENERAL_ERROR