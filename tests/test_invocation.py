"""Tests for the invocation data model."""

from envrun.domain.invocation import ExecOptions, Invocation, split_exec_options


def test_from_argv_splits_command():
    invocation = Invocation.from_argv(["pytest", "-v", "tests/test_a.py"])
    assert invocation.command == "pytest"
    assert invocation.args == ("-v", "tests/test_a.py")
    assert invocation.close_extra_descriptors is True


def test_from_argv_drops_leading_separator():
    invocation = Invocation.from_argv(["--", "ls", "--", "-la"], keep_file_descriptors=True)
    assert invocation.command == "ls"
    assert invocation.args == ("--", "-la")
    assert invocation.close_extra_descriptors is False


def test_from_argv_without_command():
    assert Invocation.from_argv([]).command is None
    assert Invocation.from_argv(["--"]).command is None


def test_exec_args_end_with_marker():
    invocation = Invocation("tool", ("a",), close_extra_descriptors=False)
    assert invocation.exec_args() == ["a", ExecOptions(close_others=False)]


def test_split_exec_options():
    assert split_exec_options(["a", ExecOptions()]) == (["a"], ExecOptions())
    assert split_exec_options(["a", "b"]) == (["a", "b"], None)
    assert split_exec_options([]) == ([], None)
