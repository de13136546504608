import subprocess
import sys

import pytest

from orchestrion.proxy.command import (
    Command,
    CommandType,
    SkipCommand,
    must_run_command,
    process_command,
    run_command,
)


def test_replace_param_found():
    params = ["compile", "-o", "a.out"]
    cmd = Command(params)
    assert cmd.args == params
    assert "b.out" not in cmd.args
    cmd.replace_param("a.out", "b.out")
    assert "b.out" in cmd.args
    assert "a.out" not in cmd.args


def test_replace_param_not_found():
    cmd = Command(["compile", "-o", "a.out"])
    assert "c.out" not in cmd.args
    with pytest.raises(ValueError, match="b.out not found"):
        cmd.replace_param("b.out", "c.out")


def test_replace_param_twice_follows_new_value():
    cmd = Command(["compile", "-o", "a.out"])
    cmd.replace_param("a.out", "b.out")
    cmd.replace_param("b.out", "c.out")
    assert cmd.args == ["compile", "-o", "c.out"]


def test_replaced_param_cannot_be_replaced_again():
    cmd = Command(["compile", "-o", "a.out"])
    cmd.replace_param("a.out", "b.out")
    with pytest.raises(ValueError):
        cmd.replace_param("a.out", "c.out")


def test_tool_path_is_not_a_param():
    cmd = Command(["compile", "-o", "a.out"])
    with pytest.raises(ValueError):
        cmd.replace_param("compile", "link")


def test_set_flag_separate_value():
    cmd = Command(["compile", "-lang", "go1.13", "main.go"])
    cmd.set_flag("-lang", "go1.20")
    assert cmd.args == ["compile", "-lang", "go1.20", "main.go"]


def test_set_flag_without_dash():
    cmd = Command(["compile", "-lang", "go1.13", "main.go"])
    cmd.set_flag("lang", "go1.21")
    assert cmd.args == ["compile", "-lang", "go1.21", "main.go"]


def test_set_flag_equals_form():
    cmd = Command(["compile", "-lang=go1.13", "main.go"])
    cmd.set_flag("-lang", "go1.18")
    assert cmd.args == ["compile", "-lang=go1.18", "main.go"]


def test_set_flag_missing():
    cmd = Command(["compile", "-o", "a.out"])
    with pytest.raises(ValueError, match='argument "-lang" not found'):
        cmd.set_flag("-lang", "go1.18")


def test_base_command_type_and_version():
    cmd = Command(["asm", "-V=full"])
    assert cmd.type() is CommandType.OTHER
    assert cmd.show_version() is False


def test_base_command_type_value():
    assert Command(["asm"]).type() == 0


def test_run_command_captures_output():
    cmd = Command([sys.executable, "-c", "print('hello')"])
    result = run_command(cmd, stdout=subprocess.PIPE)
    assert result.stdout.strip() == b"hello"
    assert result.returncode == 0


def test_run_command_failure_raises():
    cmd = Command([sys.executable, "-c", "import sys; sys.exit(4)"])
    with pytest.raises(subprocess.CalledProcessError) as info:
        run_command(cmd)
    assert info.value.returncode == 4


def test_must_run_command_exits_with_status():
    cmd = Command([sys.executable, "-c", "import sys; sys.exit(3)"])
    with pytest.raises(SystemExit) as info:
        must_run_command(cmd)
    assert info.value.code == 3


class _Special(Command):
    pass


def test_process_command_matching_class():
    seen = []
    cmd = _Special(["tool", "x"])
    assert process_command(cmd, _Special, seen.append) is True
    assert seen == [cmd]


def test_process_command_other_class_is_ignored():
    seen = []
    cmd = Command(["tool", "x"])
    assert process_command(cmd, _Special, seen.append) is False
    assert seen == []


def test_process_command_propagates_skip():
    def skip(_cmd):
        raise SkipCommand("skip command")

    with pytest.raises(SkipCommand):
        process_command(Command(["tool"]), Command, skip)