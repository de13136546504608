import pytest

from orchestrion.proxy.command import CommandType
from orchestrion.proxy.parse import parse_command, parse_command_id


@pytest.mark.parametrize(
    "args, expected",
    [
        (["unknown", "irrelevant"], CommandType.OTHER),
        (["compile", "-o", "b002/a.out", "main.go"], CommandType.COMPILE),
        (["link", "-o", "b001/out/a.out", "main.go"], CommandType.LINK),
    ],
    ids=["unknown", "compile", "link"],
)
def test_parse_command(args, expected):
    cmd = parse_command("github.com/DataDog/orchestrion.test", args)
    assert cmd.type() is expected
    assert cmd.args == args


def test_parse_compile_command_lists_go_files():
    cmd = parse_command("x", ["compile", "main.go", "asm.s"])
    assert cmd.go_files() == ["main.go"]


def test_parse_link_command_stage():
    cmd = parse_command("x", ["link", "-o", "/work/b001/exe/a.out", "main.a"])
    assert cmd.stage() == "b001"


def test_parse_command_keeps_import_path():
    cmd = parse_command("example/pkg", ["/tools/compile", "-p", "pkg", "a.go"])
    assert cmd.import_path == "example/pkg"
    assert cmd.go_files() == ["a.go"]


def test_parse_command_empty():
    with pytest.raises(ValueError, match="unexpected empty command arguments"):
        parse_command("x", [])


@pytest.mark.parametrize(
    "name, expected",
    [
        ("/usr/lib/go/pkg/tool/linux_amd64/compile", CommandType.COMPILE),
        ("C:/go/pkg/tool/windows_amd64/link.exe", CommandType.LINK),
        ("compile.exe", CommandType.COMPILE),
        ("asm", CommandType.OTHER),
        ("/path/to/vet", CommandType.OTHER),
    ],
)
def test_parse_command_id(name, expected):
    assert parse_command_id(name) is expected


def test_parse_command_id_empty():
    with pytest.raises(ValueError, match="unexpected empty command name"):
        parse_command_id("")