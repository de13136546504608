import io
import subprocess

import pytest

from orchestrion.importcfg import ImportConfig
from orchestrion.linkdeps import FILENAME, HEADER_V1, LinkDeps, read_archive_data


def _fake_pack(archives):
    """Build a stand-in for subprocess.run answering `go tool pack` calls."""

    def run(args, capture_output=False, text=False, check=False, **kwargs):
        assert args[:3] == ["go", "tool", "pack"]
        archive = args[4]
        if archive not in archives:
            err = "pack: cannot open archive"
            if check:
                raise subprocess.CalledProcessError(1, args)
            return subprocess.CompletedProcess(args, 1, "" if text else b"", err if text else err.encode())
        members = archives[archive]
        if args[3] == "t":
            out = "".join(name + "\n" for name in members)
        else:
            out = members[args[5]]
        if not text:
            out = out.encode()
        return subprocess.CompletedProcess(args, 0, out, "" if text else b"")

    return run


def _deps_text(*deps):
    return HEADER_V1 + "\n" + "".join(d + "\n" for d in deps)


def test_write_format():
    deps = LinkDeps(["b/pkg", "a/pkg"])
    buffer = io.StringIO()
    deps.write(buffer)
    assert buffer.getvalue() == "#link.deps@v1\na/pkg\nb/pkg\n"


def test_round_trip_stream():
    deps = LinkDeps(["example.com/x", "example.com/y", "unsafe"])
    buffer = io.StringIO()
    deps.write(buffer)
    buffer.seek(0)
    assert LinkDeps.read(buffer) == deps


def test_round_trip_file(tmp_path):
    deps = LinkDeps(["one", "two"])
    path = tmp_path / FILENAME
    deps.write_file(path)
    assert LinkDeps.read_file(path) == deps


def test_read_skips_comments_and_blank_lines():
    text = HEADER_V1 + "\n# comment\n\n  spaced/pkg  \nplain\n"
    assert LinkDeps.read(io.StringIO(text)).dependencies() == ["plain", "spaced/pkg"]


def test_read_drops_unterminated_last_line():
    text = HEADER_V1 + "\nfirst\nsecond"
    assert LinkDeps.read(io.StringIO(text)).dependencies() == ["first"]


def test_read_unsupported_header():
    with pytest.raises(ValueError, match="unsupported data format"):
        LinkDeps.read(io.StringIO("#link.deps@v2\nx\n"))


def test_read_empty_input():
    with pytest.raises(EOFError):
        LinkDeps.read(io.StringIO(""))


def test_set_operations():
    deps = LinkDeps()
    assert deps.empty()
    deps.add("a")
    deps.add("a")
    deps.add("b")
    assert len(deps) == 2
    assert "a" in deps
    assert "c" not in deps
    assert not deps.empty()
    assert list(deps) == deps.dependencies()


def test_from_archive(monkeypatch):
    archives = {"/w/a.a": {"__.PKGDEF": "x", FILENAME: _deps_text("dep/one", "dep/two")}}
    monkeypatch.setattr(subprocess, "run", _fake_pack(archives))
    assert LinkDeps.from_archive("/w/a.a").dependencies() == ["dep/one", "dep/two"]


def test_from_archive_without_entry(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_pack({"/w/a.a": {"__.PKGDEF": "x"}}))
    assert LinkDeps.from_archive("/w/a.a").empty()
    assert read_archive_data("/w/a.a", FILENAME) is None


def test_read_archive_data_returns_bytes(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_pack({"/w/a.a": {"member": "content"}}))
    assert read_archive_data("/w/a.a", "member") == b"content"


def test_from_archive_failure(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_pack({}))
    with pytest.raises(RuntimeError, match="reading link.deps from"):
        LinkDeps.from_archive("/missing.a")


def test_from_import_config_skips_satisfied(monkeypatch):
    archives = {
        "/w/a.a": {FILENAME: _deps_text("b", "extra/one")},
        "/w/b.a": {FILENAME: _deps_text("extra/two")},
    }
    monkeypatch.setattr(subprocess, "run", _fake_pack(archives))
    config = ImportConfig(package_file={"a": "/w/a.a", "b": "/w/b.a"})
    assert LinkDeps.from_import_config(config).dependencies() == ["extra/one", "extra/two"]


def test_from_import_config_failure(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_pack({}))
    config = ImportConfig(package_file={"a": "/w/a.a"})
    with pytest.raises(RuntimeError, match="a=/w/a.a"):
        LinkDeps.from_import_config(config)