import io

import pytest

from orchestrion.importcfg import ImportConfig

SAMPLE = """# import config
packagefile fmt=/work/b002/_pkg_.a
packagefile github.com/example/lib=/work/b010/_pkg_.a
importmap lib=github.com/example/lib

modinfo "some data"
packagefile broken
"""


def test_parse_sample():
    cfg = ImportConfig.parse(SAMPLE)
    assert cfg.package_file == {
        "fmt": "/work/b002/_pkg_.a",
        "github.com/example/lib": "/work/b010/_pkg_.a",
    }
    assert cfg.import_map == {"lib": "github.com/example/lib"}
    assert cfg.extras == ['modinfo "some data"', "packagefile broken"]


def test_parse_keeps_lines_without_space_as_extras():
    cfg = ImportConfig.parse("standalone\r\n  \n")
    assert cfg.extras == ["standalone"]
    assert cfg.package_file == {}


def test_dumps_order_and_format():
    cfg = ImportConfig(
        package_file={"fmt": "/a.a"},
        import_map={"x": "y"},
        extras=["extra line"],
    )
    assert cfg.dumps() == "importmap x=y\npackagefile fmt=/a.a\nextra line\n"


def test_round_trip_through_text():
    cfg = ImportConfig.parse(SAMPLE)
    assert ImportConfig.parse(cfg.dumps()) == cfg


def test_write_to_stream():
    cfg = ImportConfig.parse(SAMPLE)
    buffer = io.StringIO()
    cfg.write(buffer)
    assert buffer.getvalue() == cfg.dumps()


def test_file_round_trip(tmp_path):
    cfg = ImportConfig.parse(SAMPLE)
    path = tmp_path / "importcfg"
    cfg.write_file(path)
    assert ImportConfig.parse_file(path) == cfg


def test_parse_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        ImportConfig.parse_file(tmp_path / "nope")


def test_combine_package_file():
    base = ImportConfig(package_file={"a": "/a.a"})
    other = ImportConfig(package_file={"a": "/other.a", "b": "/b.a"})
    assert base.combine_package_file(other) is True
    assert base.package_file == {"a": "/a.a", "b": "/b.a"}
    assert base.combine_package_file(other) is False


def test_lookup_direct(tmp_path):
    archive = tmp_path / "pkg.a"
    archive.write_bytes(b"archive-bytes")
    cfg = ImportConfig(package_file={"example/pkg": str(archive)})
    with cfg.lookup("example/pkg") as stream:
        assert stream.read() == b"archive-bytes"


def test_lookup_mapped(tmp_path):
    archive = tmp_path / "pkg.a"
    archive.write_bytes(b"mapped")
    cfg = ImportConfig(
        package_file={"example/vendor/pkg": str(archive)},
        import_map={"pkg": "example/vendor/pkg"},
    )
    with cfg.lookup("pkg") as stream:
        assert stream.read() == b"mapped"


def test_lookup_missing():
    with pytest.raises(LookupError, match='no package file found for "missing"'):
        ImportConfig().lookup("missing")


def test_lookup_missing_mapped():
    cfg = ImportConfig(import_map={"alias": "real/path"})
    with pytest.raises(LookupError, match='mapped from "alias"'):
        cfg.lookup("alias")