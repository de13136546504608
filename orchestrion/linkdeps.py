"""The ``link.deps`` files that record link-time dependencies of Go archives."""

from __future__ import annotations

import io
import subprocess
from collections.abc import Iterable, Iterator
from typing import TextIO

from .importcfg import ImportConfig

FILENAME = "link.deps"
HEADER_V1 = "#" + FILENAME + "@v1"


class LinkDeps:
    """The set of synthetic link-time dependencies recorded in a Go archive.

    These include the transitive closure of link-time dependencies, so that
    consumers need not walk transitive dependencies themselves.
    """

    def __init__(self, deps: Iterable[str] = ()) -> None:
        self._deps: set[str] = set(deps)

    @classmethod
    def from_import_config(cls, config: ImportConfig) -> LinkDeps:
        """Aggregate the ``link.deps`` of every archive listed in ``config``."""
        result = cls()
        for import_path, archive in config.package_file.items():
            try:
                found = cls.from_archive(archive)
            except (OSError, ValueError, RuntimeError, subprocess.CalledProcessError) as exc:
                raise RuntimeError(
                    f"reading {FILENAME} from {import_path}={archive}: {exc}"
                ) from exc
            for dep in found:
                # Already satisfied at compile time; no need to carry it over.
                if dep not in config.package_file:
                    result.add(dep)
        return result

    @classmethod
    def from_archive(cls, archive: str) -> LinkDeps:
        """Read ``link.deps`` from a Go archive; empty if the archive has none."""
        try:
            data = read_archive_data(archive, FILENAME)
        except (OSError, RuntimeError, subprocess.CalledProcessError) as exc:
            raise RuntimeError(f'reading {FILENAME} from "{archive}": {exc}') from exc
        if data is None:
            return cls()
        return cls.read(io.StringIO(data.decode("utf-8")))

    @classmethod
    def read(cls, stream: TextIO) -> LinkDeps:
        """Read ``link.deps`` content from a text stream."""
        header = stream.readline()
        if not header.endswith("\n"):
            raise EOFError(f"{FILENAME} data ends before the end of its header line")
        header = header.strip()
        if header != HEADER_V1:
            raise ValueError(
                f'unsupported data format "{header}", a newer Orchestion release may be required'
            )
        return cls._parse_v1(stream)

    @classmethod
    def _parse_v1(cls, stream: TextIO) -> LinkDeps:
        deps = cls()
        while True:
            line = stream.readline()
            # An unterminated final line is not a complete entry.
            if not line.endswith("\n"):
                return deps
            if line.startswith("#"):
                continue
            line = line.strip()
            if line:
                deps.add(line)

    @classmethod
    def read_file(cls, filename) -> LinkDeps:
        """Read a ``link.deps`` file."""
        with open(filename, encoding="utf-8", newline="") as stream:
            return cls.read(stream)

    def __contains__(self, import_path: object) -> bool:
        return import_path in self._deps

    def __len__(self) -> int:
        return len(self._deps)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._deps))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinkDeps):
            return NotImplemented
        return self._deps == other._deps

    def __repr__(self) -> str:
        return f"LinkDeps({sorted(self._deps)!r})"

    def add(self, import_path: str) -> None:
        """Register an import path."""
        self._deps.add(import_path)

    def dependencies(self) -> list[str]:
        """Return all registered import paths, sorted."""
        return sorted(self._deps)

    def empty(self) -> bool:
        """Return True when no import path is registered."""
        return not self._deps

    def write(self, stream: TextIO) -> None:
        """Write the content to a text stream, entries sorted for determinism."""
        stream.write(HEADER_V1 + "\n")
        for dep in sorted(self._deps):
            stream.write(dep + "\n")

    def write_file(self, filename) -> None:
        """Write the content to ``filename``."""
        with open(filename, "w", encoding="utf-8", newline="") as stream:
            self.write(stream)


def read_archive_data(archive: str, entry: str) -> bytes | None:
    """Return the content of ``entry`` in a Go archive, or None if it is absent."""
    listing = subprocess.run(
        ["go", "tool", "pack", "t", archive],
        capture_output=True,
        text=True,
    )
    if listing.returncode != 0:
        raise RuntimeError(
            f'running `go tool pack t "{archive}"`: exit status {listing.returncode}\n{listing.stderr}'
        )
    entries = listing.stdout.split("\n")[:-1]
    if entry not in entries:
        return None

    content = subprocess.run(
        ["go", "tool", "pack", "p", archive, entry],
        capture_output=True,
        check=True,
    )
    return content.stdout