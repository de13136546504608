"""Inspecting and editing ``go.mod`` files through the ``go mod`` commands."""

from __future__ import annotations

import json
import os
import stat
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import IO, Any, Protocol


class _GoModEdit(Protocol):
    def edit_flag(self) -> str: ...


class GoModVersion(str):
    """The value of the ``go`` directive."""

    def edit_flag(self) -> str:
        """Return the ``go mod edit`` flag that sets this directive."""
        return f"-go={self}"


class GoModToolchain(str):
    """The value of the ``toolchain`` directive; empty when absent."""

    def edit_flag(self) -> str:
        """Return the ``go mod edit`` flag that sets (or removes) this directive."""
        if not self:
            return "-toolchain=none"
        return f"-toolchain={self}"


@dataclass(frozen=True)
class GoModRequire:
    """The target of a ``require`` directive entry."""

    path: str
    version: str

    def edit_flag(self) -> str:
        """Return the ``go mod edit`` flag that adds this requirement."""
        return f"-require={self.path}@{self.version}"


@dataclass
class GoMod:
    """Selected entries from the content of a ``go.mod`` file."""

    go: GoModVersion = GoModVersion("")
    toolchain: GoModToolchain = GoModToolchain("")
    require: list[GoModRequire] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: str | bytes | Mapping[str, Any]) -> GoMod:
        """Build from the output of ``go mod edit -json`` (text or decoded)."""
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data)
        if not isinstance(data, Mapping):
            raise ValueError("expected a JSON object")
        requires = [
            GoModRequire(entry.get("Path", ""), entry.get("Version", ""))
            for entry in data.get("Require") or ()
        ]
        return cls(
            go=GoModVersion(data.get("Go") or ""),
            toolchain=GoModToolchain(data.get("Toolchain") or ""),
            require=requires,
        )

    def requires(self, path: str) -> str | None:
        """Return the required version of module ``path``, or None if not required."""
        for entry in self.require:
            if entry.path == path:
                return entry.version
        return None


def _go_env() -> dict[str, str]:
    return {**os.environ, "GOTOOLCHAIN": "local"}


def run_go_mod(
    command: str, modfile: str, *args: str, stdout: IO[Any] | int | None = None
) -> subprocess.CompletedProcess:
    """Run ``go mod <command> -modfile <modfile> <args...>``.

    Standard output goes to ``stdout`` (inherited by default). Raises
    CalledProcessError if the command fails.
    """
    return subprocess.run(
        ["go", "mod", command, "-modfile", modfile, *args],
        env=_go_env(),
        stdout=stdout,
        check=True,
    )


def run_go_get(modfile: str, *args: str) -> subprocess.CompletedProcess:
    """Run ``go get -modfile <modfile>`` with the given module specifications."""
    return subprocess.run(
        ["go", "get", "-modfile", modfile, *args],
        env=_go_env(),
        check=True,
    )


def parse_go_mod(modfile: str) -> GoMod:
    """Parse ``modfile`` using ``go mod edit -json``."""
    try:
        result = run_go_mod("edit", modfile, "-json", stdout=subprocess.PIPE)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"running `go mod edit -json`: {exc}") from exc
    try:
        return GoMod.from_json(result.stdout)
    except ValueError as exc:
        raise RuntimeError(f"decoding output of `go mod edit -json`: {exc}") from exc


def run_go_mod_edit(modfile: str, *args: _GoModEdit) -> None:
    """Apply edits to ``modfile``, then tidy it, and re-vendor if there is a vendor directory."""
    if not args:
        return

    flags = [edit.edit_flag() for edit in args]
    try:
        run_go_mod("edit", modfile, *flags)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"running `go mod edit [{' '.join(flags)}]`: {exc}") from exc

    try:
        run_go_mod("tidy", modfile)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"running `go mod tidy`: {exc}") from exc

    vendor_dir = os.path.normpath(os.path.join(modfile, "..", "vendor"))
    try:
        info = os.stat(vendor_dir)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise RuntimeError(f"checking for vendor directory {vendor_dir!r}: {exc}") from exc
    if not stat.S_ISDIR(info.st_mode):
        return

    try:
        run_go_mod("vendor", modfile)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"running `go mod vendor`: {exc}") from exc