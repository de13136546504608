"""The Go ``compile`` tool invocation."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Sequence

from ..goflag import CompileFlags, parse_compile_flags
from ..linkdeps import LinkDeps
from .command import Command, CommandType

_LANG_RE = re.compile(r"go(\d+)\.(\d+)")


def _parent(path: str) -> str:
    return os.path.normpath(os.path.dirname(path) or ".")


def _lang_key(text: str) -> tuple[int, int] | None:
    match = _LANG_RE.fullmatch(text)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


class CompileCommand(Command):
    """A ``go tool compile`` invocation."""

    def __init__(
        self,
        args: Sequence[str],
        flags: CompileFlags | None = None,
        files: Iterable[str] | None = None,
        import_path: str = "",
    ) -> None:
        super().__init__(args)
        self.flags = flags if flags is not None else CompileFlags()
        self.files: list[str] = list(files or ())
        # Import path of the package being built.
        self.import_path = import_path
        # The $WORK directory: the parent of the stage directory holding importcfg.
        self.work_dir = _parent(_parent(self.flags.import_cfg)) if self.flags.import_cfg else ""
        # Link-time dependencies that dependents of this package must honour.
        self.link_deps = LinkDeps()

    def type(self) -> CommandType:
        return CommandType.COMPILE

    def show_version(self) -> bool:
        return self.flags.show_version

    def test_main(self) -> bool:
        """Return True if this compiles a synthetic ``go test`` main package.

        That is the case when the package is ``main`` and every Go file sits
        in the same directory as the importcfg file.
        """
        if self.flags.package != "main":
            return False
        stage_dir = _parent(self.flags.import_cfg)
        return all(_parent(path) == stage_dir for path in self.go_files())

    def set_lang(self, version: str | None) -> None:
        """Raise the ``-lang`` level to ``version`` if it is currently lower.

        An empty or None ``version`` places no requirement. Nothing changes
        when no ``-lang`` flag was given.
        """
        if not version:
            return
        target = _lang_key(version)
        if target is None:
            raise ValueError(f"invalid Go language version {version!r}")
        if not self.flags.lang:
            return
        current = _lang_key(self.flags.lang)
        if current is not None and current >= target:
            return
        text = f"go{target[0]}.{target[1]}"
        self.set_flag("-lang", text)
        self.flags.lang = text

    def go_files(self) -> list[str]:
        """Return the Go source files among the positional arguments."""
        return [path for path in self.files if path.endswith(".go")]

    def add_files(self, files: Iterable[str]) -> None:
        """Append Go source files to the command's arguments."""
        for path in files:
            self._param_pos[path] = len(self.args)
            self.args.append(path)
            self.files.append(path)


def parse_compile_command(import_path: str, args: Sequence[str]) -> CompileCommand:
    """Parse a ``compile`` invocation; ``args`` starts with the tool path."""
    if not args:
        raise ValueError("unexpected number of command arguments")
    flags, files = parse_compile_flags(args[1:])
    return CompileCommand(args, flags=flags, files=files, import_path=import_path)