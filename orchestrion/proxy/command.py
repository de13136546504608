"""Go toolchain commands intercepted through ``-toolexec``."""

from __future__ import annotations

import enum
import json
import subprocess
import sys
from collections.abc import Callable, Sequence
from typing import IO, Any, TypeVar


class CommandType(enum.IntEnum):
    """The kind of Go tool being invoked."""

    OTHER = 0
    COMPILE = 1
    LINK = 2


class SkipCommand(Exception):
    """Raised by a command processor when the command must not run and counts as a success."""


class Command:
    """A Go tool invocation, keeping track of where each argument sits."""

    def __init__(self, args: Sequence[str]) -> None:
        self.args: list[str] = list(args)
        # Position in ``args`` of each parameter value (the tool path excluded).
        self._param_pos: dict[str, int] = {
            value: pos for pos, value in enumerate(self.args[1:], start=1)
        }

    def type(self) -> CommandType:
        """Return the kind of Go tool this command runs."""
        return CommandType.OTHER

    def show_version(self) -> bool:
        """Return True if the command was asked to print its full version and exit."""
        return False

    def close(self, error: BaseException | None = None) -> None:
        """Release resources held by the command; ``error`` is its failure, if any."""

    def set_flag(self, flag: str, value: str) -> None:
        """Replace the value given to ``flag``; raise ValueError if it is not present."""
        for arg, idx in self._param_pos.items():
            if arg in (flag, "-" + flag):
                self.args[idx + 1] = value
                return
            name, eq, _ = arg.partition("=")
            if eq and name in (flag, "-" + flag):
                self.args[idx] = f"{name}={value}"
                return
        quoted = " ".join(json.dumps(arg, ensure_ascii=False) for arg in self.args)
        raise ValueError(f"argument {json.dumps(flag, ensure_ascii=False)} not found in [{quoted}]")

    def replace_param(self, param: str, value: str) -> None:
        """Replace the parameter ``param`` with ``value``; raise ValueError if absent."""
        try:
            idx = self._param_pos.pop(param)
        except KeyError:
            raise ValueError(f"{param} not found") from None
        self.args[idx] = value
        self._param_pos[value] = idx

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.args!r})"


def run_command(
    cmd: Command,
    stdout: IO[Any] | int | None = None,
    stderr: IO[Any] | int | None = None,
    stdin: IO[Any] | int | None = None,
) -> subprocess.CompletedProcess:
    """Run the underlying tool; standard streams are inherited unless given.

    Raises CalledProcessError if the tool exits with a non-zero status.
    """
    return subprocess.run(cmd.args, stdin=stdin, stdout=stdout, stderr=stderr, check=True)


def must_run_command(
    cmd: Command,
    stdout: IO[Any] | int | None = None,
    stderr: IO[Any] | int | None = None,
    stdin: IO[Any] | int | None = None,
) -> None:
    """Run the underlying tool, exiting with its status code if it fails."""
    try:
        run_command(cmd, stdout=stdout, stderr=stderr, stdin=stdin)
    except subprocess.CalledProcessError as exc:
        sys.exit(exc.returncode)


C = TypeVar("C", bound=Command)


def process_command(
    cmd: Command, command_class: type[C], processor: Callable[[C], None]
) -> bool:
    """Apply ``processor`` to ``cmd`` if it is a ``command_class``; report whether it was."""
    if not isinstance(cmd, command_class):
        return False
    processor(cmd)
    return True