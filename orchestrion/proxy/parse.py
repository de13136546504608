"""Recognising which Go tool a ``-toolexec`` invocation runs."""

from __future__ import annotations

import os
from collections.abc import Sequence

from .command import Command, CommandType
from .compile import parse_compile_command
from .link import parse_link_command


def parse_command_id(name: str) -> CommandType:
    """Identify the Go tool from its path, ignoring any file extension."""
    if not name:
        raise ValueError("unexpected empty command name")
    base = os.path.basename(name)
    dot = base.rfind(".")
    if dot >= 0:
        base = base[:dot]
    if base == "compile":
        return CommandType.COMPILE
    if base == "link":
        return CommandType.LINK
    return CommandType.OTHER


def parse_command(import_path: str, args: Sequence[str]) -> Command:
    """Parse a Go tool invocation whose first element is the tool path."""
    if not args:
        raise ValueError("unexpected empty command arguments")
    kind = parse_command_id(args[0])
    if kind is CommandType.COMPILE:
        return parse_compile_command(import_path, args)
    if kind is CommandType.LINK:
        return parse_link_command(args)
    return Command(args)