"""The Go ``link`` tool invocation."""

from __future__ import annotations

import os
from collections.abc import Sequence

from ..goflag import LinkFlags, parse_link_flags
from .command import Command, CommandType


def _parent(path: str) -> str:
    return os.path.normpath(os.path.dirname(path) or ".")


class LinkCommand(Command):
    """A ``go tool link`` invocation."""

    def __init__(self, args: Sequence[str], flags: LinkFlags | None = None) -> None:
        super().__init__(args)
        self.flags = flags if flags is not None else LinkFlags()
        # The $WORK directory: importcfg lives directly in the stage directory below it.
        self.work_dir = _parent(_parent(self.flags.import_cfg))

    def type(self) -> CommandType:
        return CommandType.LINK

    def show_version(self) -> bool:
        return self.flags.show_version

    def stage(self) -> str:
        """Return the name of the stage directory the output is written under."""
        return os.path.basename(_parent(_parent(self.flags.output)))


def parse_link_command(args: Sequence[str]) -> LinkCommand:
    """Parse a ``link`` invocation; ``args`` starts with the tool path."""
    if not args:
        raise ValueError("unexpected number of command arguments")
    flags, _ = parse_link_flags(args[1:])
    return LinkCommand(args, flags=flags)