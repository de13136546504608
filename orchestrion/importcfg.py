"""Reading and writing the files passed to the Go toolchain via ``-importcfg``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, TextIO


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass
class ImportConfig:
    """The contents of an ``importcfg`` (or ``importcfg.link``) file."""

    # Fully-qualified import paths mapped to their build archive location.
    package_file: dict[str, str] = field(default_factory=dict)
    # Import paths mapped to their fully-qualified version.
    import_map: dict[str, str] = field(default_factory=dict)
    # Lines that are kept verbatim so they can be written back.
    extras: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> ImportConfig:
        """Parse ``importcfg`` data from a string."""
        config = cls()
        for raw in text.split("\n"):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            directive, sep, data = line.partition(" ")
            if not sep:
                config.extras.append(line)
                continue

            if directive == "packagefile":
                target = config.package_file
            elif directive == "importmap":
                target = config.import_map
            else:
                config.extras.append(line)
                continue

            key, eq, value = data.partition("=")
            if not eq:
                config.extras.append(line)
                continue
            target[key] = value
        return config

    @classmethod
    def parse_file(cls, filename) -> ImportConfig:
        """Parse the ``importcfg`` file at ``filename``."""
        with open(filename, encoding="utf-8") as stream:
            return cls.parse(stream.read())

    def combine_package_file(self, other: ImportConfig) -> bool:
        """Copy ``packagefile`` entries missing here from ``other``; report any change."""
        changed = False
        for import_path, archive in other.package_file.items():
            if import_path not in self.package_file:
                self.package_file[import_path] = archive
                changed = True
        return changed

    def dumps(self) -> str:
        """Render the configuration in the toolchain's format."""
        lines = [f"importmap {name}={path}" for name, path in self.import_map.items()]
        lines += [f"packagefile {name}={path}" for name, path in self.package_file.items()]
        lines += self.extras
        return "".join(line + "\n" for line in lines)

    def write(self, stream: TextIO) -> None:
        """Write the configuration to a text stream."""
        stream.write(self.dumps())

    def write_file(self, filename) -> None:
        """Write the configuration to ``filename``, replacing its contents."""
        with open(filename, "w", encoding="utf-8") as stream:
            self.write(stream)

    def lookup(self, path: str) -> BinaryIO:
        """Open the archive file for ``path``, following any import mapping."""
        resolved = self.import_map.get(path, path)
        filename = self.package_file.get(resolved, "")
        if not filename:
            message = f"no package file found for {_quote(resolved)}"
            if resolved != path:
                message = f"mapped from {_quote(path)}: {message}"
            raise LookupError(message)
        return open(filename, "rb")