"""Command-line flag parsing with the Go toolchain's rules, and the flag sets
of the ``compile`` and ``link`` tools."""

from __future__ import annotations

import enum
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any


class FlagError(ValueError):
    """Raised when command-line flags cannot be parsed."""


class _Kind(enum.Enum):
    BOOL = "bool"
    INT = "int"
    STRING = "string"
    BOOL_FUNC = "boolfunc"


@dataclass
class _Flag:
    kind: _Kind
    usage: str
    value: Any = None
    callback: Callable[[str], None] | None = None


_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError("parse error")


def _parse_int(text: str) -> int:
    if not text or text != text.strip():
        raise ValueError("parse error")
    sign, body = "", text
    if body[0] in "+-":
        sign, body = body[0], body[1:]
    if len(body) > 1 and body[0] == "0" and body[1] not in "xXoObB":
        body = "0o" + body[1:]
    try:
        number = int(sign + body, 0)
    except ValueError:
        raise ValueError("parse error") from None
    if not _INT_MIN <= number <= _INT_MAX:
        raise ValueError("value out of range")
    return number


class FlagSet:
    """A set of named flags, parsed as the Go ``flag`` package does."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._flags: dict[str, _Flag] = {}

    def _define(self, name: str, flag: _Flag) -> None:
        if name in self._flags:
            raise FlagError(f"{self.name} flag redefined: {name}")
        self._flags[name] = flag

    def add_bool(self, name: str, default: bool, usage: str) -> None:
        """Define a boolean flag."""
        self._define(name, _Flag(_Kind.BOOL, usage, default))

    def add_int(self, name: str, default: int, usage: str) -> None:
        """Define an integer flag."""
        self._define(name, _Flag(_Kind.INT, usage, default))

    def add_string(self, name: str, default: str, usage: str) -> None:
        """Define a string flag."""
        self._define(name, _Flag(_Kind.STRING, usage, default))

    def add_bool_func(self, name: str, usage: str, callback: Callable[[str], None]) -> None:
        """Define a flag needing no value that calls ``callback`` each time it is set."""
        self._define(name, _Flag(_Kind.BOOL_FUNC, usage, callback=callback))

    def value(self, name: str) -> Any:
        """Return the current value of a defined flag."""
        return self._flags[name].value

    def _set(self, flag: _Flag, text: str) -> None:
        if flag.kind is _Kind.BOOL:
            flag.value = _parse_bool(text)
        elif flag.kind is _Kind.INT:
            flag.value = _parse_int(text)
        elif flag.kind is _Kind.STRING:
            flag.value = text
        else:
            flag.callback(text)

    def parse(self, args: Sequence[str]) -> list[str]:
        """Parse flags from ``args`` and return the remaining positional arguments."""
        args = list(args)
        pos = 0
        while pos < len(args):
            arg = args[pos]
            if len(arg) < 2 or arg[0] != "-":
                break
            minuses = 2 if arg[1] == "-" else 1
            if minuses == 2 and len(arg) == 2:
                pos += 1
                break
            name = arg[minuses:]
            if not name or name[0] in "-=":
                raise FlagError(f"bad flag syntax: {arg}")
            pos += 1

            name, eq, text = name.partition("=")
            has_value = bool(eq)
            flag = self._flags.get(name)
            if flag is None:
                if name in ("help", "h"):
                    raise FlagError("flag: help requested")
                raise FlagError(f"flag provided but not defined: -{name}")

            if flag.kind in (_Kind.BOOL, _Kind.BOOL_FUNC):
                try:
                    self._set(flag, text if has_value else "true")
                except ValueError as exc:
                    if has_value:
                        raise FlagError(f"invalid boolean value {_quote(text)} for -{name}: {exc}") from exc
                    raise FlagError(f"invalid boolean flag {name}: {exc}") from exc
                continue

            if not has_value and pos < len(args):
                text = args[pos]
                pos += 1
                has_value = True
            if not has_value:
                raise FlagError(f"flag needs an argument: -{name}")
            try:
                self._set(flag, text)
            except ValueError as exc:
                raise FlagError(f"invalid value {_quote(text)} for flag -{name}: {exc}") from exc
        return args[pos:]


_B, _I, _S = _Kind.BOOL, _Kind.INT, _Kind.STRING

_COMPILE_FLAGS = [
    (_B, "%", "debug non-static initializers"),
    (_B, "+", "compiling runtime"),
    (_B, "B", "disable bounds checking"),
    (_B, "C", "disable printing of columns in error messages"),
    (_S, "D", "set relative path for local imports"),
    (_B, "E", "debug symbol export"),
    (_S, "I", "add directory to import search path"),
    (_B, "K", "debug missing line numbers"),
    (_B, "L", "also show actual source file names in error messages for positions affected by //line directives"),
    (_B, "N", "disable optimizations"),
    (_B, "S", "print assembly listing"),
    (_B, "W", "debug parse tree after type checking"),
    (_B, "asan", "build code compatible with C/C++ address sanitizer"),
    (_S, "asmhdr", "write assembly header to file"),
    (_S, "bench", "append benchmark times to file"),
    (_S, "blockprofile", "write block profile to file"),
    (_S, "buildid", "record id as the build id in the export metadata"),
    (_I, "c", "concurrency during compilation (1 means no concurrency)"),
    (_B, "clobberdead", "clobber dead stack slots (for debugging)"),
    (_B, "clobberdeadreg", "clobber dead registers (for debugging)"),
    (_B, "complete", "compiling complete package (no C or assembly)"),
    (_S, "coveragecfg", "read coverage configuration from file"),
    (_S, "cpuprofile", "write cpu profile to file"),
    (_S, "d", "enable debugging settings; try -d help"),
    (_B, "dwarf", "generate DWARF symbols"),
    (_B, "dwarfbasentries", "use base address selection entries in DWARF"),
    (_B, "dwarflocationlists", "add location lists to DWARF in optimized mode"),
    (_B, "dynlink", "support references to Go symbols defined in other shared libraries"),
    (_B, "e", "no limit on number of errors reported"),
    (_S, "embedcfg", "read go:embed configuration from file"),
    (_S, "env", "add definition of the form key=value to environment"),
    (_B, "errorurl", "print explanatory URL with error message if applicable"),
    (_I, "gendwarfinl", "generate DWARF inline info records"),
    (_S, "goversion", "required version of the runtime"),
    (_B, "h", "halt on error"),
    (_S, "importcfg", "read import configuration from file"),
    (_S, "installsuffix", "set pkg directory suffix"),
    (_B, "j", "debug runtime-initialized variables"),
    (_S, "json", "version,file for JSON compiler/optimizer detail output"),
    (_B, "l", "disable inlining"),
    (_S, "lang", "Go language version source code expects"),
    (_S, "linkobj", "write linker-specific object to file"),
    (_B, "linkshared", "generate code that will be linked against Go shared libraries"),
    (_B, "live", "debug liveness analysis"),
    (_B, "m", "print optimization decisions"),
    (_S, "memprofile", "write memory profile to file"),
    (_S, "memprofilerate", "set runtime.MemProfileRate to rate"),
    (_B, "msan", "build code compatible with C/C++ memory sanitizer"),
    (_S, "mutexprofile", "write mutex profile to file"),
    (_B, "nolocalimports", "reject local (relative) imports"),
    (_S, "o", "write output to file"),
    (_S, "p", "set expected package import path"),
    (_B, "pack", "write to file.a instead of file.o"),
    (_S, "pgoprofile", "read profile or pre-process profile from file"),
    (_B, "r", "debug generated wrappers"),
    (_B, "race", "enable race detector"),
    (_B, "shared", "generate code that can be linked into a shared library"),
    (_B, "smallframes", "reduce the size limit for stack allocated objects"),
    (_S, "spectre", "enable spectre mitigations in list (all, index, ret)"),
    (_B, "std", "compiling standard library"),
    (_S, "symabis", "read symbol ABIs from file"),
    (_B, "t", "enable tracing for debugging the compiler"),
    (_S, "traceprofile", "write an execution trace to file"),
    (_S, "trimpath", "remove prefix from recorded source file paths"),
    (_B, "v", "increase debug verbosity"),
    (_B, "w", "debug type checking"),
    (_B, "wb", "enable write barrier"),
]

_LINK_FLAGS = [
    (_S, "B", 'set ELF NT_GNU_BUILD_ID note or Mach-O UUID; use "gobuildid" to generate it from the Go build ID'),
    (_S, "E", "set entry symbol name"),
    (_S, "H", "set header type"),
    (_S, "I", "use linker as ELF dynamic linker"),
    (_S, "L", "add specified directory to library path"),
    (_S, "R", "set address rounding quantum"),
    (_I, "T", "set the start address of text symbols"),
    (_S, "X", "add string value definition of the form importpath.name=value"),
    (_B, "a", "no-op (deprecated)"),
    (_B, "asan", "enable ASan interface"),
    (_B, "aslr", "enable ASLR for buildmode=c-shared on windows"),
    (_S, "benchmark", "set to 'mem' or 'cpu' to enable phase benchmarking"),
    (_S, "benchmarkprofile", "emit phase profiles to base_phase.{cpu,mem}prof"),
    (_B, "bindnow", "mark a dynamically linked ELF object for immediate function binding"),
    (_S, "buildid", "record id as Go toolchain build id"),
    (_S, "buildmode", "set build mode"),
    (_B, "c", "dump call graph"),
    (_S, "capturehostobjs", "capture host object files loaded during internal linking to specified dir"),
    (_B, "checklinkname", "check linkname symbol references"),
    (_B, "compressdwarf", "compress DWARF if possible"),
    (_S, "cpuprofile", "write cpu profile to file"),
    (_B, "d", "disable dynamic executable"),
    (_B, "debugnosplit", "dump nosplit call graph"),
    (_I, "debugtextsize", "debug text section max size"),
    (_I, "debugtramp", "debug trampolines"),
    (_B, "dumpdep", "dump symbol dependency graph"),
    (_S, "extar", "archive program for buildmode=c-archive"),
    (_S, "extld", "use linker when linking in external mode"),
    (_S, "extldflags", "pass flags to external linker"),
    (_B, "f", "ignore version mismatch"),
    (_B, "g", "disable go package data checks"),
    (_B, "h", "halt on error"),
    (_S, "importcfg", "read import configuration from file"),
    (_S, "installsuffix", "set package directory suffix"),
    (_S, "k", "set field tracking symbol"),
    (_S, "libgcc", 'compiler support lib for internal linking; use "none" to disable'),
    (_S, "linkmode", "set link mode"),
    (_B, "linkshared", "link against installed Go shared libraries"),
    (_S, "memprofile", "write memory profile to file"),
    (_S, "memprofilerate", "set runtime.MemProfileRate to rate"),
    (_B, "msan", "enable MSan interface"),
    (_B, "n", "no-op (deprecated)"),
    (_S, "o", "write output to file"),
    (_S, "pluginpath", "full path name for plugin"),
    (_B, "pruneweakmap", "prune weak mapinit refs"),
    (_S, "r", "set the ELF dynamic linker search path to dir1:dir2:..."),
    (_B, "race", "enable race detector"),
    (_I, "randlayout", "randomize function layout"),
    (_B, "s", "disable symbol table"),
    (_I, "strictdups", "sanity check duplicate symbol contents during object file reading (1=warn 2=err)."),
    (_S, "tmpdir", "use directory for temporary files"),
    (_B, "v", "print link trace"),
    (_B, "w", "disable DWARF generation"),
]

_COMPILE_CAPTURED = {
    "asmhdr": "asmhdr",
    "buildid": "build_id",
    "importcfg": "import_cfg",
    "lang": "lang",
    "o": "output",
    "p": "package",
}

_LINK_CAPTURED = {
    "buildmode": "build_mode",
    "importcfg": "import_cfg",
    "o": "output",
}


@dataclass
class CompileFlags:
    """The ``compile`` tool flags that are acted upon."""

    asmhdr: str = ""
    build_id: str = ""
    import_cfg: str = ""
    lang: str = ""
    output: str = ""
    package: str = ""
    show_version: bool = False


@dataclass
class LinkFlags:
    """The ``link`` tool flags that are acted upon."""

    build_mode: str = ""
    import_cfg: str = ""
    output: str = ""
    show_version: bool = False


@dataclass
class _Parsed:
    values: dict[str, Any]
    show_version: bool
    positional: list[str] = field(default_factory=list)


def _parse_tool_flags(name: str, table, captured: dict[str, str], args: Sequence[str]) -> _Parsed:
    flag_set = FlagSet(name)
    defaults = {_B: False, _I: 0, _S: ""}
    adders = {_B: flag_set.add_bool, _I: flag_set.add_int, _S: flag_set.add_string}
    for kind, flag_name, usage in table:
        adders[kind](flag_name, defaults[kind], usage)
    version_requests: list[str] = []
    flag_set.add_bool_func("V", "print version and exit", version_requests.append)

    positional = flag_set.parse(args)
    values = {attr: flag_set.value(flag_name) for flag_name, attr in captured.items()}
    return _Parsed(values, bool(version_requests), positional)


def parse_compile_flags(args: Sequence[str]) -> tuple[CompileFlags, list[str]]:
    """Parse ``compile`` tool arguments into flags and positional arguments."""
    parsed = _parse_tool_flags("compile version go1.23", _COMPILE_FLAGS, _COMPILE_CAPTURED, args)
    return CompileFlags(show_version=parsed.show_version, **parsed.values), parsed.positional


def parse_link_flags(args: Sequence[str]) -> tuple[LinkFlags, list[str]]:
    """Parse ``link`` tool arguments into flags and positional arguments."""
    parsed = _parse_tool_flags("link version go1.23", _LINK_FLAGS, _LINK_CAPTURED, args)
    return LinkFlags(show_version=parsed.show_version, **parsed.values), parsed.positional