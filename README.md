# orchestrion

Helpers for sitting between the Go toolchain and its `compile` and `link`
tools, the way a `-toolexec` proxy does. The package understands the command
lines and files those tools exchange, so that an invocation can be inspected
and rewritten before the compiler or linker runs.

## What it covers

- `orchestrion.importcfg.ImportConfig` parses and writes the files passed to
  the compiler and linker with `-importcfg`. It keeps `packagefile` and
  `importmap` entries in `package_file` and `import_map`, and any other
  non-comment line in `extras`. `combine_package_file` merges missing
  `packagefile` entries from another config, and `lookup` opens the archive
  for an import path (following `importmap`), raising `LookupError` if none is
  known.
- `orchestrion.linkdeps.LinkDeps` is the set of link-time dependencies stored
  in a `link.deps` file. It reads from a stream, a file, or a Go archive
  (`from_archive` runs `go tool pack`), aggregates the entries of every
  archive in an `ImportConfig` with `from_import_config`, and writes a
  `#link.deps@v1` header followed by the paths in sorted order.
- `orchestrion.goflag` parses command lines with the rules of Go's `flag`
  package (`FlagSet`, raising `FlagError`), and knows the full flag sets of
  `go tool compile` and `go tool link`: `parse_compile_flags` and
  `parse_link_flags` return a `CompileFlags` or `LinkFlags` along with the
  positional arguments.
- `orchestrion.proxy.command` holds `Command` (with `set_flag` and
  `replace_param`), `CommandType`, the `SkipCommand` exception,
  `run_command`, `must_run_command` and `process_command`.
- `orchestrion.proxy.compile.CompileCommand` and
  `orchestrion.proxy.link.LinkCommand` model the two tools. A compile command
  lists its Go files, can add new ones, tells whether it builds a synthetic
  `go test` main package, and can raise its `-lang` level with `set_lang`.
  A link command reports the stage directory its output goes under.
- `orchestrion.proxy.parse.parse_command` picks the right command class from
  the tool path (extension ignored).
- `orchestrion.gomod` reads `go.mod` through `go mod edit -json` into a
  `GoMod`, and applies `GoModVersion`, `GoModToolchain` and `GoModRequire`
  edits with `run_go_mod_edit`, which then runs `go mod tidy` and, when a
  `vendor` directory exists, `go mod vendor`. All `go` invocations run with
  `GOTOOLCHAIN=local`.
- `orchestrion.weaver` lists the packages that get special treatment
  (`special_case_for`, `BehaviorOverride`), and `Weaver.filter_aspects`
  narrows a list of aspects accordingly: none for packages that are never
  woven, only those whose `tracer_internal` attribute is true in
  tracer-internal mode.
- `orchestrion.logsetup` handles log levels given by name or number
  (`parse_log_level`, `set_log_level`), sends JSON-line logs to a file whose
  name may contain `$PID` (`set_log_file`, `log_file_name`), builds profile
  file names (`profile_path`) and returns the fields attached to each log
  entry (`common_context`).
- `orchestrion.version` reports the release tag (`tag`, `tag_info`).

## Examples

Reading and updating an `importcfg` file:

```python
from orchestrion.importcfg import ImportConfig

cfg = ImportConfig.parse(
    "# import config\n"
    "packagefile fmt=/work/b002/fmt.a\n"
    "importmap old/path=new/path\n"
)
cfg.package_file["errors"] = "/work/b003/errors.a"
cfg.write_file("importcfg")
```

Collecting link-time dependencies:

```python
from orchestrion.linkdeps import LinkDeps

deps = LinkDeps(["example.com/b", "example.com/a"])
deps.add("example.com/c")
assert "example.com/a" in deps
deps.write_file("link.deps")
```

Inspecting a tool invocation:

```python
from orchestrion.proxy.command import CommandType
from orchestrion.proxy.parse import parse_command

cmd = parse_command(
    "example.com/app",
    ["/usr/lib/go/pkg/tool/link", "-o", "/work/b001/exe/a.out",
     "-importcfg", "/work/b001/importcfg.link", "/work/b001/_pkg_.a"],
)
assert cmd.type() is CommandType.LINK
print(cmd.stage())  # b001
```

Rewriting a parameter and the language level of a compile command:

```python
from orchestrion.proxy.parse import parse_command

cmd = parse_command(
    "example.com/app",
    ["compile", "-o", "a.out", "-lang=go1.13", "main.go"],
)
cmd.replace_param("a.out", "b.out")
cmd.set_lang("go1.18")
print(cmd.args)  # ['compile', '-o', 'b.out', '-lang=go1.18', 'main.go']
```

Checking how a package is treated:

```python
from orchestrion.weaver import Weaver

print(Weaver("github.com/DataDog/orchestrion/internal/pin").behavior())
```

## What it does not do

There is no command-line program here: nothing installs a `-toolexec`
executable or wraps `go build`. The package does not rewrite Go source code
itself, does not load injection configuration, does not pin itself into a
`go.mod` file, and has no job server or build-artifact cache; it provides the
pieces for reading, editing and running tool invocations and their files.

## Running the tests

Install the `test` extra and run `pytest` from the project root.