# tfrun

`tfrun` builds and runs Terraform CLI commands from Python. It assembles the
flags each subcommand expects, checks that the Terraform version in use
supports the options you ask for, and runs the binary with a controlled
environment: Terraform logging is switched off unless a log path is set,
`TF_IN_AUTOMATION=1` is always set, `TF_WORKSPACE` is removed, and a base
environment holding variables that must be set through options is rejected.

## Installation

```
pip install tfrun
```

Terraform itself must already be installed; `tfrun` only runs it.

## Usage

Create a `Terraform` for a working directory and the path of a Terraform
binary, then call the function for the subcommand you need:

```python
from tfrun.runner import Terraform
from tfrun.initialize import init
from tfrun.apply import ApplyOptions, apply
from tfrun.destroy import destroy

tf = Terraform("/path/to/config", "/usr/local/bin/terraform")

init(tf)
apply(tf, ApplyOptions(parallelism=5, targets=["null_resource.foo"], variables=["region=eu"]))
destroy(tf)
```

Every run function takes an optional `timeout` in seconds.

### The `Terraform` object

- `version`: the Terraform version. Pass it as `Terraform(..., version="1.5.0")`
  or leave it unset; the first version check then runs `terraform version` and
  reads the result.
- `compatible(min_inclusive, max_exclusive)` raises `VersionMismatchError`
  unless the version lies in the range (either bound may be `None`).
- `env`: base environment for the child process; `None` (the default) means
  the current process environment. Setting a mapping that holds a prohibited
  variable raises `ManualEnvVarError`.
- `stdout` and `stderr`: optional text streams that also receive the
  command's output.
- `append_user_agent`, `log`, `log_core`, `log_path`, `log_provider`,
  `disable_plugin_tls`, `skip_provider_verify`: settings carried into the
  child's environment.
- `build_env(merge_env)`, `build_command(args, merge_env)`, `run(command, timeout)`
  and `run_json(command, timeout)` are the lower-level building blocks. Each
  built command is logged at INFO level through the `logger` given to the
  constructor (by default the `tfrun.runner` logger).

### Options and commands

Each subcommand has an options dataclass with the CLI's defaults:
`ApplyOptions`, `DestroyOptions`, `ImportOptions`, `InitOptions`,
`FormatOptions`, `ForceUnlockOptions`, `GetOptions` and `GraphOptions`.
`reattach_info`, where present, is a mapping sent JSON-encoded in
`TF_REATTACH_PROVIDERS`.

To inspect a command without running it, use the matching `*_command`
function; it returns a `Command` holding the arguments, environment and
working directory that would be used:

```python
from tfrun.apply import apply_command

cmd = apply_command(tf, ApplyOptions(lock=False))
print(cmd.args)
print(cmd)  # the full, shell-quoted command line
```

Some options depend on the Terraform version:

- `ApplyOptions.replace_addrs` needs 0.15.2 or later.
- `apply_json` and `destroy_json` need 0.15.3 or later; they write the
  machine-readable output to the text stream you pass.
- `InitOptions.lock`, `lock_timeout`, `get_plugins` and `verify_plugins` may
  only be set for versions before 0.15.
- `ForceUnlockOptions.dir` is only accepted before 0.15.
- `GraphOptions.plan` is passed as `-plan=` from 0.15 on and positionally
  before; `draw_cycles` needs 0.5.0 and `graph_type` 0.8.0.
- `fmt` needs 0.7.7, and `FormatOptions.recursive` needs 0.12.
- `metadata_functions` needs 1.4.0.

### Formatting

```python
from tfrun.formatting import format_string, format_check, format_write

print(format_string(tf, 'resource "foo" "bar" {\nbaz=1\n}'))
formatted, files = format_check(tf)   # (True, []) or (False, [unformatted files])
format_write(tf)
```

`format_stream(tf, unformatted, formatted)` reads from a string or text
stream and writes to a text stream. `format_check` and `format_write` raise
`ValueError` for a directory of `"-"`.

### Other commands

- `tfrun.importing.import_resource(tf, address, resource_id)`
- `tfrun.force_unlock.force_unlock(tf, lock_id)`
- `tfrun.get.get(tf)`
- `tfrun.graph.graph(tf)` returns the DOT graph as a string
- `tfrun.metadata.metadata_functions(tf)` returns the decoded JSON document

### Environment helpers

`tfrun.env.prohibited_env` lists the keys of an environment mapping that may
not be set by hand, `tfrun.env.clean_env` removes them in place, and
`tfrun.env.merge_user_agent` joins user-agent fragments without blanks or
repeats.

### Errors

- A command that exits non-zero raises `subprocess.CalledProcessError`, with
  the captured stderr in its `stderr` attribute.
- `tfrun.errors.VersionMismatchError` when the Terraform version does not
  support a command or option; it carries `min_inclusive`, `max_exclusive`
  and `actual` (`"-"` for an open bound).
- `tfrun.errors.ManualEnvVarError` for a prohibited environment variable.
- `tfrun.errors.CommandCancelledError` when a command's timeout passes (or a
  timeout of zero or less is given); on Linux the whole process group is
  killed.
- `tfrun.errors.NoSuitableBinaryError` is available to wrap a failure to find
  a binary; nothing in the package raises it itself.

## What it does not do

`tfrun` does not download or install Terraform. It covers `apply`, `destroy`,
`import`, `init`, `fmt`, `force-unlock`, `get`, `graph` and
`metadata functions`; other subcommands such as `plan`, `show`, `output`,
`validate`, `state` or `workspace` have no functions here, though
`Terraform.build_command` and `Terraform.run` can run any arguments you give
them. JSON output is returned as plain decoded Python values, not typed
objects. There is no command-line tool.

## Development

```
pip install -e ".[test]"
pytest
```