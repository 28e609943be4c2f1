"""The ``terraform destroy`` subcommand."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .apply import _reattach_env, _require, _state_args, _target_args
from .runner import TF0_15_3, Command, Terraform, Writer


@dataclass
class DestroyOptions:
    """Options for ``terraform destroy``."""

    backup: str = ""
    dir: str = ""
    lock: bool = True
    # must carry a time unit, e.g. "10s"
    lock_timeout: str = "0s"
    parallelism: int = 10
    reattach_info: Mapping[str, Any] | None = None
    refresh: bool = True
    state: str = ""
    state_out: str = ""
    targets: list[str] = field(default_factory=list)
    # each assignment is a single string, e.g. "foo=bar"
    variables: list[str] = field(default_factory=list)
    var_files: list[str] = field(default_factory=list)


def _command(tf: Terraform, opts: DestroyOptions, json_output: bool) -> Command:
    args = ["destroy", "-no-color", "-auto-approve", "-input=false"]
    args += _state_args(opts) + _target_args(opts)
    if json_output:
        args.append("-json")
    if opts.dir:
        args.append(opts.dir)
    return tf.build_command(args, _reattach_env(opts.reattach_info))


def destroy_command(tf: Terraform, options: DestroyOptions | None = None) -> Command:
    """Prepare a ``terraform destroy`` command."""
    return _command(tf, options or DestroyOptions(), json_output=False)


def destroy_json_command(tf: Terraform, options: DestroyOptions | None = None) -> Command:
    """Prepare a ``terraform destroy -json`` command."""
    return _command(tf, options or DestroyOptions(), json_output=True)


def destroy(
    tf: Terraform, options: DestroyOptions | None = None, timeout: float | None = None
) -> None:
    """Run ``terraform destroy``."""
    tf.run(destroy_command(tf, options), timeout)


def destroy_json(
    tf: Terraform,
    out: Writer,
    options: DestroyOptions | None = None,
    timeout: float | None = None,
) -> None:
    """Run ``terraform destroy -json``, writing machine-readable output to ``out``."""
    _require(tf, TF0_15_3, None, "terraform destroy -json was added in 0.15.3")
    tf.stdout = out
    tf.run(destroy_json_command(tf, options), timeout)