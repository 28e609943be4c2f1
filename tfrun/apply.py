"""The ``terraform apply`` subcommand."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .env import REATTACH_ENV_VAR
from .errors import VersionMismatchError
from .runner import TF0_15_2, TF0_15_3, Command, Terraform, Writer


@dataclass
class ApplyOptions:
    """Options for ``terraform apply``."""

    backup: str = ""
    dir_or_plan: str = ""
    lock: bool = True
    # must carry a time unit, e.g. "10s"
    lock_timeout: str = ""
    parallelism: int = 10
    reattach_info: Mapping[str, Any] | None = None
    refresh: bool = True
    replace_addrs: list[str] = field(default_factory=list)
    state: str = ""
    state_out: str = ""
    targets: list[str] = field(default_factory=list)
    # each assignment is a single string, e.g. "foo=bar"
    variables: list[str] = field(default_factory=list)
    var_files: list[str] = field(default_factory=list)


def _require(tf: Terraform, minimum, maximum, message: str) -> None:
    """Check the version range, prefixing any mismatch with ``message``."""
    try:
        tf.compatible(minimum, maximum)
    except VersionMismatchError as exc:
        exc.args = (f"{message}: {exc}",)
        raise


def _reattach_env(info: Mapping[str, Any] | None) -> dict[str, str]:
    """Environment carrying the provider reattach information, if any."""
    if info is None:
        return {}
    return {REATTACH_ENV_VAR: json.dumps(dict(info), separators=(",", ":"))}


def _valued(*pairs: tuple[str, str]) -> list[str]:
    """``-name=value`` for every pair whose value is set."""
    return [f"-{name}={value}" for name, value in pairs if value]


def _var_args(assignments: Iterable[str]) -> list[str]:
    return [part for assignment in assignments for part in ("-var", assignment)]


def _state_args(opts) -> list[str]:
    """Flags shared by apply and destroy up to and including ``-refresh``."""
    args = _valued(
        ("backup", opts.backup),
        ("lock-timeout", opts.lock_timeout),
        ("state", opts.state),
        ("state-out", opts.state_out),
    )
    args.extend(f"-var-file={path}" for path in opts.var_files)
    args.append(f"-lock={str(opts.lock).lower()}")
    args.append(f"-parallelism={opts.parallelism}")
    args.append(f"-refresh={str(opts.refresh).lower()}")
    return args


def _target_args(opts) -> list[str]:
    return [f"-target={target}" for target in opts.targets] + _var_args(opts.variables)


def _build_args(tf: Terraform, opts: ApplyOptions) -> list[str]:
    args = ["apply", "-no-color", "-auto-approve", "-input=false", *_state_args(opts)]
    if opts.replace_addrs:
        _require(tf, TF0_15_2, None, "replace option was introduced in Terraform 0.15.2")
        args.extend(f"-replace={addr}" for addr in opts.replace_addrs)
    return args + _target_args(opts)


def _build_command(tf: Terraform, opts: ApplyOptions, args: list[str]) -> Command:
    if opts.dir_or_plan:
        args.append(opts.dir_or_plan)
    return tf.build_command(args, _reattach_env(opts.reattach_info))


def apply_command(tf: Terraform, options: ApplyOptions | None = None) -> Command:
    """Prepare a ``terraform apply`` command."""
    opts = options or ApplyOptions()
    return _build_command(tf, opts, _build_args(tf, opts))


def apply_json_command(tf: Terraform, options: ApplyOptions | None = None) -> Command:
    """Prepare a ``terraform apply -json`` command."""
    opts = options or ApplyOptions()
    return _build_command(tf, opts, [*_build_args(tf, opts), "-json"])


def apply(
    tf: Terraform, options: ApplyOptions | None = None, timeout: float | None = None
) -> None:
    """Run ``terraform apply``."""
    tf.run(apply_command(tf, options), timeout)


def apply_json(
    tf: Terraform,
    out: Writer,
    options: ApplyOptions | None = None,
    timeout: float | None = None,
) -> None:
    """Run ``terraform apply -json``, writing machine-readable output to ``out``."""
    _require(tf, TF0_15_3, None, "terraform apply -json was added in 0.15.3")
    tf.stdout = out
    tf.run(apply_json_command(tf, options), timeout)