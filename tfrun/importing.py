"""The ``terraform import`` subcommand."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .apply import _reattach_env, _valued, _var_args
from .runner import Command, Terraform


@dataclass
class ImportOptions:
    """Options for ``terraform import``."""

    backup: str = ""
    config: str = ""
    allow_missing_config: bool = False
    lock: bool = True
    lock_timeout: str = "0s"
    reattach_info: Mapping[str, Any] | None = None
    state: str = ""
    state_out: str = ""
    variables: list[str] = field(default_factory=list)
    var_files: list[str] = field(default_factory=list)


def import_command(
    tf: Terraform, address: str, resource_id: str, options: ImportOptions | None = None
) -> Command:
    """Prepare a ``terraform import`` command for ``address`` and ``resource_id``."""
    opts = options or ImportOptions()
    args = ["import", "-no-color", "-input=false"]
    args += _valued(
        ("backup", opts.backup),
        ("config", opts.config),
        ("lock-timeout", opts.lock_timeout),
        ("state", opts.state),
        ("state-out", opts.state_out),
    )
    args.extend(f"-var-file={path}" for path in opts.var_files)
    args.append(f"-lock={str(opts.lock).lower()}")
    if opts.allow_missing_config:
        args.append("-allow-missing-config")
    args += _var_args(opts.variables)
    args += [address, resource_id]
    return tf.build_command(args, _reattach_env(opts.reattach_info))


def import_resource(
    tf: Terraform,
    address: str,
    resource_id: str,
    options: ImportOptions | None = None,
    timeout: float | None = None,
) -> None:
    """Run ``terraform import``."""
    tf.run(import_command(tf, address, resource_id, options), timeout)