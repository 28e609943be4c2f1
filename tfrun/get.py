"""The ``terraform get`` subcommand."""

from __future__ import annotations

from dataclasses import dataclass

from .runner import Command, Terraform


@dataclass
class GetOptions:
    """Options for ``terraform get``."""

    dir: str = ""
    update: bool = False


def get_command(tf: Terraform, options: GetOptions | None = None) -> Command:
    """Prepare a ``terraform get`` command."""
    opts = options or GetOptions()
    positional = [opts.dir] if opts.dir else []
    return tf.build_command(
        ["get", "-no-color", f"-update={str(opts.update).lower()}", *positional]
    )


def get(
    tf: Terraform, options: GetOptions | None = None, timeout: float | None = None
) -> None:
    """Run ``terraform get``."""
    tf.run(get_command(tf, options), timeout)