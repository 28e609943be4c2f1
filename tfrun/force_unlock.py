"""The ``terraform force-unlock`` subcommand."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import VersionMismatchError
from .runner import TF0_15_0, Command, Terraform


@dataclass
class ForceUnlockOptions:
    """Options for ``terraform force-unlock``."""

    dir: str = ""


def force_unlock_command(
    tf: Terraform, lock_id: str, options: ForceUnlockOptions | None = None
) -> Command:
    """Prepare a ``terraform force-unlock`` command for ``lock_id``."""
    directory = (options or ForceUnlockOptions()).dir
    args = ["force-unlock", "-no-color", "-force", lock_id]
    if directory:
        try:
            tf.compatible(None, TF0_15_0)
        except VersionMismatchError as exc:
            exc.args = ("[DIR] option was removed in Terraform v0.15.0",)
            raise
        args.append(directory)
    return tf.build_command(args)


def force_unlock(
    tf: Terraform,
    lock_id: str,
    options: ForceUnlockOptions | None = None,
    timeout: float | None = None,
) -> None:
    """Run ``terraform force-unlock``."""
    tf.run(force_unlock_command(tf, lock_id, options), timeout)