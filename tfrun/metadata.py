"""The ``terraform metadata functions`` subcommand."""

from __future__ import annotations

from typing import Any

from .errors import VersionMismatchError
from .runner import TF1_4_0, Command, Terraform


def metadata_functions_command(tf: Terraform, *args: str) -> Command:
    """Prepare a ``terraform metadata functions -json`` command."""
    return tf.build_command(["metadata", "functions", "-json", *args])


def metadata_functions(tf: Terraform, timeout: float | None = None) -> Any:
    """Run ``terraform metadata functions -json`` and return the decoded document."""
    try:
        tf.compatible(TF1_4_0, None)
    except VersionMismatchError as exc:
        exc.args = (f"terraform metadata functions was added in 1.4.0: {exc}",)
        raise
    return tf.run_json(metadata_functions_command(tf), timeout)