"""The ``terraform graph`` subcommand."""

from __future__ import annotations

import io
from dataclasses import dataclass

from .errors import VersionMismatchError
from .runner import TF0_5_0, TF0_8_0, TF0_15_0, Command, Terraform


@dataclass
class GraphOptions:
    """Options for ``terraform graph``."""

    plan: str = ""
    draw_cycles: bool = False
    graph_type: str = ""


def _require(tf: Terraform, minimum, message: str) -> None:
    try:
        tf.compatible(minimum, None)
    except VersionMismatchError as exc:
        exc.args = (f"{message}: {exc}",)
        raise


def graph_command(tf: Terraform, options: GraphOptions | None = None) -> Command:
    """Prepare a ``terraform graph`` command."""
    opts = options or GraphOptions()
    args = ["graph"]

    if opts.plan:
        # the plan was positional before 0.15.0
        try:
            tf.compatible(TF0_15_0, None)
        except VersionMismatchError:
            args.append(opts.plan)
        else:
            args.append(f"-plan={opts.plan}")

    if opts.draw_cycles:
        _require(tf, TF0_5_0, "-draw-cycles was first introduced in Terraform 0.5.0")
        args.append("-draw-cycles")

    if opts.graph_type:
        _require(tf, TF0_8_0, "-graph-type was first introduced in Terraform 0.8.0")
        args.append(f"-type={opts.graph_type}")

    return tf.build_command(args)


def graph(
    tf: Terraform, options: GraphOptions | None = None, timeout: float | None = None
) -> str:
    """Run ``terraform graph`` and return its DOT output."""
    command = graph_command(tf, options)
    out = io.StringIO()
    command.stdout = out
    tf.run(command, timeout)
    return out.getvalue()