"""The ``terraform fmt`` subcommand."""

from __future__ import annotations

import io
import subprocess
from dataclasses import dataclass
from typing import IO

from .apply import _require
from .runner import TF0_7_7, TF0_12_0, Command, Terraform, Writer

_STDIN_DIR_MESSAGE = (
    'a path of "-" is not supported for this method, please use format_string'
)


@dataclass
class FormatOptions:
    """Options for ``terraform fmt``."""

    recursive: bool = False
    dir: str = ""


def format_command(
    tf: Terraform, args: list[str] | None = None, options: FormatOptions | None = None
) -> Command:
    """Prepare a ``terraform fmt`` command with extra ``args`` before the options."""
    _require(tf, TF0_7_7, None, "fmt was first introduced in Terraform 0.7.7")
    opts = options or FormatOptions()
    full = ["fmt", "-no-color", *(args or [])]
    if opts.recursive:
        _require(tf, TF0_12_0, None, "-recursive was added to fmt in Terraform 0.12")
        full.append("-recursive")
    if opts.dir:
        full.append(opts.dir)
    return tf.build_command(full)


def format_stream(
    tf: Terraform,
    unformatted: str | IO[str],
    formatted: Writer,
    timeout: float | None = None,
) -> None:
    """Format ``unformatted`` through the CLI's stdin, writing the result to ``formatted``."""
    command = format_command(tf, None, FormatOptions(dir="-"))
    command.stdin = unformatted
    command.stdout = formatted
    tf.run(command, timeout)


def format_string(tf: Terraform, content: str, timeout: float | None = None) -> str:
    """Return ``content`` formatted by Terraform."""
    out = io.StringIO()
    format_stream(tf, content, out, timeout)
    return out.getvalue()


def _file_command(
    tf: Terraform, options: FormatOptions | None, flags: list[str]
) -> Command:
    opts = options or FormatOptions()
    if opts.dir == "-":
        raise ValueError(_STDIN_DIR_MESSAGE)
    return format_command(tf, flags, opts)


def format_write(
    tf: Terraform, options: FormatOptions | None = None, timeout: float | None = None
) -> None:
    """Format and rewrite the configuration files in the working or chosen directory."""
    command = _file_command(tf, options, ["-write=true", "-list=false", "-diff=false"])
    tf.run(command, timeout)


def format_check(
    tf: Terraform, options: FormatOptions | None = None, timeout: float | None = None
) -> tuple[bool, list[str]]:
    """Return whether the files are formatted, and the unformatted files if not."""
    command = _file_command(
        tf, options, ["-write=false", "-list=true", "-diff=false", "-check=true"]
    )
    out = io.StringIO()
    command.stdout = out
    try:
        tf.run(command, timeout)
    except subprocess.CalledProcessError:
        if command.returncode != 3:
            raise
        text = out.getvalue().replace("\r\n", "\n")
        return False, [line.strip() for line in text.split("\n") if line.strip()]
    return True, []