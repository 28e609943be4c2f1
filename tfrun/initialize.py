"""The ``terraform init`` subcommand."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .apply import _reattach_env, _require
from .errors import VersionMismatchError
from .runner import TF0_15_0, Command, Terraform


@dataclass
class InitOptions:
    """Options for ``terraform init``.

    ``lock``, ``lock_timeout``, ``get_plugins`` and ``verify_plugins`` are
    ``None`` unless set; setting any of them needs a Terraform older than 0.15.
    """

    backend: bool = True
    backend_config: list[str] = field(default_factory=list)
    dir: str = ""
    force_copy: bool = False
    from_module: str = ""
    get: bool = True
    get_plugins: bool | None = None
    lock: bool | None = None
    lock_timeout: str | None = None
    plugin_dir: list[str] = field(default_factory=list)
    reattach_info: Mapping[str, Any] | None = None
    reconfigure: bool = False
    upgrade: bool = False
    verify_plugins: bool | None = None


def _before_0_15(tf: Terraform) -> bool:
    try:
        tf.compatible(None, TF0_15_0)
    except VersionMismatchError:
        return False
    return True


def _or_default(value, default):
    return default if value is None else value


def init_command(tf: Terraform, options: InitOptions | None = None) -> Command:
    """Prepare a ``terraform init`` command."""
    opts = options or InitOptions()

    legacy = (opts.lock, opts.lock_timeout, opts.verify_plugins, opts.get_plugins)
    if any(value is not None for value in legacy):
        _require(
            tf,
            None,
            TF0_15_0,
            "-lock, -lock-timeout, -verify-plugins, and -get-plugins options "
            "are no longer available as of Terraform 0.15",
        )

    lock_timeout = _or_default(opts.lock_timeout, "0s")
    legacy_flags = {
        "lock": _or_default(opts.lock, True),
        "get-plugins": _or_default(opts.get_plugins, True),
        "verify-plugins": _or_default(opts.verify_plugins, True),
    }

    args = ["init", "-no-color", "-input=false"]
    if opts.from_module:
        args.append(f"-from-module={opts.from_module}")

    pre_0_15 = _before_0_15(tf)
    if pre_0_15 and lock_timeout:
        args.append(f"-lock-timeout={lock_timeout}")

    flags = {"backend": opts.backend, "get": opts.get, "upgrade": opts.upgrade}
    if pre_0_15:
        flags.update(legacy_flags)
    args.extend(f"-{name}={str(value).lower()}" for name, value in flags.items())

    if opts.force_copy:
        args.append("-force-copy")
    if opts.reconfigure:
        args.append("-reconfigure")

    args.extend(f"-backend-config={path}" for path in opts.backend_config)
    args.extend(f"-plugin-dir={path}" for path in opts.plugin_dir)

    if opts.dir:
        args.append(opts.dir)

    return tf.build_command(args, _reattach_env(opts.reattach_info))


def init(
    tf: Terraform, options: InitOptions | None = None, timeout: float | None = None
) -> None:
    """Run ``terraform init``."""
    tf.run(init_command(tf, options), timeout)