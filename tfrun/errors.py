"""Exceptions raised while building and running Terraform commands."""

from __future__ import annotations


class NoSuitableBinaryError(Exception):
    """No usable Terraform executable could be found."""

    def __init__(self, err: BaseException) -> None:
        super().__init__(f"no suitable terraform binary could be found: {err}")
        self.err = err
        self.__cause__ = err


class VersionMismatchError(Exception):
    """The Terraform version does not support the requested command or flag."""

    def __init__(self, min_inclusive: str, max_exclusive: str, actual: str) -> None:
        super().__init__(
            f"unexpected version {actual} (min: {min_inclusive}, max: {max_exclusive})"
        )
        self.min_inclusive = min_inclusive
        self.max_exclusive = max_exclusive
        self.actual = actual


class ManualEnvVarError(Exception):
    """An environment variable that must be set through an option was set by hand."""

    def __init__(self, name: str) -> None:
        super().__init__(f'manual setting of env var "{name}" detected')
        self.name = name


class CommandCancelledError(Exception):
    """A command was stopped because its deadline passed or it was cancelled."""

    def __init__(
        self,
        message: str,
        *,
        timed_out: bool = True,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.timed_out = timed_out
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause