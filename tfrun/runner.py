"""Building and running Terraform CLI commands."""

from __future__ import annotations

import io
import json
import logging
import os
import re
import shlex
import signal
import subprocess
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import IO, Any, Protocol

from packaging.version import Version

from .env import (
    APPEND_USER_AGENT_ENV_VAR,
    AUTOMATION_ENV_VAR,
    CHECKPOINT_DISABLE_ENV_VAR,
    DISABLE_PLUGIN_TLS_ENV_VAR,
    LOG_CORE_ENV_VAR,
    LOG_ENV_VAR,
    LOG_PATH_ENV_VAR,
    LOG_PROVIDER_ENV_VAR,
    SKIP_PROVIDER_VERIFY_ENV_VAR,
    WORKSPACE_ENV_VAR,
    env_map,
    merge_user_agent,
    prohibited_env,
)
from .errors import CommandCancelledError, ManualEnvVarError, VersionMismatchError
from .version import module_version

TF0_5_0 = Version("0.5.0")
TF0_7_7 = Version("0.7.7")
TF0_8_0 = Version("0.8.0")
TF0_12_0 = Version("0.12.0")
TF0_15_0 = Version("0.15.0")
TF0_15_2 = Version("0.15.2")
TF0_15_3 = Version("0.15.3")
TF1_4_0 = Version("1.4.0")

_IS_LINUX = sys.platform.startswith("linux")
_VERSION_PATTERN = re.compile(r"Terraform v?(\d+\.\d+\.\d+\S*)")


class Writer(Protocol):
    def write(self, text: str, /) -> Any: ...


class _MultiWriter:
    """Writes every chunk to each of several writers."""

    def __init__(self, *writers: Writer | None) -> None:
        self.writers = [w for w in writers if w is not None]

    def write(self, text: str) -> int:
        for writer in self.writers:
            writer.write(text)
        return len(text)


@dataclass
class Command:
    """A prepared Terraform invocation."""

    exec_path: str
    args: list[str]
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None
    stdin: str | IO[str] | None = None
    stdout: Writer | None = None
    returncode: int | None = None

    @property
    def argv(self) -> list[str]:
        return [self.exec_path, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


def _as_version(value: str | Version | None) -> Version | None:
    if value is None or isinstance(value, Version):
        return value
    return Version(value)


def _pump(stream: IO[str], writer: Writer) -> None:
    failed = False
    with stream:
        for line in iter(stream.readline, ""):
            if failed:
                continue
            try:
                writer.write(line)
            except Exception:
                failed = True


def _feed(pipe: IO[bytes], source: str | IO[str]) -> None:
    try:
        text = source if isinstance(source, str) else source.read()
        if isinstance(text, str):
            text = text.encode("utf-8")
        pipe.write(text)
    except (BrokenPipeError, OSError):
        pass
    finally:
        try:
            pipe.close()
        except OSError:
            pass


class Terraform:
    """A Terraform executable bound to a working directory."""

    def __init__(
        self,
        working_dir: str | os.PathLike[str],
        exec_path: str,
        *,
        version: str | Version | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.working_dir = os.fspath(working_dir)
        self.exec_path = exec_path
        self.version = version
        self.logger = logger or logging.getLogger(__name__)
        self.stdout: Writer | None = None
        self.stderr: Writer | None = None
        self.append_user_agent = ""
        self.log = ""
        self.log_core = ""
        self.log_path = ""
        self.log_provider = ""
        self.disable_plugin_tls = False
        self.skip_provider_verify = False
        self._env: dict[str, str] | None = None

    @property
    def version(self) -> Version | None:
        return self._version

    @version.setter
    def version(self, value: str | Version | None) -> None:
        self._version = _as_version(value)

    @property
    def env(self) -> dict[str, str] | None:
        """Base environment; ``None`` means the current process environment."""
        return self._env

    @env.setter
    def env(self, value: Mapping[str, str] | None) -> None:
        if value is not None:
            prohibited = prohibited_env(value)
            if prohibited:
                raise ManualEnvVarError(prohibited[0])
            value = dict(value)
        self._env = value

    def _detect_version(self) -> Version:
        out = io.StringIO()
        command = self.build_command(["version"])
        command.stdout = out
        self.run(command)
        match = _VERSION_PATTERN.search(out.getvalue())
        if match is None:
            raise ValueError(f"unable to parse Terraform version from {out.getvalue()!r}")
        return Version(match.group(1))

    def _core_version(self) -> Version:
        if self._version is None:
            self._version = self._detect_version()
        return Version(self._version.base_version)

    def compatible(
        self,
        min_inclusive: str | Version | None = None,
        max_exclusive: str | Version | None = None,
    ) -> None:
        """Raise VersionMismatchError unless the version lies in the given range."""
        low = _as_version(min_inclusive)
        high = _as_version(max_exclusive)
        actual = self._core_version()
        if (low is None or actual >= low) and (high is None or actual < high):
            return
        raise VersionMismatchError(
            min_inclusive=str(low) if low is not None else "-",
            max_exclusive=str(high) if high is not None else "-",
            actual=str(self._version),
        )

    def _is_compatible(
        self,
        min_inclusive: str | Version | None = None,
        max_exclusive: str | Version | None = None,
    ) -> bool:
        try:
            self.compatible(min_inclusive, max_exclusive)
        except VersionMismatchError:
            return False
        return True

    def build_env(self, merge_env: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return the environment a Terraform child process runs with."""
        env = dict(os.environ) if self._env is None else dict(self._env)
        env.update(merge_env or {})

        if CHECKPOINT_DISABLE_ENV_VAR not in env:
            env[CHECKPOINT_DISABLE_ENV_VAR] = os.environ.get(CHECKPOINT_DISABLE_ENV_VAR, "")

        env[APPEND_USER_AGENT_ENV_VAR] = merge_user_agent(
            os.environ.get(APPEND_USER_AGENT_ENV_VAR, ""),
            self.append_user_agent,
            f"tfrun/{module_version()}",
        )

        if self.log_path:
            env[LOG_ENV_VAR] = self.log
            env[LOG_CORE_ENV_VAR] = self.log_core
            env[LOG_PATH_ENV_VAR] = self.log_path
            env[LOG_PROVIDER_ENV_VAR] = self.log_provider
        else:
            # keep logging out of the captured stderr
            for key in (LOG_ENV_VAR, LOG_CORE_ENV_VAR, LOG_PATH_ENV_VAR, LOG_PROVIDER_ENV_VAR):
                env[key] = ""

        env[AUTOMATION_ENV_VAR] = "1"
        env.pop(WORKSPACE_ENV_VAR, None)

        if self.disable_plugin_tls:
            env[DISABLE_PLUGIN_TLS_ENV_VAR] = "1"
        if self.skip_provider_verify:
            env[SKIP_PROVIDER_VERIFY_ENV_VAR] = "1"
        return env

    def build_command(
        self, args: list[str], merge_env: Mapping[str, str] | None = None
    ) -> Command:
        """Prepare a command running the executable with ``args``."""
        command = Command(
            exec_path=self.exec_path,
            args=list(args),
            env=self.build_env(merge_env),
            cwd=self.working_dir or None,
        )
        self.logger.info("running Terraform command: %s", command)
        return command

    def _kill(self, proc: subprocess.Popen) -> None:
        try:
            if _IS_LINUX:
                os.killpg(proc.pid, signal.SIGKILL)
            else:
                proc.kill()
        except (ProcessLookupError, PermissionError):
            pass

    def run(self, command: Command, timeout: float | None = None) -> None:
        """Run ``command``, streaming its output; raise on failure or timeout."""
        if timeout is not None and timeout <= 0:
            raise CommandCancelledError("context deadline exceeded")

        stderr_buffer = io.StringIO()
        stdout_writer = _MultiWriter(command.stdout, self.stdout)
        stderr_writer = _MultiWriter(self.stderr, stderr_buffer)

        proc = subprocess.Popen(
            command.argv,
            cwd=command.cwd,
            env=command.env,
            stdin=subprocess.PIPE if command.stdin is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=_IS_LINUX,
        )

        threads = [
            threading.Thread(
                target=_pump,
                args=(io.TextIOWrapper(proc.stdout, "utf-8", "replace", newline=""), stdout_writer),
                daemon=True,
            ),
            threading.Thread(
                target=_pump,
                args=(io.TextIOWrapper(proc.stderr, "utf-8", "replace", newline=""), stderr_writer),
                daemon=True,
            ),
        ]
        if command.stdin is not None:
            threads.append(
                threading.Thread(target=_feed, args=(proc.stdin, command.stdin), daemon=True)
            )
        for thread in threads:
            thread.start()

        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            self._kill(proc)
            proc.wait()
            for thread in threads:
                thread.join()
            command.returncode = proc.returncode
            raise CommandCancelledError(
                f"command timed out after {timeout} seconds", cause=exc
            ) from exc

        for thread in threads:
            thread.join()
        command.returncode = proc.returncode

        if proc.returncode != 0:
            raise subprocess.CalledProcessError(
                proc.returncode, command.argv, stderr=stderr_buffer.getvalue()
            )

    def run_json(self, command: Command, timeout: float | None = None) -> Any:
        """Run ``command`` and decode the first JSON value it writes to stdout."""
        buffer = io.StringIO()
        command.stdout = _MultiWriter(command.stdout, buffer)
        self.run(command, timeout)
        text = buffer.getvalue().lstrip()
        value, _ = json.JSONDecoder().raw_decode(text)
        return value