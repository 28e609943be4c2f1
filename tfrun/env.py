"""Environment handling for Terraform child processes."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping

CHECKPOINT_DISABLE_ENV_VAR = "CHECKPOINT_DISABLE"
CLI_ARGS_ENV_VAR = "TF_CLI_ARGS"
INPUT_ENV_VAR = "TF_INPUT"
AUTOMATION_ENV_VAR = "TF_IN_AUTOMATION"
LOG_ENV_VAR = "TF_LOG"
LOG_CORE_ENV_VAR = "TF_LOG_CORE"
LOG_PATH_ENV_VAR = "TF_LOG_PATH"
LOG_PROVIDER_ENV_VAR = "TF_LOG_PROVIDER"
REATTACH_ENV_VAR = "TF_REATTACH_PROVIDERS"
APPEND_USER_AGENT_ENV_VAR = "TF_APPEND_USER_AGENT"
WORKSPACE_ENV_VAR = "TF_WORKSPACE"
DISABLE_PLUGIN_TLS_ENV_VAR = "TF_DISABLE_PLUGIN_TLS"
SKIP_PROVIDER_VERIFY_ENV_VAR = "TF_SKIP_PROVIDER_VERIFY"

VAR_ENV_VAR_PREFIX = "TF_VAR_"
CLI_ARG_ENV_VAR_PREFIX = "TF_CLI_ARGS_"

PROHIBITED_ENV_VARS = frozenset(
    {
        CLI_ARGS_ENV_VAR,
        INPUT_ENV_VAR,
        AUTOMATION_ENV_VAR,
        LOG_ENV_VAR,
        LOG_CORE_ENV_VAR,
        LOG_PATH_ENV_VAR,
        LOG_PROVIDER_ENV_VAR,
        REATTACH_ENV_VAR,
        APPEND_USER_AGENT_ENV_VAR,
        WORKSPACE_ENV_VAR,
        DISABLE_PLUGIN_TLS_ENV_VAR,
        SKIP_PROVIDER_VERIFY_ENV_VAR,
    }
)

PROHIBITED_ENV_VAR_PREFIXES = (VAR_ENV_VAR_PREFIX, CLI_ARG_ENV_VAR_PREFIX)


def _manual_env_vars(env: Iterable[str]) -> Iterator[str]:
    for key in env:
        if key in PROHIBITED_ENV_VARS or key.startswith(PROHIBITED_ENV_VAR_PREFIXES):
            yield key


def prohibited_env(env: Mapping[str, str]) -> list[str]:
    """Return the keys of ``env`` that may not be set by hand."""
    return list(_manual_env_vars(env))


def clean_env(env: MutableMapping[str, str]) -> MutableMapping[str, str]:
    """Remove prohibited variables from ``env`` in place and return it."""
    for key in list(_manual_env_vars(env)):
        del env[key]
    return env


def merge_user_agent(*args: str) -> str:
    """Join user-agent fragments, dropping blanks and exact duplicates."""
    merged: dict[str, None] = {}
    for ua in args:
        ua = ua.strip()
        if ua:
            merged.setdefault(ua, None)
    return " ".join(merged)


def env_map(environ: Iterable[str]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` strings into a dictionary."""
    env: dict[str, str] = {}
    for entry in environ:
        key, _, value = entry.partition("=")
        env[key] = value
    return env


def env_slice(environ: Mapping[str, str]) -> list[str]:
    """Turn a dictionary into ``KEY=VALUE`` strings."""
    return [f"{key}={value}" for key, value in environ.items()]