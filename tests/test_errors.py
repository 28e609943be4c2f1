import pytest

from tfrun.errors import (
    CommandCancelledError,
    ManualEnvVarError,
    NoSuitableBinaryError,
    VersionMismatchError,
)


def test_no_suitable_binary_wraps_cause():
    cause = FileNotFoundError("missing")
    err = NoSuitableBinaryError(cause)
    assert str(err) == "no suitable terraform binary could be found: missing"
    assert err.err is cause
    assert err.__cause__ is cause


def test_version_mismatch_fields_and_message():
    err = VersionMismatchError(min_inclusive="0.12.0", max_exclusive="-", actual="0.11.15")
    assert err.min_inclusive == "0.12.0"
    assert err.max_exclusive == "-"
    assert err.actual == "0.11.15"
    assert str(err) == "unexpected version 0.11.15 (min: 0.12.0, max: -)"


def test_manual_env_var_message_quotes_name():
    err = ManualEnvVarError("TF_LOG")
    assert err.name == "TF_LOG"
    assert str(err) == 'manual setting of env var "TF_LOG" detected'


def test_command_cancelled_keeps_message_and_cause():
    cause = RuntimeError("killed")
    err = CommandCancelledError("signal: killed", cause=cause)
    assert str(err) == "signal: killed"
    assert err.cause is cause
    assert err.__cause__ is cause
    assert err.timed_out is True


def test_command_cancelled_without_timeout():
    err = CommandCancelledError("stopped", timed_out=False)
    assert err.timed_out is False
    assert err.cause is None
    assert str(err) == "stopped"
    with pytest.raises(CommandCancelledError, match="stopped"):
        raise err