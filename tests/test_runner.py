import io
import logging
import subprocess
import sys

import pytest
from packaging.version import Version

from tfrun.errors import CommandCancelledError, ManualEnvVarError, VersionMismatchError
from tfrun.runner import TF0_15_0, TF0_15_3, Command, Terraform
from tfrun.version import module_version


def default_env():
    return {
        "CHECKPOINT_DISABLE": "",
        "TF_APPEND_USER_AGENT": f"tfrun/{module_version()}",
        "TF_IN_AUTOMATION": "1",
        "TF_LOG": "",
        "TF_LOG_CORE": "",
        "TF_LOG_PATH": "",
        "TF_LOG_PROVIDER": "",
    }


@pytest.fixture
def clean_os_env(monkeypatch):
    monkeypatch.delenv("CHECKPOINT_DISABLE", raising=False)
    monkeypatch.delenv("TF_APPEND_USER_AGENT", raising=False)


@pytest.fixture
def tf(tmp_path, clean_os_env):
    terraform = Terraform(tmp_path, "terraform", version="1.0.11")
    terraform.env = {}
    return terraform


@pytest.fixture
def py_tf(tmp_path):
    return Terraform(tmp_path, sys.executable, version="1.0.11")


def test_build_command_default_env(tf, tmp_path):
    command = tf.build_command(["metadata", "functions", "-json"])
    assert command.args == ["metadata", "functions", "-json"]
    assert command.argv[0] == "terraform"
    assert command.cwd == str(tmp_path)
    assert command.env == default_env()


def test_build_command_merge_env(tf):
    command = tf.build_command(["apply"], {"TF_REATTACH_PROVIDERS": "{}"})
    assert command.env == {**default_env(), "TF_REATTACH_PROVIDERS": "{}"}


def test_build_command_logs(tf, caplog):
    with caplog.at_level(logging.INFO, logger="tfrun.runner"):
        command = tf.build_command(["graph"])
    assert str(command) in caplog.text
    assert "error from kill" not in caplog.text


def test_build_env_logging_and_flags(tf):
    tf.log_path = "/tmp/tf.log"
    tf.log = "TRACE"
    tf.log_core = "DEBUG"
    tf.log_provider = "INFO"
    tf.disable_plugin_tls = True
    tf.skip_provider_verify = True
    env = tf.build_env()
    assert env["TF_LOG"] == "TRACE"
    assert env["TF_LOG_CORE"] == "DEBUG"
    assert env["TF_LOG_PATH"] == "/tmp/tf.log"
    assert env["TF_LOG_PROVIDER"] == "INFO"
    assert env["TF_DISABLE_PLUGIN_TLS"] == "1"
    assert env["TF_SKIP_PROVIDER_VERIFY"] == "1"


def test_build_env_user_agent_and_checkpoint(tmp_path, monkeypatch):
    monkeypatch.setenv("TF_APPEND_USER_AGENT", "outer/1")
    monkeypatch.setenv("CHECKPOINT_DISABLE", "1")
    terraform = Terraform(tmp_path, "terraform")
    terraform.env = {}
    terraform.append_user_agent = "outer/1"
    env = terraform.build_env()
    assert env["TF_APPEND_USER_AGENT"] == f"outer/1 tfrun/{module_version()}"
    assert env["CHECKPOINT_DISABLE"] == "1"


def test_build_env_checkpoint_override_kept(tf):
    env = tf.build_env({"CHECKPOINT_DISABLE": "yes"})
    assert env["CHECKPOINT_DISABLE"] == "yes"


def test_build_env_drops_workspace_from_os(tmp_path, monkeypatch):
    monkeypatch.setenv("TF_WORKSPACE", "dev")
    monkeypatch.setenv("SOME_VAR", "value")
    env = Terraform(tmp_path, "terraform").build_env()
    assert "TF_WORKSPACE" not in env
    assert env["SOME_VAR"] == "value"


def test_env_setter_rejects_prohibited(tmp_path):
    terraform = Terraform(tmp_path, "terraform")
    with pytest.raises(ManualEnvVarError) as info:
        terraform.env = {"TF_LOG": "trace"}
    assert info.value.name == "TF_LOG"
    assert terraform.env is None


def test_compatible_in_range(tf):
    tf.compatible(TF0_15_3, None)
    tf.compatible(None, "2.0.0")
    assert tf.version == Version("1.0.11")


def test_compatible_out_of_range(tf):
    with pytest.raises(VersionMismatchError) as info:
        tf.compatible(None, TF0_15_0)
    assert info.value.min_inclusive == "-"
    assert info.value.max_exclusive == "0.15.0"
    assert info.value.actual == "1.0.11"


def test_compatible_below_minimum(tmp_path):
    terraform = Terraform(tmp_path, "terraform", version="0.11.15")
    with pytest.raises(VersionMismatchError) as info:
        terraform.compatible("0.12.0", None)
    assert info.value.actual == "0.11.15"
    assert info.value.min_inclusive == "0.12.0"
    assert info.value.max_exclusive == "-"


def test_run_echo(py_tf):
    out = io.StringIO()
    command = py_tf.build_command(["-c", "print('hello tf-exec!')"])
    command.stdout = out
    py_tf.run(command)
    assert out.getvalue().strip() == "hello tf-exec!"
    assert command.returncode == 0


def test_run_copies_to_terraform_stdout_and_stderr(py_tf):
    py_tf.stdout = io.StringIO()
    py_tf.stderr = io.StringIO()
    command = py_tf.build_command(
        ["-c", "import sys; print('out'); print('err', file=sys.stderr)"]
    )
    py_tf.run(command)
    assert py_tf.stdout.getvalue().strip() == "out"
    assert py_tf.stderr.getvalue().strip() == "err"


def test_run_feeds_stdin(py_tf):
    out = io.StringIO()
    command = py_tf.build_command(["-c", "import sys; sys.stdout.write(sys.stdin.read().upper())"])
    command.stdin = "abc"
    command.stdout = out
    py_tf.run(command)
    assert out.getvalue() == "ABC"


def test_run_failure_carries_stderr(py_tf):
    command = py_tf.build_command(
        ["-c", "import sys; sys.stderr.write('state lock\\n'); sys.exit(3)"]
    )
    with pytest.raises(subprocess.CalledProcessError) as info:
        py_tf.run(command)
    assert info.value.returncode == 3
    assert "state lock" in info.value.stderr
    assert command.returncode == 3


def test_run_timeout(py_tf):
    command = py_tf.build_command(["-c", "import time; time.sleep(10)"])
    with pytest.raises(CommandCancelledError) as info:
        py_tf.run(command, timeout=0.3)
    assert info.value.timed_out is True


def test_run_already_past_deadline(py_tf):
    command = py_tf.build_command(["-c", "print('never')"])
    with pytest.raises(CommandCancelledError):
        py_tf.run(command, timeout=0)
    assert command.returncode is None


def test_run_missing_working_dir(tmp_path):
    terraform = Terraform(tmp_path / "gone", sys.executable)
    command = terraform.build_command(["-c", "print(1)"])
    with pytest.raises(FileNotFoundError):
        terraform.run(command)


def test_run_json_decodes_first_value(py_tf):
    command = py_tf.build_command(
        ["-c", "print('{\"big\": 7227701560655103598, \"ok\": true}')"]
    )
    result = py_tf.run_json(command)
    assert result == {"big": 7227701560655103598, "ok": True}


def test_run_json_also_writes_original_stdout(py_tf):
    out = io.StringIO()
    command = py_tf.build_command(["-c", "print('[1, 2]')"])
    command.stdout = out
    assert py_tf.run_json(command) == [1, 2]
    assert out.getvalue().strip() == "[1, 2]"


def test_detects_version_when_unknown(tmp_path):
    terraform = Terraform(tmp_path, sys.executable)
    terraform.build_command = lambda args, merge_env=None: Command(
        exec_path=sys.executable,
        args=["-c", "print('Terraform v1.1.9\\non linux_amd64')"],
        env=terraform.build_env(merge_env),
        cwd=terraform.working_dir,
    )
    terraform.compatible(TF0_15_3, None)
    assert terraform.version == Version("1.1.9")


def test_command_str_is_shell_quoted():
    command = Command(exec_path="terraform", args=["apply", "-var", "a=b c"])
    assert command.argv == ["terraform", "apply", "-var", "a=b c"]
    assert str(command) == "terraform apply -var 'a=b c'"