# Author: PB and Claude
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# test/test_cli.py

"""Tests for the ipfs-embedded command line."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from ipfs_embedded.cli import cli
from ipfs_embedded.config import CONFIG_ENV
from ipfs_embedded.errors import RuntimeUnavailableError
from ipfs_embedded.types import InvokeResult, RC_FAILED, RC_SUCCESS


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setattr("ipfs_embedded.config.DEFAULT_COMMON", tmp_path / "none-common.toml")
    monkeypatch.setattr("ipfs_embedded.config.DEFAULT_CONFIG", tmp_path / "none-config.toml")
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    return CliRunner()


def fake_dispatcher(returncode=RC_SUCCESS, stdout="", stderr=""):
    dispatcher = MagicMock()

    def dispatch(command):
        return InvokeResult(
            command=command.line,
            backend="fake",
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )

    dispatcher.dispatch.side_effect = dispatch
    return dispatcher


class TestEncode:
    def test_pin_add(self, runner):
        result = runner.invoke(cli, ["encode", "pin_add", "ipfs_path=/ipfs/QmX", "recursive=yes"])
        assert result.exit_code == 0
        assert result.output == "pin add /ipfs/QmX -r true\n"

    def test_alias_and_hyphenated_param(self, runner):
        result = runner.invoke(cli, ["encode", "ipfs_add", "path=/data", "wrap-with-directory=1"])
        assert result.exit_code == 0
        assert "-w true" in result.output

    def test_tokens(self, runner):
        result = runner.invoke(cli, ["encode", "add", "path=/tmp/my file", "--tokens"])
        assert result.exit_code == 0
        assert result.output.splitlines()[:2] == ["add", "/tmp/my file"]

    def test_missing_required(self, runner):
        result = runner.invoke(cli, ["encode", "cat"])
        assert result.exit_code == 1
        assert "missing required parameter" in result.output

    def test_unknown_operation(self, runner):
        result = runner.invoke(cli, ["encode", "teleport"])
        assert result.exit_code == 1
        assert "Unknown operation" in result.output

    def test_unknown_param(self, runner):
        result = runner.invoke(cli, ["encode", "version", "verbose=true"])
        assert result.exit_code == 2
        assert "not a parameter of version" in result.output

    def test_bad_uint(self, runner):
        result = runner.invoke(cli, ["encode", "ping", "count=-3"])
        assert result.exit_code == 2

    def test_bad_pair(self, runner):
        result = runner.invoke(cli, ["encode", "cat", "QmX"])
        assert result.exit_code == 2
        assert "NAME=VALUE" in result.output


class TestOps:
    def test_lists_all(self, runner):
        result = runner.invoke(cli, ["ops"])
        assert result.exit_code == 0
        assert "pin_add" in result.output
        assert "dht findprovs" in result.output

    def test_group_filter(self, runner):
        result = runner.invoke(cli, ["ops", "--group", "tool"])
        assert "config_show" in result.output
        assert "pin_add" not in result.output

    def test_json(self, runner, tmp_path):
        out = tmp_path / "ops.json"
        result = runner.invoke(cli, ["ops", "--output-json", str(out)])
        assert result.exit_code == 0
        data = json.loads(out.read_text())
        names = {op["name"] for op in data}
        assert "network_id" in names


class TestRun:
    @patch("ipfs_embedded.cli.create_dispatcher")
    def test_success(self, mock_create, runner):
        mock_create.return_value = fake_dispatcher(stdout="ipfs version 0.4.0\n")
        result = runner.invoke(cli, ["run", "version"])
        assert result.exit_code == 0
        assert "ipfs version 0.4.0" in result.output

    @patch("ipfs_embedded.cli.create_dispatcher")
    def test_failure_exit_code(self, mock_create, runner):
        mock_create.return_value = fake_dispatcher(returncode=RC_FAILED, stderr="Error: not found\n")
        result = runner.invoke(cli, ["run", "cat", "ipfs_path=QmMissing"])
        assert result.exit_code == RC_FAILED

    @patch("ipfs_embedded.cli.create_dispatcher")
    def test_backend_override(self, mock_create, runner):
        mock_create.return_value = fake_dispatcher()
        result = runner.invoke(cli, ["run", "swarm_peers", "--backend", "http", "--timeout", "5"])
        assert result.exit_code == 0
        cfg = mock_create.call_args[0][0]
        assert cfg.backend == "http"
        assert cfg.timeout == 5

    @patch("ipfs_embedded.cli.create_dispatcher")
    def test_output_json(self, mock_create, runner, tmp_path):
        mock_create.return_value = fake_dispatcher(stdout="QmPeer\n")
        out = tmp_path / "result.json"
        result = runner.invoke(cli, ["run", "id", "--output-json", str(out)])
        assert result.exit_code == 0
        data = json.loads(out.read_text())
        assert data["command"] == "id"
        assert data["stdout"] == "QmPeer\n"

    @patch("ipfs_embedded.cli.create_dispatcher")
    def test_runtime_unavailable(self, mock_create, runner):
        dispatcher = MagicMock()
        dispatcher.dispatch.side_effect = RuntimeUnavailableError("Executable not found: ipfs", backend="subprocess")
        mock_create.return_value = dispatcher
        result = runner.invoke(cli, ["run", "version"])
        assert result.exit_code == 1
        assert "Runtime unavailable" in result.output

    def test_invalid_config(self, runner, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[runtime]\nbackend = "library"\n')
        result = runner.invoke(cli, ["run", "version", "--config-file", str(path)])
        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_malformed_config(self, runner, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[runtime\n")
        result = runner.invoke(cli, ["run", "version", "--config-file", str(path)])
        assert result.exit_code == 1
        assert "Error: Invalid config" in result.output

    def test_bad_auth_file(self, runner, tmp_path):
        auth = tmp_path / "auth"
        auth.write_text("nocolon")
        path = tmp_path / "config.toml"
        path.write_text(f'[runtime]\nbackend = "http"\n[http]\nauth_file = "{auth}"\n')
        result = runner.invoke(cli, ["run", "version", "--config-file", str(path)])
        assert result.exit_code == 1
        assert "expected 'user:password'" in result.output


class TestExec:
    @patch("ipfs_embedded.cli.create_dispatcher")
    def test_passthrough(self, mock_create, runner):
        dispatcher = fake_dispatcher()
        mock_create.return_value = dispatcher
        result = runner.invoke(cli, ["exec", "pin", "ls", "-t", "all"])
        assert result.exit_code == 0
        command = dispatcher.dispatch.call_args[0][0]
        assert command.line == "pin ls -t all"


class TestConfig:
    def test_defaults(self, runner):
        result = runner.invoke(cli, ["config"])
        assert "backend: subprocess" in result.output

    def test_validate_only_errors(self, runner, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[runtime]\nbackend = "grpc"\n')
        result = runner.invoke(cli, ["config", "--config-file", str(path), "--validate-only"])
        assert result.exit_code == 1
        assert "unknown backend" in result.output

    def test_malformed_config(self, runner, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[runtime\n")
        result = runner.invoke(cli, ["config", "--config-file", str(path)])
        assert result.exit_code == 1
        assert "Error: Invalid config" in result.output

    def test_json(self, runner, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[runtime]\nbackend = "http"\n[http]\nport = 5002\n')
        out = tmp_path / "out.json"
        runner.invoke(cli, ["config", "--config-file", str(path), "--output-json", str(out)])
        data = json.loads(out.read_text())
        assert data["backend"] == "http"
        assert data["http"]["port"] == 5002
        assert data["valid"] is True
