"""CLI tests for the vault depositor entrypoint."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from vault_depositor.exceptions import ConfigurationError, ConnectionSetupError
from vault_depositor.main import app
from vault_depositor.orchestrator import RunSummary

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("VAULT_DEPOSITOR_CONFIG", raising=False)
    with patch("vault_depositor.main.setup_logging"):
        yield


def test_show_config_prints_settings_and_exits():
    with patch("vault_depositor.main.execute") as execute:
        result = runner.invoke(app, ["--show-config", "--dry-run", "--router", "0x" + "11" * 20])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["dry_run"] is True
    assert data["router_address"].lower() == "0x" + "11" * 20
    execute.assert_not_called()


def test_missing_config_file_is_usage_error(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "nope.toml")])

    assert result.exit_code == 2


def test_invalid_setting_is_usage_error():
    result = runner.invoke(app, ["--router", "0x1234", "--show-config"])

    assert result.exit_code == 2


@pytest.mark.parametrize(
    "error",
    [
        ConfigurationError("Unable to read vault configuration: vaults.json"),
        ConnectionSetupError("Failed to connect to arb RPC", network="arb"),
    ],
)
def test_startup_failure_exits_non_zero_without_prompting(error):
    with (
        patch("vault_depositor.main.load_vaults", side_effect=error),
        patch("vault_depositor.main.connect_networks", side_effect=error),
        patch("vault_depositor.main.prompt_account") as prompt,
        patch("vault_depositor.main.run_deposits", new_callable=AsyncMock) as run,
    ):
        result = runner.invoke(app, [])

    assert result.exit_code == 1
    prompt.assert_not_called()
    run.assert_not_awaited()


def test_full_pass_runs_orchestrator_and_prints_summary(tmp_path):
    vaults_path = tmp_path / "my-vaults.json"
    connections = {"eth": MagicMock()}
    summary = RunSummary(results=[])
    with (
        patch("vault_depositor.main.load_vaults", return_value=[]) as load,
        patch("vault_depositor.main.connect_networks", return_value=connections),
        patch("vault_depositor.main.prompt_account") as prompt,
        patch(
            "vault_depositor.main.run_deposits",
            new_callable=AsyncMock,
            return_value=summary,
        ) as run,
        patch("vault_depositor.main.print_summary") as printed,
    ):
        result = runner.invoke(app, ["--vaults", str(vaults_path), "--concurrent-networks"])

    assert result.exit_code == 0, result.output
    load.assert_called_once_with(vaults_path)
    prompt.assert_called_once_with()
    ctx = run.await_args.args[0]
    assert ctx.account is prompt.return_value
    assert ctx.connections is connections
    assert ctx.settings.concurrent_networks is True
    printed.assert_called_once_with(summary)


def test_unknown_log_level_is_usage_error():
    result = runner.invoke(app, ["--log-level", "verbose", "--show-config"])

    assert result.exit_code == 2
