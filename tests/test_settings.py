"""Tests for settings configuration loading."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from vault_depositor.constants import DEFAULT_NETWORK_RPCS, ROUTER_ADDRESS
from vault_depositor.settings import ApprovalConfirmation, DepositorSettings


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("VAULT_DEPOSITOR_CONFIG", raising=False)


def test_defaults_match_reference_deployment():
    settings = DepositorSettings()

    assert settings.router_address == ROUTER_ADDRESS
    assert settings.networks == dict(DEFAULT_NETWORK_RPCS)
    assert settings.vaults_file == Path("vaults.json")
    assert settings.throttle_delay == 3.0
    assert settings.max_deposit_attempts == 5
    assert settings.dust_threshold == 100
    assert settings.deposit_buffer == 10
    assert settings.approval_confirmation is ApprovalConfirmation.RECEIPT
    assert settings.dry_run is False


def test_loads_table_from_config_file(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.toml"
    config_path.write_text(
        dedent(
            """
            [vault_depositor]
            vaults_file = "prod-vaults.json"
            throttle_delay = 0.5
            approval_confirmation = "delay"

            [vault_depositor.networks]
            eth = "https://eth.example"
            """
        ).strip()
    )
    monkeypatch.setenv("VAULT_DEPOSITOR_CONFIG", str(config_path))

    settings = DepositorSettings()

    assert settings.vaults_file == Path("prod-vaults.json")
    assert settings.throttle_delay == 0.5
    assert settings.approval_confirmation is ApprovalConfirmation.DELAY
    assert settings.networks == {"eth": "https://eth.example"}


def test_local_config_file_is_discovered(tmp_path):
    (tmp_path / "vault-depositor.toml").write_text("dust_threshold = 1000\n")

    assert DepositorSettings().dust_threshold == 1000


def test_precedence_cli_over_env_over_file(tmp_path, monkeypatch):
    (tmp_path / "vault-depositor.toml").write_text(
        "retry_delay = 1.0\nsettle_delay = 1.0\nmax_deposit_attempts = 2\n"
    )
    monkeypatch.setenv("VAULT_DEPOSITOR_RETRY_DELAY", "2.0")
    monkeypatch.setenv("VAULT_DEPOSITOR_MAX_DEPOSIT_ATTEMPTS", "3")

    settings = DepositorSettings(max_deposit_attempts=4)

    assert settings.settle_delay == 1.0
    assert settings.retry_delay == 2.0
    assert settings.max_deposit_attempts == 4


def test_private_key_in_config_file_is_rejected(tmp_path):
    (tmp_path / "vault-depositor.toml").write_text('private_key = "0xabc"\n')

    with pytest.raises(ValueError, match="Security violation"):
        DepositorSettings()


def test_router_address_is_checksummed():
    settings = DepositorSettings(router_address=ROUTER_ADDRESS.lower())

    assert settings.router_address == ROUTER_ADDRESS


@pytest.mark.parametrize(
    "kwargs",
    [
        {"router_address": "0x1234"},
        {"networks": {}},
        {"max_deposit_attempts": 0},
        {"throttle_delay": -1},
        {"deposit_buffer": -5},
        {"log_level": "verbose"},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        DepositorSettings(**kwargs)


def test_safe_dict_is_json_ready():
    data = DepositorSettings(log_level="debug").as_safe_dict()

    assert data["log_level"] == "DEBUG"
    assert data["vaults_file"] == "vaults.json"
    assert data["approval_confirmation"] == "receipt"
    assert "private_key" not in data


@pytest.mark.parametrize("name", ["trace", "Debug", "WARNING", "critical"])
def test_known_log_levels_are_accepted(name):
    assert DepositorSettings(log_level=name).log_level == name.upper()
