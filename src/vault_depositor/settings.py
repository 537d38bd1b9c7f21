"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from web3 import Web3

from .constants import (
    DEFAULT_NETWORK_RPCS,
    DEFAULT_VAULTS_FILE,
    DEPOSIT_BUFFER,
    DUST_THRESHOLD,
    MAX_DEPOSIT_ATTEMPTS,
    RECEIPT_TIMEOUT_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
    RETRY_DELAY_SECONDS,
    ROUTER_ADDRESS,
    SETTLE_DELAY_SECONDS,
    THROTTLE_DELAY_SECONDS,
)

load_dotenv()

CONFIG_ENV_VAR = "VAULT_DEPOSITOR_CONFIG"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
SECRET_FIELDS = {"private_key"}


class ApprovalConfirmation(str, Enum):
    """How the run waits for an approval before depositing."""

    RECEIPT = "receipt"
    DELAY = "delay"


def _check_for_secrets(data: dict[str, Any], path: str = "") -> None:
    """Recursively reject secret fields in a config file body.

    Raises:
        ValueError: If a secret field is present
    """
    for key, value in data.items():
        current_path = f"{path}.{key}" if path else key
        if key in SECRET_FIELDS:
            raise ValueError(
                f"Security violation: '{key}' found in TOML config file at path '{current_path}'. "
                "The signing key is only accepted from the interactive prompt."
            )
        if isinstance(value, dict):
            _check_for_secrets(value, current_path)


def find_config_file(config_path: Path | None = None) -> Path | None:
    """Find the configuration file using standard search paths.

    Search order:
    1. Explicit path (``--config`` flag or VAULT_DEPOSITOR_CONFIG)
    2. ./vault-depositor.toml (current directory)
    3. ~/.config/vault-depositor/config.toml (user config directory)
    """
    if config_path is not None:
        return config_path if config_path.exists() else None

    local_config = Path("vault-depositor.toml")
    if local_config.exists():
        return local_config

    user_config = Path.home() / ".config" / "vault-depositor" / "config.toml"
    if user_config.exists():
        return user_config

    return None


class TomlConfigSource(PydanticBaseSettingsSource):
    """Lowest-precedence settings source backed by a TOML file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
        super().__init__(settings_cls)
        self._path = path

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        path = find_config_file(self._path)
        if path is None:
            return {}

        with path.open("rb") as f:
            data = tomllib.load(f)  # supports top-level or [vault_depositor]
        body = data.get("vault_depositor", data)
        if not isinstance(body, dict):
            return {}

        _check_for_secrets(body)
        return body


class DepositorSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with VAULT_DEPOSITOR_)
    - Config file (TOML), lowest precedence

    The signing key is deliberately absent: it is only read from the
    interactive prompt.
    """

    # --- inputs ---
    vaults_file: Path = Path(DEFAULT_VAULTS_FILE)
    router_address: str = ROUTER_ADDRESS
    networks: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_NETWORK_RPCS))

    # --- pacing ---
    throttle_delay: float = Field(default=THROTTLE_DELAY_SECONDS, ge=0)
    settle_delay: float = Field(default=SETTLE_DELAY_SECONDS, ge=0)
    retry_delay: float = Field(default=RETRY_DELAY_SECONDS, ge=0)

    # --- deposit policy ---
    max_deposit_attempts: int = Field(default=MAX_DEPOSIT_ATTEMPTS, ge=1)
    dust_threshold: int = Field(default=DUST_THRESHOLD, ge=0)
    deposit_buffer: int = Field(default=DEPOSIT_BUFFER, ge=0)
    approval_confirmation: ApprovalConfirmation = ApprovalConfirmation.RECEIPT

    # --- RPC settings ---
    receipt_timeout: float = Field(default=RECEIPT_TIMEOUT_SECONDS, gt=0)
    request_timeout: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0)
    concurrent_networks: bool = False

    # --- global toggles ---
    dry_run: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="VAULT_DEPOSITOR_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("router_address")
    @classmethod
    def checksum_router(cls, v: str) -> str:
        """Normalise the router address, rejecting malformed hex."""
        if not Web3.is_address(v):
            raise ValueError(f"router_address is not a valid address: {v}")
        return Web3.to_checksum_address(v)

    @field_validator("networks")
    @classmethod
    def require_networks(cls, v: dict[str, str]) -> dict[str, str]:
        if not v:
            raise ValueError("at least one network must be configured")
        return v

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {v!r}"
            )
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get(CONFIG_ENV_VAR)
        cfg_path = Path(env_cfg) if env_cfg else None

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-serialisable dict."""
        return self.model_dump(mode="json")
