"""Vault configuration loading."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from eth_typing import ChecksumAddress
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from web3 import Web3

from .exceptions import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Vault:
    """A token asset paired with the contract that accepts its deposits."""

    name: str
    asset: ChecksumAddress
    target_contract: ChecksumAddress
    networks: tuple[str, ...]


class VaultRecord(BaseModel):
    """Raw vault entry as it appears in the JSON file."""

    name: str
    asset: str
    contract: str
    networks: list[str]

    model_config = ConfigDict(extra="ignore")

    @field_validator("asset", "contract")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Accept any well-formed hex address; checksum casing is not enforced."""
        if not Web3.is_address(v.lower()):
            raise ValueError(f"not a valid address: {v}")
        return Web3.to_checksum_address(v.lower())

    def to_vault(self) -> Vault:
        return Vault(
            name=self.name,
            asset=Web3.to_checksum_address(self.asset),
            target_contract=Web3.to_checksum_address(self.contract),
            networks=tuple(self.networks),
        )


def parse_vaults(raw: Any, source: str = "<memory>") -> list[Vault]:
    """Convert decoded JSON into vaults, preserving file order.

    Args:
        raw: Decoded JSON document (must be a list of vault records)
        source: Where the document came from, for error messages

    Raises:
        ConfigurationError: If the document does not have the expected shape
    """
    if not isinstance(raw, list):
        raise ConfigurationError(
            f"Vault configuration must be a JSON list, got {type(raw).__name__}",
            path=source,
        )

    vaults: list[Vault] = []
    for index, entry in enumerate(raw):
        try:
            record = VaultRecord.model_validate(entry)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid vault entry #{index} in {source}",
                path=source,
                details={"error": str(exc)},
            ) from exc
        vaults.append(record.to_vault())

    return vaults


def load_vaults(path: str | Path) -> list[Vault]:
    """Load the vault list from a JSON file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    p = Path(path)
    try:
        with p.open() as f:
            raw = json.load(f)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to read vault configuration: {p}",
            path=str(p),
            details={"error": str(exc)},
        ) from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"Vault configuration is not valid JSON: {p}",
            path=str(p),
            details={"error": str(exc)},
        ) from exc

    vaults = parse_vaults(raw, source=str(p))
    logger.info("Loaded %d vault(s) from %s", len(vaults), p)
    return vaults
