"""Signing key entry."""

from __future__ import annotations

from typing import cast

import typer
from eth_account import Account
from eth_account.signers.local import LocalAccount

from .exceptions import SigningKeyError
from .logger import get_logger

logger = get_logger(__name__)

PROMPT_TEXT = "Enter your Private Key"


def parse_private_key(raw_key: str) -> LocalAccount:
    """Derive a local signer from a hex private key (with or without 0x).

    Raises:
        SigningKeyError: If the key is empty or not a valid secp256k1 key
    """
    key = raw_key.strip()
    if not key:
        raise SigningKeyError("Private key must not be empty")
    if not key.startswith("0x"):
        key = f"0x{key}"

    try:
        return cast(LocalAccount, Account.from_key(key))
    except Exception:
        # The key itself must never reach logs or tracebacks
        raise SigningKeyError("Private key is malformed") from None


def prompt_account() -> LocalAccount:
    """Read the private key from a hidden interactive prompt."""
    raw_key = typer.prompt(PROMPT_TEXT, hide_input=True)
    account = parse_private_key(raw_key)
    logger.info("Account address: %s", account.address)
    return account
