"""Calldata encoding for the router's deposit entry point."""

from __future__ import annotations

from dataclasses import dataclass

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_typing import ChecksumAddress
from web3 import Web3

from .constants import (
    DEPOSIT_ARG_TYPES,
    DEPOSIT_CALLDATA_LENGTH,
    DEPOSIT_SELECTOR,
    MAX_UINT256,
)


@dataclass(frozen=True)
class DepositCall:
    """Decoded arguments of a router deposit call."""

    asset: ChecksumAddress
    depositor: ChecksumAddress
    vault_contract: ChecksumAddress
    amount: int


def build_deposit_calldata(
    asset: str,
    depositor: str,
    vault_contract: str,
    amount: int,
) -> bytes:
    """Encode a router deposit call.

    Layout: 4-byte selector, then asset, depositor and vault contract each
    left-padded to 32 bytes, then the amount as a 32-byte big-endian integer.

    Raises:
        ValueError: If an address is malformed or the amount does not fit
            in an unsigned 256-bit word
    """
    if not 0 <= amount <= MAX_UINT256:
        raise ValueError(f"Deposit amount out of uint256 range: {amount}")

    args = [
        Web3.to_checksum_address(asset),
        Web3.to_checksum_address(depositor),
        Web3.to_checksum_address(vault_contract),
        amount,
    ]
    data = DEPOSIT_SELECTOR + abi_encode(list(DEPOSIT_ARG_TYPES), args)
    if len(data) != DEPOSIT_CALLDATA_LENGTH:
        raise ValueError(
            f"Deposit calldata must be {DEPOSIT_CALLDATA_LENGTH} bytes, got {len(data)}"
        )
    return data


def decode_deposit_calldata(data: bytes) -> DepositCall:
    """Decode calldata produced by build_deposit_calldata.

    Raises:
        ValueError: If the selector or length does not match
    """
    if len(data) != DEPOSIT_CALLDATA_LENGTH:
        raise ValueError(
            f"Deposit calldata must be {DEPOSIT_CALLDATA_LENGTH} bytes, got {len(data)}"
        )
    if data[:4] != DEPOSIT_SELECTOR:
        raise ValueError(f"Unexpected selector 0x{data[:4].hex()}")

    asset, depositor, vault_contract, amount = abi_decode(
        list(DEPOSIT_ARG_TYPES), data[4:]
    )
    return DepositCall(
        asset=Web3.to_checksum_address(asset),
        depositor=Web3.to_checksum_address(depositor),
        vault_contract=Web3.to_checksum_address(vault_contract),
        amount=amount,
    )
