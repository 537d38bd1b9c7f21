"""ERC-20 token client scoped to one network connection."""

from __future__ import annotations

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from web3 import Web3
from web3.contract import Contract

from .abi import load_erc20_abi
from .chains import NetworkConnection
from .exceptions import ReadError
from .logger import get_logger
from .transactions import sign_and_send

logger = get_logger(__name__)


class TokenClient:
    """Read balances and allowances, and submit approvals, for one token.

    Calls are synchronous; callers decide on retries and threading.
    """

    def __init__(self, connection: NetworkConnection, token_address: str):
        self.connection = connection
        self.token_address: ChecksumAddress = Web3.to_checksum_address(token_address)
        self._contract: Contract = connection.web3.eth.contract(
            address=self.token_address, abi=load_erc20_abi()
        )

    def _read(self, function_name: str, *args: ChecksumAddress) -> int:
        try:
            value = getattr(self._contract.functions, function_name)(*args).call()
        except Exception as exc:
            raise ReadError(
                f"{function_name}() failed for {self.token_address} on {self.connection.name}",
                network=self.connection.name,
                contract=self.token_address,
                details={"error": str(exc)},
            ) from exc
        return int(value)

    def balance_of(self, account: str) -> int:
        """Return the raw (smallest-unit) balance of ``account``."""
        return self._read("balanceOf", Web3.to_checksum_address(account))

    def allowance(self, owner: str, spender: str) -> int:
        """Return how much ``spender`` may move on behalf of ``owner``."""
        return self._read(
            "allowance",
            Web3.to_checksum_address(owner),
            Web3.to_checksum_address(spender),
        )

    def approve_calldata(self, spender: str, amount: int) -> bytes:
        calldata_hex = self._contract.encode_abi(
            abi_element_identifier="approve",
            args=[Web3.to_checksum_address(spender), amount],
        )
        return bytes.fromhex(calldata_hex.removeprefix("0x"))

    def approve(self, spender: str, amount: int, account: LocalAccount) -> str:
        """Submit ``approve(spender, amount)`` signed by ``account``.

        Returns the transaction hash without waiting for it to be mined.

        Raises:
            SubmitError: If signing or broadcasting fails
        """
        data = self.approve_calldata(spender, amount)
        tx_hash = sign_and_send(self.connection, account, self.token_address, data)
        logger.debug(
            "approve(%s) submitted for %s on %s",
            spender,
            self.token_address,
            self.connection.name,
        )
        return tx_hash
