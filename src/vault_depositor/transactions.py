"""Transaction signing, dispatch and receipt handling."""

from __future__ import annotations

from typing import Any

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3.exceptions import ContractLogicError, TimeExhausted
from web3.types import TxParams, TxReceipt

from .chains import NetworkConnection
from .constants import REVERT_MARKER
from .exceptions import ConfirmationError, SubmitError
from .logger import get_logger

logger = get_logger(__name__)


def is_revert_error(exc: BaseException) -> bool:
    """Classify a submit failure as an on-chain execution revert.

    Uses the structured web3 error when available and falls back to the
    node's error text otherwise.
    """
    if isinstance(exc, ContractLogicError):
        return True
    return REVERT_MARKER in str(exc).lower()


def build_transaction(
    connection: NetworkConnection,
    account: LocalAccount,
    to: ChecksumAddress,
    data: bytes,
) -> TxParams:
    """Fill nonce, gas and gas price for a call from ``account`` to ``to``.

    Gas estimation executes the call against the latest state, so a call
    that would revert fails here with ContractLogicError.
    """
    w3 = connection.web3
    tx: TxParams = {
        "from": account.address,
        "to": to,
        "data": HexBytes(data),
        "value": 0,
        "chainId": connection.chain_id,
        "nonce": w3.eth.get_transaction_count(account.address, "pending"),
    }
    tx["gas"] = w3.eth.estimate_gas(tx)
    tx["gasPrice"] = w3.eth.gas_price
    return tx


def sign_and_send(
    connection: NetworkConnection,
    account: LocalAccount,
    to: ChecksumAddress,
    data: bytes,
) -> str:
    """Build, sign and broadcast a transaction, returning its 0x hash.

    Raises:
        SubmitError: On any estimation, signing or broadcast failure, with
            ``reverted`` set when the node reported an execution revert
    """
    try:
        tx = build_transaction(connection, account, to, data)
        signed = account.sign_transaction(tx)  # type: ignore[arg-type]
        tx_hash = connection.web3.eth.send_raw_transaction(signed.raw_transaction)
    except Exception as exc:
        reverted = is_revert_error(exc)
        raise SubmitError(
            f"Failed to submit transaction to {to} on {connection.name}",
            network=connection.name,
            reverted=reverted,
            details={"error": str(exc)},
        ) from exc

    tx_hex = tx_hash.to_0x_hex()
    logger.debug("Transaction sent on %s to %s hash=%s", connection.name, to, tx_hex)
    return tx_hex


def wait_for_receipt(
    connection: NetworkConnection,
    tx_hash: str,
    *,
    timeout: float,
) -> TxReceipt:
    """Poll until ``tx_hash`` is mined and require a successful status.

    Raises:
        ConfirmationError: On timeout, RPC failure or a failed status
    """
    try:
        receipt = connection.web3.eth.wait_for_transaction_receipt(
            HexBytes(tx_hash), timeout=timeout
        )
    except TimeExhausted as exc:
        raise ConfirmationError(
            f"Transaction not mined within {timeout:.0f}s on {connection.name}",
            network=connection.name,
            tx_hash=tx_hash,
        ) from exc
    except Exception as exc:
        raise ConfirmationError(
            f"Failed to fetch receipt on {connection.name}",
            network=connection.name,
            tx_hash=tx_hash,
            details={"error": str(exc)},
        ) from exc

    status: Any = receipt.get("status")
    if status != 1:
        raise ConfirmationError(
            f"Transaction failed on {connection.name} (status={status})",
            network=connection.name,
            tx_hash=tx_hash,
        )

    logger.debug(
        "Transaction confirmed on %s hash=%s block=%s",
        connection.name,
        tx_hash,
        receipt.get("blockNumber"),
    )
    return receipt
