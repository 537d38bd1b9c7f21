"""Per-network Web3 connections, built once at startup."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from eth_typing import URI
from web3 import Web3

from .exceptions import ConnectionSetupError, UnknownNetworkError
from .logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NetworkConnection:
    """A ready-to-use provider for one network and its chain id."""

    name: str
    web3: Web3
    chain_id: int


def connect_network(name: str, rpc_url: str, *, timeout: float) -> NetworkConnection:
    """Open a provider for ``rpc_url`` and fetch its chain id.

    Raises:
        ConnectionSetupError: If the endpoint is unreachable or the chain id
            cannot be retrieved
    """
    w3 = Web3(Web3.HTTPProvider(URI(rpc_url), request_kwargs={"timeout": timeout}))

    try:
        chain_id = w3.eth.chain_id
    except Exception as exc:
        raise ConnectionSetupError(
            f"Failed to connect to {name} RPC",
            network=name,
            endpoint=rpc_url,
            details={"error": str(exc)},
        ) from exc

    logger.debug("Connected to %s (chain id %d) at %s", name, chain_id, rpc_url)
    return NetworkConnection(name=name, web3=w3, chain_id=chain_id)


def connect_networks(
    endpoints: Mapping[str, str], *, timeout: float
) -> dict[str, NetworkConnection]:
    """Connect to every configured network.

    There is no partial start: the first unreachable network aborts setup.
    """
    connections = {
        name: connect_network(name, rpc_url, timeout=timeout)
        for name, rpc_url in endpoints.items()
    }
    logger.info(
        "Connected to %d network(s): %s",
        len(connections),
        ", ".join(f"{c.name}={c.chain_id}" for c in connections.values()),
    )
    return connections


def get_connection(
    connections: Mapping[str, NetworkConnection], network: str
) -> NetworkConnection:
    """Look up a connection, raising UnknownNetworkError if absent."""
    try:
        return connections[network]
    except KeyError:
        raise UnknownNetworkError(network, sorted(connections)) from None
