"""Blockchain contract address constants and run defaults."""

from typing import TypedDict


class NetworkEndpoints(TypedDict):
    eth: str
    arb: str
    op: str
    base: str
    linea: str


# Router contract: spender for approvals and target of deposit calls
ROUTER_ADDRESS = "0x3267e72Dc8780A1512fa69DA7759eC66f30350E3"

# depositFor(address asset, address account, address vault, uint256 amount)
DEPOSIT_SELECTOR = bytes.fromhex("62e4c545")
DEPOSIT_ARG_TYPES = ("address", "address", "address", "uint256")
DEPOSIT_CALLDATA_LENGTH = 4 + 4 * 32

MAX_UINT256 = 2**256 - 1

DEFAULT_NETWORK_RPCS: NetworkEndpoints = {
    "eth": "https://rpc.sepolia.org",
    "arb": "https://sepolia-rollup.arbitrum.io/rpc",
    "op": "https://sepolia.optimism.io/",
    "base": "https://sepolia.base.org",
    "linea": "https://linea-sepolia-rpc.publicnode.com",
}

DEFAULT_VAULTS_FILE = "vaults.json"

DUST_THRESHOLD = 100  # smallest units
DEPOSIT_BUFFER = 10  # smallest units withheld from each deposit

THROTTLE_DELAY_SECONDS = 3.0  # pacing before each (vault, network) pair
SETTLE_DELAY_SECONDS = 5.0  # wait after an approval in "delay" mode
RETRY_DELAY_SECONDS = 5.0  # wait between reverted deposit attempts
MAX_DEPOSIT_ATTEMPTS = 5

RECEIPT_TIMEOUT_SECONDS = 120.0
REQUEST_TIMEOUT_SECONDS = 15.0

REVERT_MARKER = "execution reverted"
