"""Exception hierarchy for vault-depositor.

Startup errors (configuration, connections, signing key) abort the run.
Read, submit, confirmation and unknown-network errors are scoped to a single
(vault, network) pair and are handled by the orchestrator.
"""

from typing import Any


class DepositorError(Exception):
    """Base exception for all vault-depositor errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(DepositorError):
    """Raised when the vault file or settings cannot be loaded."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.path = path


class ConnectionSetupError(DepositorError):
    """Raised when a configured network cannot be reached at startup."""

    def __init__(
        self,
        message: str,
        network: str | None = None,
        endpoint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.network = network
        self.endpoint = endpoint


class SigningKeyError(DepositorError):
    """Raised when the entered private key cannot be parsed."""


class UnknownNetworkError(DepositorError):
    """Raised when a vault references a network with no connection."""

    def __init__(self, network: str, available: list[str] | None = None):
        known = ", ".join(available or []) or "none"
        super().__init__(
            f"Network '{network}' is not configured (available: {known})"
        )
        self.network = network


class ReadError(DepositorError):
    """Raised when a read-only contract call fails."""

    def __init__(
        self,
        message: str,
        network: str | None = None,
        contract: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.network = network
        self.contract = contract


class SubmitError(DepositorError):
    """Raised when a transaction cannot be signed or broadcast.

    ``reverted`` marks an on-chain execution revert, which the deposit loop
    treats as transient. Every other submit failure is permanent.
    """

    def __init__(
        self,
        message: str,
        network: str | None = None,
        reverted: bool = False,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.network = network
        self.reverted = reverted


class ConfirmationError(DepositorError):
    """Raised when a submitted transaction is not confirmed successfully."""

    def __init__(
        self,
        message: str,
        network: str | None = None,
        tx_hash: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.network = network
        self.tx_hash = tx_hash


def describe(error: BaseException) -> str:
    """Render an error with its underlying cause for log output."""
    message = str(error)
    detail: Any = getattr(error, "details", {}).get("error")
    if detail and detail not in message:
        return f"{message} ({detail})"
    return message
