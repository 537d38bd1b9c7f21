"""Multi-chain vault deposit automation."""

from .calldata import DepositCall, build_deposit_calldata, decode_deposit_calldata
from .orchestrator import (
    DepositOutcome,
    DepositSucceeded,
    NonRetryableFailure,
    PairResult,
    PairStatus,
    RetriesExhausted,
    RunContext,
    RunSummary,
    run_deposits,
)
from .vaults import Vault, load_vaults

__version__ = "0.1.0"

__all__ = [
    "DepositCall",
    "DepositOutcome",
    "DepositSucceeded",
    "NonRetryableFailure",
    "PairResult",
    "PairStatus",
    "RetriesExhausted",
    "RunContext",
    "RunSummary",
    "Vault",
    "build_deposit_calldata",
    "decode_deposit_calldata",
    "load_vaults",
    "run_deposits",
]
