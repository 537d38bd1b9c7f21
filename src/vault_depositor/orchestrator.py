"""Deposit orchestration across every configured (vault, network) pair.

For each pair, in declaration order:
1. Pace (fixed throttle delay)
2. Read the account's token balance
3. Skip balances at or below the dust threshold
4. Read the router allowance and approve the max amount if it does not
   exceed the balance, then wait for the approval
5. Deposit ``balance - buffer`` through the router, retrying reverts

Failures are isolated per pair; the run always reaches the completion line.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import backoff
from eth_account.signers.local import LocalAccount

from .calldata import build_deposit_calldata
from .chains import NetworkConnection, get_connection
from .constants import MAX_UINT256
from .exceptions import (
    ConfirmationError,
    ReadError,
    SubmitError,
    UnknownNetworkError,
    describe,
)
from .logger import get_logger
from .settings import ApprovalConfirmation, DepositorSettings
from .token import TokenClient
from .transactions import sign_and_send, wait_for_receipt
from .vaults import Vault

logger = get_logger(__name__)


class PairStatus(str, Enum):
    DEPOSITED = "deposited"
    SKIPPED_DUST = "skipped_dust"
    DRY_RUN = "dry_run"
    UNKNOWN_NETWORK = "unknown_network"
    READ_FAILED = "read_failed"
    APPROVAL_FAILED = "approval_failed"
    DEPOSIT_FAILED = "deposit_failed"
    RETRIES_EXHAUSTED = "retries_exhausted"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class DepositSucceeded:
    tx_hash: str
    attempts: int


@dataclass(frozen=True)
class NonRetryableFailure:
    error: Exception
    attempts: int


@dataclass(frozen=True)
class RetriesExhausted:
    attempts: int
    last_error: str


DepositOutcome = DepositSucceeded | NonRetryableFailure | RetriesExhausted


@dataclass
class PairResult:
    """What happened to one (vault, network) pair."""

    vault: str
    network: str
    status: PairStatus
    balance: int | None = None
    amount: int | None = None
    approval_tx: str | None = None
    deposit: DepositOutcome | None = None
    error: str | None = None


@dataclass
class RunSummary:
    results: list[PairResult] = field(default_factory=list)

    def with_status(self, status: PairStatus) -> list[PairResult]:
        return [r for r in self.results if r.status is status]

    @property
    def failed(self) -> list[PairResult]:
        ok = {PairStatus.DEPOSITED, PairStatus.SKIPPED_DUST, PairStatus.DRY_RUN}
        return [r for r in self.results if r.status not in ok]


@dataclass
class RunContext:
    """Everything a run needs, passed explicitly instead of held globally."""

    settings: DepositorSettings
    account: LocalAccount
    connections: Mapping[str, NetworkConnection]
    vaults: Sequence[Vault]


async def submit_with_retry(
    submit: Callable[[], Awaitable[str]],
    *,
    max_attempts: int,
    retry_delay: float,
    label: str,
) -> DepositOutcome:
    """Call ``submit`` until it succeeds, retrying only reverted submissions.

    Args:
        submit: Coroutine factory returning a transaction hash
        max_attempts: Total attempts allowed, including the first
        retry_delay: Fixed wait between attempts, in seconds
        label: "vault:network" for log lines

    Returns:
        The tagged outcome of the submission loop
    """
    attempts = 0

    def _on_backoff(details: Any) -> None:
        logger.warning(
            "Transaction failed for %s (attempt %d of %d): %s",
            label,
            details["tries"],
            max_attempts,
            describe(details["exception"]),
        )

    @backoff.on_exception(
        backoff.constant,
        SubmitError,
        max_tries=max_attempts,
        interval=retry_delay,
        jitter=None,
        giveup=lambda e: not e.reverted,
        on_backoff=_on_backoff,
    )
    async def _attempt() -> str:
        nonlocal attempts
        attempts += 1
        return await submit()

    try:
        tx_hash = await _attempt()
    except SubmitError as exc:
        if exc.reverted:
            return RetriesExhausted(attempts=attempts, last_error=describe(exc))
        return NonRetryableFailure(error=exc, attempts=attempts)

    return DepositSucceeded(tx_hash=tx_hash, attempts=attempts)


async def _await_approval(
    settings: DepositorSettings, connection: NetworkConnection, tx_hash: str
) -> None:
    if settings.approval_confirmation is ApprovalConfirmation.RECEIPT:
        await asyncio.to_thread(
            wait_for_receipt, connection, tx_hash, timeout=settings.receipt_timeout
        )
    else:
        await asyncio.sleep(settings.settle_delay)


async def _ensure_allowance(
    ctx: RunContext, client: TokenClient, balance: int, label: str
) -> str | None:
    """Approve the router for the max amount when its allowance is too low.

    Returns the approval transaction hash, or None if none was submitted.
    """
    settings = ctx.settings
    router = settings.router_address

    allowance = await asyncio.to_thread(client.allowance, ctx.account.address, router)
    if allowance > balance:
        logger.debug("Allowance for %s is sufficient (%d)", label, allowance)
        return None

    if settings.dry_run:
        logger.info("[dry-run] would approve router %s for %s", router, label)
        return None

    tx_hash = await asyncio.to_thread(client.approve, router, MAX_UINT256, ctx.account)
    logger.info("approve tx: %s", tx_hash)
    await _await_approval(settings, client.connection, tx_hash)
    return tx_hash


async def process_pair(ctx: RunContext, vault: Vault, network: str) -> PairResult:
    """Run the balance → allowance → approve → deposit sequence for one pair."""
    settings = ctx.settings
    label = f"{vault.name}:{network}"

    await asyncio.sleep(settings.throttle_delay)

    try:
        connection = get_connection(ctx.connections, network)
    except UnknownNetworkError as e:
        logger.error("resolve network %s (%s)", label, e)
        return PairResult(vault.name, network, PairStatus.UNKNOWN_NETWORK, error=str(e))

    client = TokenClient(connection, vault.asset)

    try:
        balance = await asyncio.to_thread(client.balance_of, ctx.account.address)
    except ReadError as e:
        logger.error("get balance %s (%s)", label, describe(e))
        return PairResult(vault.name, network, PairStatus.READ_FAILED, error=describe(e))

    if balance <= settings.dust_threshold:
        logger.debug("Skipping %s: balance %d is dust", label, balance)
        return PairResult(vault.name, network, PairStatus.SKIPPED_DUST, balance=balance)

    logger.info("balance of %s on %s is %d", vault.name, network, balance)
    result = PairResult(vault.name, network, PairStatus.DEPOSITED, balance=balance)

    try:
        result.approval_tx = await _ensure_allowance(ctx, client, balance, label)
    except ReadError as e:
        logger.error("need approve %s (%s)", label, describe(e))
        result.status, result.error = PairStatus.READ_FAILED, describe(e)
        return result
    except (SubmitError, ConfirmationError) as e:
        logger.error("approve %s (%s)", label, describe(e))
        result.status, result.error = PairStatus.APPROVAL_FAILED, describe(e)
        return result

    amount = balance - settings.deposit_buffer
    result.amount = amount

    try:
        payload = build_deposit_calldata(
            vault.asset, ctx.account.address, vault.target_contract, amount
        )
    except ValueError as e:
        logger.error("build deposit %s (%s)", label, e)
        result.status, result.error = PairStatus.DEPOSIT_FAILED, str(e)
        result.deposit = NonRetryableFailure(error=e, attempts=0)
        return result

    if settings.dry_run:
        logger.info(
            "[dry-run] would deposit %d %s on %s calldata=0x%s",
            amount,
            vault.name,
            network,
            payload.hex(),
        )
        result.status = PairStatus.DRY_RUN
        return result

    async def _submit() -> str:
        return await asyncio.to_thread(
            sign_and_send, connection, ctx.account, settings.router_address, payload
        )

    outcome = await submit_with_retry(
        _submit,
        max_attempts=settings.max_deposit_attempts,
        retry_delay=settings.retry_delay,
        label=label,
    )
    result.deposit = outcome

    match outcome:
        case DepositSucceeded(tx_hash=tx_hash):
            logger.info("%d %s deposited on %s tx: %s", amount, vault.name, network, tx_hash)
        case NonRetryableFailure(error=error):
            logger.error("raw transact %s (%s)", label, describe(error))
            result.status, result.error = PairStatus.DEPOSIT_FAILED, describe(error)
        case RetriesExhausted(attempts=attempts, last_error=last_error):
            logger.error(
                "deposit %s gave up after %d reverted attempts (%s)",
                label,
                attempts,
                last_error,
            )
            result.status, result.error = PairStatus.RETRIES_EXHAUSTED, last_error

    return result


async def _process_isolated(ctx: RunContext, vault: Vault, network: str) -> PairResult:
    """Run one pair, turning any uncaught error into a failed result."""
    try:
        return await process_pair(ctx, vault, network)
    except Exception as e:
        logger.error("%s:%s (%s)", vault.name, network, describe(e))
        return PairResult(vault.name, network, PairStatus.UNEXPECTED_ERROR, error=describe(e))


async def _run_per_network(
    ctx: RunContext, pairs: list[tuple[Vault, str]]
) -> list[PairResult]:
    """One task per network; pairs within a network keep declaration order."""
    lanes: dict[str, list[tuple[int, Vault]]] = {}
    for index, (vault, network) in enumerate(pairs):
        lanes.setdefault(network, []).append((index, vault))

    async def _lane(
        network: str, items: list[tuple[int, Vault]]
    ) -> list[tuple[int, PairResult]]:
        return [
            (index, await _process_isolated(ctx, vault, network)) for index, vault in items
        ]

    done = await asyncio.gather(
        *(_lane(network, items) for network, items in lanes.items()),
        return_exceptions=True,
    )

    collected: list[tuple[int, PairResult]] = []
    for (network, items), lane_result in zip(lanes.items(), done):
        if isinstance(lane_result, BaseException):
            logger.error("network lane %s aborted (%s)", network, describe(lane_result))
            collected.extend(
                (
                    index,
                    PairResult(
                        vault.name,
                        network,
                        PairStatus.UNEXPECTED_ERROR,
                        error=describe(lane_result),
                    ),
                )
                for index, vault in items
            )
        else:
            collected.extend(lane_result)

    collected.sort(key=lambda item: item[0])
    return [result for _, result in collected]


async def run_deposits(ctx: RunContext) -> RunSummary:
    """Process every (vault, network) pair and emit the completion line.

    The completion line is logged at the configured level or INFO,
    whichever is higher, so it is shown at any verbosity.
    """
    pairs = [(vault, network) for vault in ctx.vaults for network in vault.networks]
    logger.info(
        "Processing %d vault/network pair(s) for %s (%s)",
        len(pairs),
        ctx.account.address,
        "concurrent networks" if ctx.settings.concurrent_networks else "sequential",
    )

    if ctx.settings.concurrent_networks:
        results = await _run_per_network(ctx, pairs)
    else:
        results = [await _process_isolated(ctx, vault, network) for vault, network in pairs]

    logger.log(max(logging.INFO, logger.getEffectiveLevel()), "ALL DONE!")
    return RunSummary(results=results)
