"""Rich console table for the end-of-run summary."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from .orchestrator import (
    DepositSucceeded,
    PairResult,
    PairStatus,
    RunSummary,
)

STATUS_STYLES = {
    PairStatus.DEPOSITED: "green",
    PairStatus.DRY_RUN: "cyan",
    PairStatus.SKIPPED_DUST: "dim",
    PairStatus.RETRIES_EXHAUSTED: "yellow",
}


def _short(value: str | None) -> str:
    if not value:
        return "-"
    return f"{value[:10]}...{value[-6:]}" if len(value) > 20 else value


def _deposit_cell(result: PairResult) -> str:
    outcome = result.deposit
    if isinstance(outcome, DepositSucceeded):
        return f"{_short(outcome.tx_hash)} ({outcome.attempts}x)"
    if outcome is not None:
        return f"failed ({outcome.attempts}x)"
    return "-"


def build_summary_table(summary: RunSummary) -> Table:
    table = Table(title="Deposit run summary", show_lines=False)
    table.add_column("Vault")
    table.add_column("Network")
    table.add_column("Status")
    table.add_column("Balance", justify="right")
    table.add_column("Deposited", justify="right")
    table.add_column("Approval tx")
    table.add_column("Deposit tx")
    table.add_column("Error", overflow="fold")

    for r in summary.results:
        style = STATUS_STYLES.get(r.status, "red")
        table.add_row(
            r.vault,
            r.network,
            f"[{style}]{r.status.value}[/{style}]",
            "-" if r.balance is None else str(r.balance),
            "-" if r.amount is None else str(r.amount),
            _short(r.approval_tx),
            _deposit_cell(r),
            r.error or "",
        )
    return table


def print_summary(summary: RunSummary, console: Console | None = None) -> None:
    """Print the per-pair table followed by totals."""
    console = console or Console()
    console.print(build_summary_table(summary))
    console.print(
        f"{len(summary.with_status(PairStatus.DEPOSITED))} deposited, "
        f"{len(summary.with_status(PairStatus.SKIPPED_DUST))} skipped, "
        f"{len(summary.failed)} failed "
        f"of {len(summary.results)} pair(s)"
    )
