"""CLI entrypoint for the vault depositor."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated

import typer

from .account import prompt_account
from .chains import connect_networks
from .exceptions import DepositorError, describe
from .logger import setup_logging
from .orchestrator import RunContext, RunSummary, run_deposits
from .settings import CONFIG_ENV_VAR, DepositorSettings
from .state import AppState
from .summary import print_summary
from .vaults import load_vaults

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Deposit idle token balances into vaults across EVM networks.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("vault_depositor")


def execute(state: AppState) -> RunSummary:
    """Load vaults, connect, ask for the key and run a single pass.

    Raises:
        DepositorError: On any startup failure (nothing has been submitted)
    """
    settings = state.settings
    log = state.logger

    vaults = load_vaults(settings.vaults_file)
    connections = connect_networks(settings.networks, timeout=settings.request_timeout)

    referenced = {network for vault in vaults for network in vault.networks}
    missing = sorted(referenced - connections.keys())
    if missing:
        log.warning(
            "Vaults reference unconfigured network(s): %s; those pairs will be reported as errors",
            ", ".join(missing),
        )

    if settings.dry_run:
        log.info("Dry run: no approvals or deposits will be submitted")

    account = prompt_account()

    ctx = RunContext(
        settings=settings,
        account=account,
        connections=connections,
        vaults=vaults,
    )
    return asyncio.run(run_deposits(ctx))


@app.callback(invoke_without_command=True)
def deposit(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [vault_depositor] table).",
        ),
    ] = None,
    vaults_file: Annotated[
        Path | None,
        typer.Option("--vaults", "-v", help="Path to the vault list (JSON)."),
    ] = None,
    router_address: Annotated[
        str | None,
        typer.Option("--router", help="Router contract receiving approvals and deposits."),
    ] = None,
    dry_run: Annotated[
        bool | None,
        typer.Option(
            "--dry-run/--no-dry-run",
            help="Read balances and allowances but submit nothing.",
        ),
    ] = None,
    concurrent_networks: Annotated[
        bool | None,
        typer.Option(
            "--concurrent-networks/--sequential-networks",
            help="Process networks in parallel (pairs within a network stay ordered).",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help=(
                "Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL). "
                "Balance, approve and deposit lines need INFO or lower."
            ),
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config and exit.",
        ),
    ] = False,
):
    """Check balances, approve the router where needed and deposit.

    The private key is read from a hidden prompt once configuration,
    vaults and network connections have loaded.
    """
    if config_path:
        if not config_path.exists():
            raise typer.BadParameter(
                f"Config file not found: {config_path}", param_hint="--config"
            )
        os.environ[CONFIG_ENV_VAR] = str(config_path)

    init_kwargs: dict[str, Path | bool | str] = {}
    if vaults_file is not None:
        init_kwargs["vaults_file"] = vaults_file
    if router_address is not None:
        init_kwargs["router_address"] = router_address
    if dry_run is not None:
        init_kwargs["dry_run"] = dry_run
    if concurrent_networks is not None:
        init_kwargs["concurrent_networks"] = concurrent_networks
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    try:
        settings = DepositorSettings(**init_kwargs)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    setup_logging(settings.log_level)
    state = AppState(settings=settings, logger=_build_logger())

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    try:
        summary = execute(state)
    except DepositorError as e:
        state.logger.error("Startup failed: %s", describe(e))
        raise typer.Exit(code=1) from e

    print_summary(summary)


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
