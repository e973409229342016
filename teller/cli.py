"""
Command line entry points

``teller run`` opens accounts interactively and then loops over the banking
menu until Exit, which writes the account summary. ``teller serve`` exposes
the same ledger over HTTP.
"""

from typing import Callable, Optional
from decimal import Decimal

import typer
import uvicorn

from .api import create_app
from .config import TellerConfig, get_config
from .currency import format_amount, parse_amount, parse_balance
from .logging_config import setup_logging
from .reporting import HistoryStatus
from .system import AccountNotFoundError, BankingSystem

cli = typer.Typer(help="Interactive account ledger with per-account transaction logs.")

MENU = """
--- Banking Menu ---
1. Deposit
2. Withdraw
3. Check Balance
4. View Transaction History
5. Save Transaction History to File
6. Exit"""

DEPOSIT, WITHDRAW, CHECK_BALANCE, VIEW_HISTORY, EXPORT_HISTORY, EXIT = range(1, 7)


def _build_config(data_dir: Optional[str], narrative: Optional[str]) -> TellerConfig:
    config = get_config()
    updates = {}
    if data_dir:
        updates["data_dir"] = data_dir
    if narrative:
        updates["narrative_source"] = narrative
    if updates:
        config = config.model_copy(update=updates)
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    return config


def _prompt_decimal(label: str, parser: Callable[[str], Decimal]) -> Decimal:
    """Prompt until the operator enters an acceptable amount"""
    while True:
        raw = typer.prompt(label)
        try:
            return parser(raw)
        except ValueError as e:
            typer.echo(f"Invalid amount: {e}")


def _open_accounts(system: BankingSystem) -> None:
    count = typer.prompt("Enter number of users", type=int)
    for _ in range(max(count, 0)):
        while True:
            account_id = typer.prompt("\nEnter Account ID").strip()
            holder_name = typer.prompt("Enter Holder Name")
            balance = _prompt_decimal("Enter Initial Balance", parse_balance)
            try:
                account = system.open_account(account_id, holder_name, balance)
            except ValueError as e:
                typer.echo(str(e))
                continue
            if not account.info_recorded:
                typer.echo("Error writing account info; account is still usable.")
            break


def _transact(system: BankingSystem, account_id: str, choice: int) -> None:
    if choice == DEPOSIT:
        amount = _prompt_decimal("Enter deposit amount", parse_amount)
        outcome = system.deposit(account_id, amount)
    else:
        amount = _prompt_decimal("Enter withdrawal amount", parse_amount)
        outcome = system.withdraw(account_id, amount)

    if outcome is None:
        typer.echo("Interrupted while waiting for the transaction to finish.")
        return
    typer.echo(f"{outcome.actor}: {outcome.message}")
    if not outcome.logged:
        typer.echo(
            f"Error logging transaction: {outcome.log_error}; "
            "the balance change was applied."
        )


def _show_history(system: BankingSystem, account_id: str) -> None:
    try:
        history = system.reporting_engine.view_history(account_id)
    except OSError as e:
        typer.echo(f"Error reading transaction history: {e}")
        return

    if history.status == HistoryStatus.NO_LOG:
        typer.echo(history.message)
        return
    typer.echo(f"\n--- Transaction History for Account ID: {account_id} ---")
    if history.status == HistoryStatus.EMPTY:
        typer.echo(history.message)
    for line in history.lines:
        typer.echo(line)


def _export_history(system: BankingSystem, account_id: str) -> None:
    if not system.transaction_logger.exists(account_id):
        typer.echo(f"No transaction history found for account: {account_id}")
        return
    try:
        location = system.reporting_engine.export_history(account_id)
    except OSError as e:
        typer.echo(f"Error saving transaction history: {e}")
        return
    if location is None:
        typer.echo(f"No transaction history found for account: {account_id}")
        return
    typer.echo(f"Transaction history for account {account_id} saved to {location}")


def _shutdown(system: BankingSystem) -> None:
    typer.echo("Saving account summaries...")
    try:
        system.shutdown()
    except OSError as e:
        typer.echo(f"Error writing account summary: {e}")


def menu_loop(system: BankingSystem) -> None:
    """Repeat the banking menu until Exit"""
    while True:
        typer.echo(MENU)
        choice = typer.prompt("Choose an option", type=int)

        if choice == EXIT:
            _shutdown(system)
            typer.echo("Exiting program.")
            return

        account_id = typer.prompt("Enter Account ID").strip()
        try:
            account = system.get_account(account_id)
        except AccountNotFoundError:
            typer.echo("Account not found.")
            continue

        if choice in (DEPOSIT, WITHDRAW):
            _transact(system, account_id, choice)
        elif choice == CHECK_BALANCE:
            typer.echo(f"Account Holder: {account.holder_name}")
            typer.echo(f"Current Balance: {format_amount(account.get_balance())}")
        elif choice == VIEW_HISTORY:
            _show_history(system, account_id)
        elif choice == EXPORT_HISTORY:
            _export_history(system, account_id)
        else:
            typer.echo("Invalid option.")


@cli.command()
def run(
    data_dir: str = typer.Option(None, help="Directory for account records and logs."),
    narrative: str = typer.Option(
        None, help="Withdrawal log narrative source: 'result' or 'precheck'."
    ),
) -> None:
    """Open accounts and run the interactive banking menu."""
    system = BankingSystem(_build_config(data_dir, narrative))
    try:
        _open_accounts(system)
        menu_loop(system)
    except typer.Abort:
        if not system.is_shut_down:
            _shutdown(system)
        raise


@cli.command()
def serve(
    data_dir: str = typer.Option(None, help="Directory for account records and logs."),
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
) -> None:
    """Serve the ledger over HTTP."""
    config = _build_config(data_dir, None)
    system = BankingSystem(config)
    effective_host = host or config.api_host
    effective_port = port or config.api_port
    typer.echo(f"Starting Teller API on http://{effective_host}:{effective_port}")
    uvicorn.run(create_app(system), host=effective_host, port=effective_port)


if __name__ == "__main__":
    cli()
