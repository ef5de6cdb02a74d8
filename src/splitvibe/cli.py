"""CLI for SplitVibe using Typer."""

import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import SplitVibeError
from .ledger_file import load_ledger
from .models import ExpenseRequest, GroupBalances, Participant, SplitMode
from .service import LedgerService
from .splitter import split_expense

app = typer.Typer(
    name="splitvibe",
    help="Split shared expenses and work out who owes whom",
)

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def format_money(amount: Decimal, use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: ($85.02)
    Positive amounts have spaces:      $85.02

    The padding matches the width of the parentheses, so in a right-justified
    column positive and negative amounts line up on the decimal point.
    """
    abs_amount = abs(amount)
    if amount < 0:
        if use_color:
            return f"($[red]{abs_amount:,.2f}[/red])"
        return f"(${abs_amount:,.2f})"
    if use_color:
        return f" [green]${abs_amount:,.2f}[/green] "
    return f" ${abs_amount:,.2f} "


def parse_pairs(values: list[str], option: str) -> dict[str, str]:
    """Parse repeated ``ID=VALUE`` options into a mapping."""
    pairs = {}
    for value in values:
        user_id, sep, raw = value.partition("=")
        if not sep or not user_id or not raw:
            raise typer.BadParameter(
                f"expected ID=VALUE, got {value!r}", param_hint=option
            )
        pairs[user_id.strip()] = raw.strip()
    return pairs


def parse_decimal(raw: str, option: str) -> Decimal:
    """Parse a decimal option value."""
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise typer.BadParameter(f"not a number: {raw!r}", param_hint=option) from e
    if not value.is_finite():
        raise typer.BadParameter(f"not a number: {raw!r}", param_hint=option)
    return value


def parse_int(raw: str, option: str) -> int:
    """Parse a whole-number option value."""
    try:
        return int(raw)
    except ValueError as e:
        raise typer.BadParameter(
            f"not a whole number: {raw!r}", param_hint=option
        ) from e


def _names(members: list[Participant]) -> dict[str, str]:
    return {member.id: member.display_name for member in members}


def _resolve_ledger_path(ledger: Path | None, settings: Settings) -> Path:
    return ledger if ledger is not None else settings.ledger_path


@app.command()
def split(
    amount: str = typer.Argument(..., help="Expense total, e.g. 90.00"),
    paid_by: str = typer.Option(..., "--paid-by", "-p", help="Id of the payer"),
    among: list[str] = typer.Option(
        ..., "--among", "-a", help="Participant id (repeat for each participant)"
    ),
    mode: SplitMode = typer.Option(
        SplitMode.EQUAL, "--mode", "-m", case_sensitive=False, help="Split policy"
    ),
    percent: list[str] = typer.Option(
        [], "--percent", help="ID=PERCENT for PERCENTAGE mode (repeatable)"
    ),
    share: list[str] = typer.Option(
        [], "--share", help="ID=WEIGHT for SHARES mode (repeatable)"
    ),
    title: str = typer.Option("Expense", "--title", "-t", help="Expense title"),
    ledger: Path = typer.Option(
        None,
        "--ledger",
        "-l",
        help="Ledger snapshot supplying member names (members default to bare ids)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Compute how an expense splits among participants.

    Nothing is stored; the split is printed as a table.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()

        total = parse_decimal(amount, "AMOUNT")

        percentages = None
        shares = None
        if mode is SplitMode.PERCENTAGE:
            percentages = {
                uid: parse_decimal(raw, "--percent")
                for uid, raw in parse_pairs(percent, "--percent").items()
            }
        elif mode is SplitMode.SHARES:
            shares = {
                uid: parse_int(raw, "--share")
                for uid, raw in parse_pairs(share, "--share").items()
            }

        if ledger is not None:
            members = load_ledger(ledger).members
        else:
            ids = dict.fromkeys([paid_by, *among])
            members = [Participant(id=uid) for uid in ids]

        request = ExpenseRequest(
            title=title,
            amount=total,
            paid_by=paid_by,
            split_among=among,
            split_mode=mode,
            percentages=percentages,
            shares=shares,
        )
        lines = split_expense(
            request, members, tolerance=settings.percentage_tolerance
        )

        names = _names(members)
        table = Table(title=f"{title}: {total:,.2f} {settings.currency}")
        table.add_column("Participant", style="cyan")
        table.add_column("Amount", justify="right")
        for line in lines:
            marker = " (paid)" if line.user_id == paid_by else ""
            table.add_row(
                f"{names.get(line.user_id, line.user_id)}{marker}",
                format_money(line.amount),
            )

        console.print(table)

    except (SplitVibeError, ValueError) as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)


def display_balances(report: GroupBalances, names: dict[str, str]):
    """Display balances and suggested transfers in tables."""
    if not report.balances:
        console.print("[yellow]No expenses or settlements yet.[/yellow]")
        return

    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("Member", style="cyan")
    table.add_column("Net", justify="right")
    for entry in report.balances:
        table.add_row(names.get(entry.user_id, entry.user_id), format_money(entry.amount))
    console.print(table)

    if not report.simplified_debts:
        console.print("[green]✓ Everyone is settled up[/green]")
        return

    transfers = Table(
        title="Suggested Transfers", show_header=True, header_style="bold magenta"
    )
    transfers.add_column("From", style="cyan")
    transfers.add_column("To", style="cyan")
    transfers.add_column("Amount", justify="right")
    for debt in report.simplified_debts:
        transfers.add_row(
            names.get(debt.from_user_id, debt.from_user_id),
            names.get(debt.to_user_id, debt.to_user_id),
            format_money(debt.amount),
        )
    console.print(transfers)


@app.command()
def balances(
    ledger: Path = typer.Option(
        None, "--ledger", "-l", help="Ledger snapshot (default: SPLITVIBE_LEDGER_PATH)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Show net balances and the transfers that settle them.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        snapshot = load_ledger(_resolve_ledger_path(ledger, settings))

        service = LedgerService(settings)
        report = service.group_balances(snapshot.expenses, snapshot.settlements)

        if as_json:
            typer.echo(report.model_dump_json(by_alias=True, indent=2))
            return

        display_balances(report, _names(snapshot.members))

    except SplitVibeError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)


@app.command()
def settlements(
    ledger: Path = typer.Option(
        None, "--ledger", "-l", help="Ledger snapshot (default: SPLITVIBE_LEDGER_PATH)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    List active settlements and whether each can still be deleted.
    """
    setup_logging(verbose)

    try:
        settings = load_settings()
        snapshot = load_ledger(_resolve_ledger_path(ledger, settings))
        service = LedgerService(settings)
        names = _names(snapshot.members)

        active = [s for s in snapshot.settlements if not s.is_deleted]
        if not active:
            console.print("[yellow]No settlements found.[/yellow]")
            return

        table = Table(title="Settlements", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("From", style="cyan")
        table.add_column("To", style="cyan")
        table.add_column("Amount", justify="right")
        table.add_column("Deletable", justify="center")

        for settlement in active:
            deletable = service.can_delete_settlement(settlement)
            table.add_row(
                settlement.id or "—",
                names.get(settlement.payer_id, settlement.payer_id),
                names.get(settlement.payee_id, settlement.payee_id),
                format_money(settlement.amount),
                "[green]yes[/green]" if deletable else "[dim]no[/dim]",
            )

        console.print(table)
        console.print(
            f"\n[dim]Settlements can be deleted within "
            f"{settings.settlement_deletion_window_hours} hours of creation.[/dim]"
        )

    except SplitVibeError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    app()
