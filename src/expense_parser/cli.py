import sys
import typer
from pathlib import Path
from typing import List, Optional
from datetime import datetime

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from expense_parser.logging_setup import configure_logging
from expense_parser.readers.factory import ReaderFactory
from expense_parser.repositories.sqlite_mapping_repository import SQLiteMappingRepository
from expense_parser.database.connection import DatabaseConfig, DatabaseManager
from expense_parser.services.extraction_service import ExtractionService
from expense_parser.domain.enums import StatementType
from expense_parser.domain.models import Transaction
from expense_parser.repositories.base import DuplicateMappingError

app = typer.Typer(
    name="expense-parser",
    help="Turn bank SMS, bills and statements into expense records",
    add_completion=False,
)
billers_app = typer.Typer(help="Manage biller keyword -> category mappings")
app.add_typer(billers_app, name="billers")

console = Console()

class State:
    verbose: bool = False
    repository: Optional[SQLiteMappingRepository] = None
    service: Optional[ExtractionService] = None


state = State()

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
    db_path: Path = typer.Option(
        Path("data/billers.db"),
        "--db",
        help="Biller mapping database",
    ),
):
    """
    Expense Parser - extract expenses from messages, bills and statements.
    """
    configure_logging("DEBUG" if verbose else "WARNING")

    if state.service is None:
        ReaderFactory.load_readers_from_config()
        db_manager = DatabaseManager(DatabaseConfig(db_path))
        db_manager.initialize()
        repository = SQLiteMappingRepository(db_manager)
        if len(repository.snapshot()) == 0:
            repository.seed_defaults()
        state.repository = repository
        state.service = ExtractionService(repository)

    state.verbose = verbose


def _fail(e: Exception):
    console.print(f"[bold red]Error:[/bold red] {e}")
    if state.verbose:
        console.print_exception()
    raise typer.Exit(code=1)


def _transactions_table(title: str, transactions: List[Transaction]) -> Table:
    table = Table(title=title)
    table.add_column("Date", style="cyan")
    table.add_column("Merchant", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Amount", justify="right", style="red")

    for txn in transactions:
        table.add_row(
            str(txn.date),
            txn.merchant[:40],
            txn.category,
            f"{txn.currency.symbol}{txn.amount:,.2f}",
        )
    return table


@app.command(name="parse")
def parse_messages(
    text: Optional[str] = typer.Argument(
        None,
        help="Message text. Reads stdin when omitted or '-'",
    ),
):
    """
    Parse one or more bank messages, bills or payment screenshots.

    Messages are separated by blank lines or lines of dashes.

    Examples:
        expense-parser parse "Rs.1,250.00 debited from A/c XX1234 on 05-01-25 for SWIGGY order"
        pbpaste | expense-parser parse
    """
    try:
        if text is None or text == "-":
            text = sys.stdin.read()

        batch = state.service.parse_messages(text)

        if batch.parsed:
            console.print(_transactions_table("Parsed expenses", batch.parsed))

        for segment in batch.unparsed:
            console.print(Panel(
                segment,
                title="[yellow]No amount found - add manually[/yellow]",
                border_style="yellow"
            ))

        console.print(f"\n[bold]{batch}[/bold]")

    except Exception as e:
        _fail(e)


@app.command(name="add")
def add_expense(
    amount: str = typer.Argument(..., help="Amount spent"),
    category: Optional[str] = typer.Option(
        None, "--category", "-c",
        help="Category name or short id (food, emi, housing, ...)",
    ),
    merchant: Optional[str] = typer.Option(
        None, "--merchant", "-m",
        help="Merchant or biller name",
    ),
    on: Optional[datetime] = typer.Option(
        None, "--date", "-d",
        formats=["%Y-%m-%d", "%d/%m/%Y"],
        help="Date of the expense (default today)",
    ),
):
    """
    Record an expense from already known values, as a voice assistant would.

    Examples:
        expense-parser add 450 --category food
        expense-parser add 1200 --merchant uber --date 2025-01-05
    """
    try:
        txn = state.service.add_structured(
            amount,
            category=category,
            merchant=merchant,
            on=on.date() if on else None,
        )
        console.print(f"[bold green]✓[/bold green] {txn.currency.symbol}{txn.amount:,.2f} "
                      f"to {txn.category} ({txn.merchant}) on {txn.date}")

    except Exception as e:
        _fail(e)


@app.command(name="import")
def import_document(
    filepath: Path = typer.Argument(
        ...,
        help="Path to a statement (PDF, Excel, CSV or text)",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    statement_type: StatementType = typer.Option(
        StatementType.BANK,
        "--type", "-t",
        help="Kind of statement",
        case_sensitive=False,
    ),
):
    """
    Extract expenses from a bank or credit card statement.

    Examples:
        expense-parser import statement.pdf
        expense-parser import card.pdf --type credit-card
    """
    try:
        console.print(Panel.fit(
            f"[bold cyan]Import Configuration[/bold cyan]\n"
            f"File: {filepath}\n"
            f"Statement: {statement_type.value}\n"
            f"AI-assisted: {'ON' if state.service.settings.ai_enabled else 'OFF'}",
            border_style="cyan"
        ))

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Extracting transactions...", total=None)
            result = state.service.import_document(filepath, statement_type)
            progress.update(task, completed=True)

        if not result.success:
            console.print(Panel(
                f"[yellow]{result.reason or result.outcome.value}[/yellow]",
                title=result.outcome.value,
                border_style="yellow"
            ))
            return

        source = "AI-assisted" if result.parsed_by_ai else "heuristic - please review"
        console.print(_transactions_table(f"Extracted ({source})", result.transactions))

        category_table = Table(show_header=True, box=None, padding=(0, 2))
        category_table.add_column("Category", style="cyan", no_wrap=True)
        category_table.add_column("Amount", justify="right", style="red")
        for category, amount in result.totals_by_category.items():
            category_table.add_row(category, f"{amount:,.2f}")

        console.print(f"\n[bold]Spending by Category[/bold]")
        console.print(category_table)
        console.print(f"\n[bold green]✓ Extracted {len(result.transactions)} transactions[/bold green]")

    except Exception as e:
        _fail(e)


@billers_app.command(name="list")
def list_billers():
    """Show all biller keywords"""
    try:
        table = Table(title="Billers")
        table.add_column("Keyword", style="cyan")
        table.add_column("Category", style="magenta")

        for entry in sorted(state.repository.snapshot(), key=lambda e: e.keyword):
            table.add_row(entry.keyword, entry.category)

        console.print(table)

    except Exception as e:
        _fail(e)


@billers_app.command(name="add")
def add_biller(
    keyword: str = typer.Argument(..., help="Text that identifies the biller"),
    category: str = typer.Argument(..., help="Category to file it under"),
    overwrite: bool = typer.Option(
        False, "--overwrite",
        help="Change the category if the keyword exists",
    ),
):
    """
    Map a biller keyword to a category.

    Examples:
        expense-parser billers add "BLINKIT" Groceries
    """
    try:
        try:
            entry = state.repository.add(keyword, category)
        except DuplicateMappingError:
            if not overwrite:
                raise
            entry = state.repository.update(keyword, category)

        console.print(f"[bold green]✓[/bold green] {entry.keyword} → {entry.category}")

    except Exception as e:
        _fail(e)


@billers_app.command(name="remove")
def remove_biller(
    keyword: str = typer.Argument(..., help="Keyword to remove"),
):
    """Remove a biller keyword"""
    try:
        if state.repository.delete(keyword):
            console.print(f"[bold green]✓[/bold green] Removed {keyword.upper()}")
        else:
            console.print(f"[yellow]No biller named {keyword.upper()}[/yellow]")

    except Exception as e:
        _fail(e)


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
