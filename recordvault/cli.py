"""
Command-line interface for RecordVault.
"""
import logging
import sys
from typing import List, Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from recordvault import __version__
from recordvault.errors import ValidationError, VaultError
from recordvault.record import Record
from recordvault.vault import open_vault


logger = logging.getLogger(__name__)

# Rich console for pretty output
console = Console()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _fail(message: str, error: Optional[Exception] = None) -> None:
    console.print(f"[red]✗[/red] {message}", style="red")
    if error is not None:
        logger.error(message, exc_info=True)
    sys.exit(1)


def _records_table(title: str, records: List[Record], show_value: bool = True) -> Table:
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("ID", style="dim", width=8)
    table.add_column("Name", style="white", width=30)
    if show_value:
        table.add_column("Value", style="magenta", width=40)
    table.add_column("Created", style="dim", width=12)

    for index, record in enumerate(records, start=1):
        row = [str(index), str(record.id), record.name]
        if show_value:
            row.append(record.value)
        row.append(record.created.date().isoformat())
        table.add_row(*row)
    return table


def _record_panel(title: str, record: Record) -> Panel:
    content = f"""
[cyan]ID:[/cyan] {record.id}
[cyan]Name:[/cyan] {record.name}
[cyan]Value:[/cyan] {record.value}
[cyan]Created:[/cyan] {record.created_at}
[cyan]Updated:[/cyan] {record.updated_at}
    """
    return Panel(content.strip(), title=title, border_style="cyan", box=box.ROUNDED)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity",
)
def cli(log_level: str):
    """
    RecordVault - Personal Record Keeping

    Stores named records locally, backs up every change and mirrors to
    MongoDB when it is available.
    """
    logging.basicConfig(level=getattr(logging, log_level.upper()), format=LOG_FORMAT)


@cli.command()
@click.argument("name")
@click.argument("value")
def add(name: str, value: str):
    """Add a new record."""
    try:
        with open_vault() as vault:
            record = vault.add(name, value)
        console.print(f"[green]✓[/green] Record added: {record.id} ({record.name})")
    except ValidationError as e:
        _fail(f"Invalid {e.field}: {e.message}")
    except VaultError as e:
        _fail(f"Error adding record: {e}", e)


@cli.command(name="list")
def list_records():
    """List all records."""
    try:
        with open_vault() as vault:
            records = vault.list()

        if not records:
            console.print("[yellow]No records stored yet[/yellow]")
            return

        console.print(_records_table(f"Records ({len(records)})", records))
    except VaultError as e:
        _fail(f"Error listing records: {e}", e)


@cli.command()
@click.argument("record_id", type=int)
def get(record_id: int):
    """Show a single record."""
    try:
        with open_vault() as vault:
            record = vault.get(record_id)
    except VaultError as e:
        _fail(f"Error reading record: {e}", e)
        return

    if record is None:
        _fail(f"Record not found: {record_id}")
    console.print(_record_panel("Record Details", record))


@cli.command()
@click.argument("record_id", type=int)
@click.argument("name")
@click.argument("value")
def update(record_id: int, name: str, value: str):
    """Update a record's name and value."""
    try:
        with open_vault() as vault:
            record = vault.update(record_id, name, value)
    except ValidationError as e:
        _fail(f"Invalid {e.field}: {e.message}")
        return
    except VaultError as e:
        _fail(f"Error updating record: {e}", e)
        return

    if record is None:
        _fail(f"Record not found: {record_id}")
    console.print(f"[green]✓[/green] Record updated: {record.id} ({record.name})")


@cli.command()
@click.argument("record_id", type=int)
@click.confirmation_option(prompt="Are you sure you want to delete this record?")
def delete(record_id: int):
    """Delete a record by ID."""
    try:
        with open_vault() as vault:
            record = vault.delete(record_id)
    except VaultError as e:
        _fail(f"Error deleting record: {e}", e)
        return

    if record is None:
        _fail(f"Record not found: {record_id}")
    console.print(f"[green]✓[/green] Record deleted: {record.id} ({record.name})")


@cli.command()
@click.argument("keyword")
def search(keyword: str):
    """Search records by name or ID."""
    try:
        with open_vault() as vault:
            matches = vault.search(keyword)

        if not matches:
            console.print(f"[yellow]No records found for: '{keyword}'[/yellow]")
            return

        console.print(_records_table(f"Found {len(matches)} matching records", matches))
    except VaultError as e:
        _fail(f"Error searching records: {e}", e)


@cli.command(name="sort")
@click.option("--field", "-f", default="name", help="Sort by 'name' or 'date'")
@click.option("--order", "-o", default="asc", help="'asc' or 'desc'")
def sort_records(field: str, order: str):
    """Show records sorted by name or creation date."""
    try:
        with open_vault() as vault:
            records = vault.sort(field, order)

        if not records:
            console.print("[yellow]No records stored yet[/yellow]")
            return

        console.print(_records_table("Sorted Records", records, show_value=False))
    except VaultError as e:
        _fail(f"Error sorting records: {e}", e)


@cli.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Export file (default: export.txt in the vault root)")
def export(output: Optional[str]):
    """Export all records to a text file."""
    try:
        with open_vault() as vault:
            path = vault.export(output)
        console.print(f"[green]✓[/green] Data exported successfully to {path}")
    except (VaultError, OSError) as e:
        _fail(f"Error exporting records: {e}", e)


@cli.command()
def stats():
    """Show vault statistics."""
    try:
        with open_vault() as vault:
            summary = vault.statistics()
    except VaultError as e:
        _fail(f"Error getting stats: {e}", e)
        return

    if summary is None:
        console.print("[yellow]No records available for statistics.[/yellow]")
        return

    longest = summary.longest_name
    stats_text = f"""
[cyan]Total Records:[/cyan] {summary.total}
[cyan]Last Modified:[/cyan] {summary.last_modified.updated.strftime('%Y-%m-%d %H:%M:%S')} ({summary.last_modified.name})
[cyan]Longest Name:[/cyan] {longest.name} ({len(longest.name)} characters)
[cyan]Earliest Record:[/cyan] {summary.earliest.created.date().isoformat()}
[cyan]Latest Record:[/cyan] {summary.latest.created.date().isoformat()}
    """

    panel = Panel(
        stats_text.strip(),
        title="📊 Vault Statistics",
        border_style="cyan",
        box=box.DOUBLE
    )
    console.print(panel)


@cli.command()
def backups():
    """List backup snapshots."""
    try:
        with open_vault() as vault:
            snapshots = vault.backups.list_snapshots() if vault.backups else []
    except VaultError as e:
        _fail(f"Error listing backups: {e}", e)
        return

    if not snapshots:
        console.print("[yellow]No backups yet[/yellow]")
        return

    table = Table(title=f"Backups ({len(snapshots)})", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("File", style="white")
    table.add_column("Size", style="dim", justify="right")
    for path in snapshots:
        table.add_row(path.name, f"{path.stat().st_size} B")
    console.print(table)


if __name__ == "__main__":
    cli()
