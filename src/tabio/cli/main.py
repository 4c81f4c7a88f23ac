"""Main CLI entry point for tabio."""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tabio.config import get_config
from tabio.core.exceptions import TabioError
from tabio.core.logging import configure_logging
from tabio.dependencies import FORMAT_DEPENDENCIES, install_formats, missing_formats
from tabio.io.convert import convert as convert_file
from tabio.io.extensions import FORMATS, get_info
from tabio.io.importer import import_file
from tabio.io.metadata import get_column_metadata
from tabio.io.registry import get_registry
from tabio.io.sources import is_url
from tabio.models.enums import Direction

app = typer.Typer(
    name="tabio",
    help="Import, export and convert tabular data files",
    pretty_exceptions_enable=False,
)

console = Console()

# Column rows shown by `info` before truncating
MAX_INFO_COLUMNS = 50


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """Setup logging before running any command."""
    config = get_config()
    configure_logging(
        level=(log_level or config.logging.level).upper(),
        log_file=str(log_file) if log_file else config.logging.file,
        serialize=config.logging.format == "json",
        force=True,
    )


@app.command()
def convert(
    in_file: str = typer.Argument(..., help="Input file, URL or 'clipboard'"),
    out_file: str = typer.Argument(..., help="Output file or 'clipboard'"),
    in_format: Optional[str] = typer.Option(None, "--in-format", "-i", help="Input format (default: from extension)"),
    out_format: Optional[str] = typer.Option(None, "--out-format", "-o", help="Output format (default: from extension)"),
):
    """Convert a file from one format to another."""
    try:
        written = convert_file(in_file, out_file, in_format, out_format)
    except TabioError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    console.print(str(written))


@app.command()
def info(
    file: str = typer.Argument(..., help="File, URL or 'clipboard'"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Format (default: from extension)"),
    member: Optional[str] = typer.Option(None, "--member", "-m", help="Member to read inside a zip/tar archive"),
):
    """Show the format, shape and columns of a file."""
    try:
        # Links without an extension are only resolved after download
        format_info = None if is_url(file) else get_info(file, format)
        if format_info is not None and format_info.known_elsewhere:
            console.print(f"[yellow]'{file}' is a {format_info.format} file, not supported by tabio.[/yellow]")
            console.print(f"Try {format_info.known_elsewhere}.")
            raise typer.Exit(1)

        df = import_file(file, format, member=member)
    except TabioError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    meta = df.attrs.get("tabio", {})
    console.print(f"\n[bold cyan]{file}[/bold cyan]")
    console.print(f"  Format: {meta.get('format')}")
    if format_info is not None and format_info.compression:
        console.print(f"  Compression: {format_info.compression}")
    console.print(f"  Rows: {len(df):,}")
    console.print(f"  Columns: {len(df.columns):,}")

    columns = get_column_metadata(df)
    table = Table(title="Columns")
    table.add_column("Column", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Label", style="yellow")
    table.add_column("Value labels", justify="right")

    for name in list(df.columns)[:MAX_INFO_COLUMNS]:
        column_meta = columns.get(name)
        table.add_row(
            str(name),
            str(df[name].dtype),
            (column_meta.label if column_meta else None) or "",
            str(len(column_meta.value_labels)) if column_meta and column_meta.value_labels else "",
        )

    if len(df.columns) > MAX_INFO_COLUMNS:
        table.add_row(
            f"[dim]... ({len(df.columns) - MAX_INFO_COLUMNS} more columns)[/dim]",
            "[dim]...[/dim]",
            "",
            "",
        )

    console.print(table)


@app.command()
def formats():
    """List supported formats and whether their libraries are installed."""
    registry = get_registry()
    missing = missing_formats()

    table = Table(title="Formats")
    table.add_column("Format", style="cyan")
    table.add_column("Aliases")
    table.add_column("Import", justify="center")
    table.add_column("Export", justify="center")
    table.add_column("Library", style="green")
    table.add_column("Installed", justify="center")

    for tag in registry.tags():
        aliases = ", ".join(repr(a) if not a.isalnum() else a for a in FORMATS.get(tag, ()))
        table.add_row(
            tag,
            aliases,
            "✓" if registry.supports(tag, Direction.IMPORT) else "",
            "✓" if registry.supports(tag, Direction.EXPORT) else "",
            registry.library(tag) or "",
            "[red]no[/red]" if tag in missing else "yes",
        )

    console.print(table)
    if missing:
        console.print("\n[dim]Run 'tabio install-formats' to install the missing libraries.[/dim]")


@app.command("install-formats")
def install_formats_command(
    formats: Optional[List[str]] = typer.Argument(None, help="Formats to cover (default: all)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only show what would be installed"),
):
    """Install the libraries needed by optional formats."""
    unknown = [f for f in formats or [] if f not in FORMAT_DEPENDENCIES]
    if unknown:
        console.print(f"[yellow]No optional libraries for: {', '.join(unknown)}[/yellow]")

    try:
        packages = install_formats(list(formats) if formats else None, dry_run=dry_run)
    except TabioError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    if not packages:
        console.print("[green]All format libraries are installed.[/green]")
    elif dry_run:
        console.print(f"Would install: {' '.join(packages)}")
    else:
        console.print(f"[green]Installed:[/green] {' '.join(packages)}")


def main():
    """Main entry point."""
    # If no arguments provided (just 'tabio'), show help
    if len(sys.argv) == 1:
        sys.argv.append("--help")

    app()


if __name__ == "__main__":
    main()
