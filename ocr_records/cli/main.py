"""
Command-line interface for OCR Records.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.panel import Panel

from ocr_records import __version__

console = Console()


def _services():
    from ocr_records.observability.logging import setup_logging
    from ocr_records.services import Services

    setup_logging(log_format="console", log_level="WARNING")
    return Services.build()


def _record_panel(record) -> Panel:
    return Panel(
        record.extracted_text or "[dim](no text found)[/dim]",
        title=f"Record {record.id}",
        subtitle=f"{record.language} | {record.created_at:%Y-%m-%d %H:%M:%S} | {record.image_url}",
        expand=False
    )


@click.group()
@click.version_option(version=__version__)
def cli():
    """OCR Records - extract text from images and keep the results."""
    pass


@cli.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--language", "-l",
    default=None,
    help="OCR language code (default: eng)"
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the saved record as JSON"
)
def process(image_path: str, language: Optional[str], as_json: bool):
    """Process an image and save the result as a record."""
    from ocr_records.errors import OCRRecordsError

    services = _services()
    image_path = Path(image_path)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        task = progress.add_task("Extracting text...", total=None)
        try:
            record = services.pipeline.handle_upload(
                image_path.read_bytes(),
                image_path.name,
                language=language
            )
        except OCRRecordsError as e:
            progress.stop()
            console.print(f"[red]✗[/red] {e.message}")
            sys.exit(1)
        progress.update(task, description="Extracting text... ✓")

    if as_json:
        click.echo(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
    else:
        console.print(_record_panel(record))


@cli.command(name="list")
@click.option(
    "--search", "-s",
    default=None,
    help="Only records whose text contains this (case-insensitive)"
)
def list_records(search: Optional[str]):
    """List saved records, newest first."""
    services = _services()
    records = services.records.list_records(search)

    if not records:
        console.print("[yellow]No matching records found[/yellow]" if search else "[yellow]No records yet[/yellow]")
        return

    table = Table(title=f"Records ({len(records)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Created", style="green")
    table.add_column("Lang")
    table.add_column("Text")

    for record in records:
        preview = record.extracted_text.replace("\n", " ")
        if len(preview) > 60:
            preview = preview[:57] + "..."
        table.add_row(record.id, f"{record.created_at:%Y-%m-%d %H:%M}", record.language, preview)

    console.print(table)


@cli.command()
@click.argument("record_id")
def show(record_id: str):
    """Show one record."""
    from ocr_records.errors import RecordNotFoundError

    services = _services()
    try:
        record = services.records.get_record(record_id)
    except RecordNotFoundError:
        console.print(f"[red]✗[/red] Record {record_id} not found")
        sys.exit(1)

    console.print(_record_panel(record))


@cli.command()
@click.argument("record_id")
@click.confirmation_option(prompt="Delete this record and its image?")
def delete(record_id: str):
    """Delete a record and its stored image."""
    from ocr_records.errors import RecordNotFoundError

    services = _services()
    try:
        services.records.delete_record(record_id)
    except RecordNotFoundError:
        console.print(f"[red]✗[/red] Record {record_id} not found")
        sys.exit(1)

    console.print(f"[green]✓[/green] Record {record_id} deleted")


@cli.command()
@click.option(
    "--host", "-h",
    default="0.0.0.0",
    help="Host to bind to"
)
@click.option(
    "--port", "-p",
    default=5000,
    type=int,
    help="Port to bind to"
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload for development"
)
def serve(host: str, port: int, reload: bool):
    """Start the API server."""
    import uvicorn

    console.print(Panel(
        f"Starting OCR Records API\n"
        f"[cyan]URL:[/cyan] http://{host}:{port}\n"
        f"[cyan]Health:[/cyan] http://{host}:{port}/api/health\n"
        f"[cyan]Docs:[/cyan] http://{host}:{port}/docs",
        title="🚀 Server Starting"
    ))

    uvicorn.run(
        "ocr_records.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


@cli.command()
@click.option(
    "--port", "-p",
    default=8501,
    type=int,
    help="Port to bind to"
)
def ui(port: int):
    """Start the Streamlit frontend."""
    import subprocess

    console.print(Panel(
        f"Starting Streamlit UI\n"
        f"[cyan]URL:[/cyan] http://localhost:{port}",
        title="🎨 UI Starting"
    ))

    app_path = Path(__file__).resolve().parent.parent / "frontend" / "app.py"
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        str(app_path),
        "--server.port", str(port),
        "--server.address", "0.0.0.0"
    ])


if __name__ == "__main__":
    cli()
