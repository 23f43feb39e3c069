"""
CLI entry point for income statement extraction.

Runs the same batch pipeline as the web backend on local PDF files and
writes the CSV exports to disk. `serve` starts the web backend itself.
"""

import asyncio
from pathlib import Path

import click
from dotenv import load_dotenv

from finextract import __version__

# Load environment variables from .env file
load_dotenv()


@click.group()
@click.version_option(version=__version__)
def cli():
    """FinExtract - extract income statements from PDF financial reports."""
    pass


@cli.command()
@click.argument("pdfs", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(file_okay=False, path_type=Path), default="./output",
              help="Output directory for CSV exports")
@click.option("--model", "-m", default=None, help="Model to use (defaults to FINEXTRACT_MODEL)")
@click.option("--excel", is_flag=True, help="Also write an Excel workbook with all results")
@click.option("--quiet", "-q", is_flag=True, help="Do not print extracted tables")
def extract(pdfs, output, model, excel, quiet):
    """Extract income statements from one or more PDFS.

    Example: finextract extract reports/*.pdf -o ./output
    """
    from finextract.batch import ExtractionWorkspace, UploadedFile, estimate_message
    from finextract.config import Settings
    from finextract.generators.csv_export import (
        consolidated_csv_filename,
        to_long_csv,
        to_wide_csv,
        unique_filename,
        wide_csv_filename,
    )
    from finextract.generators.table import render_table
    from finextract.logger import setup_logger

    settings = Settings.from_env()
    if model:
        settings.model = model
    setup_logger(settings.log_level)

    workspace = ExtractionWorkspace(settings=settings)
    uploads = [UploadedFile(name=p.name, content_type=None, data=p.read_bytes()) for p in pdfs]

    click.echo(f"Extracting {len(uploads)} file(s) with {settings.model}...")
    click.echo(f"   {estimate_message(len(uploads))}")

    asyncio.run(workspace.process_files(uploads))

    click.echo("-" * 50)
    for state in workspace.queue:
        click.echo(f"   {state.name}: {state.status}")

    if workspace.error:
        click.echo(f"ERROR: {workspace.error}")
    if not workspace.results:
        raise click.exceptions.Exit(1)

    output.mkdir(parents=True, exist_ok=True)
    used_names: set[str] = set()

    for result in workspace.results:
        if not quiet:
            click.echo("")
            click.echo(render_table(result.data))
        csv_text = to_wide_csv(result.data)
        if not csv_text:
            click.echo(f"   No line items in {result.file_name}, skipping wide CSV")
            continue
        path = output / unique_filename(wide_csv_filename(result.data.company_name), used_names)
        path.write_text(csv_text, encoding="utf-8")
        click.echo(f"   Saved to {path}")

    consolidated_path = output / consolidated_csv_filename()
    consolidated_path.write_text(to_long_csv([r.data for r in workspace.results]), encoding="utf-8")
    click.echo(f"Consolidated CSV: {consolidated_path}")

    if excel:
        from finextract.generators.excel_export import generate_excel_workbook
        workbook_path = consolidated_path.with_suffix(".xlsx")
        workbook_path.write_bytes(generate_excel_workbook(workspace.results).getvalue())
        click.echo(f"Excel workbook: {workbook_path}")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", "-p", default=8000, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host, port, reload):
    """Run the web backend.

    Example: finextract serve --port 8000
    """
    import uvicorn

    uvicorn.run("finextract.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
