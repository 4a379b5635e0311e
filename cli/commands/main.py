"""Main CLI interface using Typer."""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from medtrans import __version__
from medtrans.core.exceptions import ConfigurationError, ExtractionFailed
from medtrans.core.models import TableSelector
from medtrans.core.pipeline import TranslationPipeline
from medtrans.core.workflow import translate_pdf
from medtrans.terminology.store import TerminologyStore
from medtrans.utils.config_loader import load_pipeline_config
from medtrans.utils.logger import setup_logger
from medtrans.utils.progress import ProgressReporter

app = typer.Typer(
    name="medtrans",
    help="MedTrans: offline English to Arabic medical document translation",
    add_completion=False
)

console = Console()


def _load_config(config_file: Optional[Path], **overrides):
    try:
        return load_pipeline_config(config_file, **overrides)
    except (ConfigurationError, FileNotFoundError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def translate(
    input_file: Path = typer.Argument(..., help="Input PDF file (English)"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output PDF path"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
    workers: Optional[int] = typer.Option(None, "-w", "--workers", help="Pages translated in parallel"),
    glossary: Optional[bool] = typer.Option(None, "--glossary/--no-glossary", help="Append a glossary page"),
    medical_dict: Optional[Path] = typer.Option(None, "--medical-dict", help="Medical dictionary JSON"),
    general_dict: Optional[Path] = typer.Option(None, "--general-dict", help="General dictionary file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
):
    """Translate a PDF into a bilingual English/Arabic PDF."""

    if not input_file.exists():
        console.print(f"[red]Error: Input file not found: {input_file}[/red]")
        raise typer.Exit(1)

    config = _load_config(
        config_file,
        max_workers=workers,
        enable_glossary=glossary,
        medical_dictionary_path=str(medical_dict) if medical_dict else None,
        general_dictionary_path=str(general_dict) if general_dict else None,
        log_level=log_level,
    )
    setup_logger(config.log_level, config.log_file)

    if output is None:
        output = input_file.with_name(f"{input_file.stem}_arabic.pdf")

    console.print("[bold blue]MedTrans Translation[/bold blue]")
    console.print(f"Input: {input_file}")
    console.print(f"Output: {output}")
    console.print(f"Workers: {config.max_workers}\n")

    try:
        with ProgressReporter(description="Translating", console=console) as progress:
            result = translate_pdf(input_file, output, config, progress_callback=progress.as_callback())
    except ExtractionFailed as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Translation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Pages", str(len(result.results)))
    table.add_row("Fallback pages", ", ".join(str(i + 1) for i in result.fallback_pages) or "none")
    table.add_row("Output pages", str(result.plan.page_count))
    table.add_row("Glossary", "yes" if result.plan.has_glossary else "no")
    table.add_row("Render failures", str(len(result.render_report.failures)))
    table.add_row("Time", f"{result.duration:.1f}s")
    console.print(table)

    if result.success:
        console.print("\n[bold green]Translation Complete![/bold green]")
    else:
        console.print("\n[bold yellow]Translation finished with degraded pages[/bold yellow]")
    console.print(f"Output: {output}")


@app.command()
def text(
    content: str = typer.Argument(..., help="English text to translate"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
):
    """Translate a piece of text and print the Arabic result."""
    config = _load_config(config_file)
    setup_logger("WARNING")

    pipeline = TranslationPipeline(config)
    result = pipeline.translate_page(0, content)
    console.print(result.text)
    if result.used_fallback:
        console.print(f"[yellow]Word-for-word fallback used: {result.error}[/yellow]")


@app.command()
def lookup(
    words: List[str] = typer.Argument(..., help="Words to look up"),
    medical_dict: Optional[Path] = typer.Option(None, "--medical-dict", help="Medical dictionary JSON"),
    general_dict: Optional[Path] = typer.Option(None, "--general-dict", help="General dictionary file"),
):
    """Look up words in the medical and general dictionaries."""
    setup_logger("WARNING")
    store = TerminologyStore.load(medical_dict, general_dict)

    table = Table()
    table.add_column("Word", style="cyan")
    table.add_column("Arabic", style="green")
    table.add_column("Table")
    table.add_column("Category", style="dim")

    for word in words:
        match = store.lookup_prioritized(word)
        if match is None:
            table.add_row(word, "[red]not found[/red]", "", "")
        else:
            table.add_row(word, match.translation, match.table.value, match.entry.category or "")
    console.print(table)


@app.command()
def stats(
    medical_dict: Optional[Path] = typer.Option(None, "--medical-dict", help="Medical dictionary JSON"),
    general_dict: Optional[Path] = typer.Option(None, "--general-dict", help="General dictionary file"),
    export: Optional[Path] = typer.Option(None, "--export", help="Write the medical table to this JSON file"),
):
    """Show dictionary and rule statistics."""
    setup_logger("WARNING")
    store = TerminologyStore.load(medical_dict, general_dict)
    pipeline = TranslationPipeline(store=store)
    statistics = pipeline.get_statistics()

    console.print(f"\n[bold]MedTrans {__version__}[/bold]\n")
    table = Table(title="Dictionaries and Rules")
    table.add_column("Component", style="cyan")
    table.add_column("Count", style="green")
    for key, value in store.get_statistics().items():
        table.add_row(key.replace("_", " "), str(value))
    for key, value in statistics["engine"].items():
        table.add_row(f"engine: {key.replace('_', ' ')}", str(value))
    for key, value in statistics["grammar"].items():
        table.add_row(f"grammar: {key.replace('_', ' ')}", str(value))
    console.print(table)

    if store.is_degraded:
        console.print("[yellow]Dictionary loading degraded:[/yellow]")
        for error in store.load_errors:
            console.print(f"  • {error.message}")

    if export:
        store.export_to_file(export, TableSelector.DOMAIN)
        console.print(f"[green]✓ Exported medical terms to {export}[/green]")


def cli():
    """Main CLI entry point."""
    if len(sys.argv) == 1:
        console.print(f"[bold blue]MedTrans {__version__}[/bold blue]")
        console.print("[dim]Type 'medtrans --help' for usage information[/dim]\n")
        return

    app()


if __name__ == "__main__":
    cli()
