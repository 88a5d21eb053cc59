"""
Command-line interface for Split Planner.
"""

import asyncio
import dataclasses
import functools
import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from split_planner import __version__
from split_planner.backends.pypdf_backend import PypdfCodec
from split_planner.config import Settings
from split_planner.exceptions import EmptyPlanError, SplitPlannerException
from split_planner.orchestrator import ProcessState
from split_planner.planner import is_empty_plan
from split_planner.session import SplitSession
from split_planner.types import ProcessStage, SplitMode
from split_planner.utils import format_file_size, parse_range_option, parse_rotation_option

console = Console()

_REFRESH_INTERVAL = 0.05


def _configure_logging(verbose):
    logger = logging.getLogger("split_planner")
    logger.handlers = [RichHandler(console=console, show_path=False, markup=False)]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _fail(message):
    console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(message))}")
    sys.exit(1)


def _split_options(func):
    """Options shared by every command that writes output documents."""

    @click.option(
        '--output-dir', '-o',
        default='./output',
        help='Output directory',
        type=click.Path()
    )
    @click.option(
        '--zip', 'zip_name',
        default=None,
        help='Pack all outputs into a single ZIP archive with this name',
        type=str
    )
    @click.option(
        '--rotate',
        multiple=True,
        help="Rotate a page before splitting, as PAGE:DEGREES (e.g. '3:90')",
        type=str
    )
    @click.option(
        '--password',
        default=None,
        help='Password for encrypted PDFs',
        type=str
    )
    @click.option(
        '--dry-run',
        is_flag=True,
        help='Show the planned outputs without writing anything'
    )
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def _open_session(input_pdf, password=None, api_key=None):
    settings = Settings.from_env()
    if api_key:
        settings = dataclasses.replace(settings, gemini_api_key=api_key)
    session = SplitSession(codec=PypdfCodec(password=password), settings=settings)
    session.load_document(Path(input_pdf).read_bytes(), name=os.path.basename(input_pdf))
    return session


def _apply_rotations(session, rotations):
    for value in rotations:
        page_number, degrees = parse_rotation_option(value)
        rotation = session.rotate_page(page_number - 1, degrees)
        console.print(f"[dim]Page {page_number} rotated to {rotation}°[/dim]")


def _print_document(session, input_pdf):
    info_table = Table(title="PDF Information", show_header=False)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")

    info_table.add_row("File", os.path.basename(input_pdf))
    info_table.add_row("Pages", str(session.page_count))
    info_table.add_row("Size", format_file_size(os.path.getsize(input_pdf)))
    info_table.add_row("Mode", session.mode.value)

    console.print(info_table)


def _print_plan(session, specs):
    if session.mode.uses_ranges:
        plan_table = Table(title="Ranges")
        plan_table.add_column("#", style="cyan", width=4)
        plan_table.add_column("Label", style="green")
        plan_table.add_column("Pages", style="magenta")
        for idx, item in enumerate(session.plan, 1):
            plan_table.add_row(str(idx), escape(item.label), f"{item.start}-{item.end}")
        console.print(plan_table)

    console.print(f"\n[bold]Planned outputs ({len(specs)}):[/bold]")
    for spec in specs:
        console.print(f"  • {spec.name} [dim]({spec.page_count} pages)[/dim]")


async def _split_with_progress(session):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    ) as progress:
        tasks = {}

        def refresh():
            for item in session.process_status:
                if item.name not in tasks:
                    tasks[item.name] = progress.add_task(item.name, total=100)
                completed = 100 if item.stage is ProcessStage.COMPLETED else item.progress
                progress.update(tasks[item.name], completed=completed)

        split = asyncio.ensure_future(session.start_split())
        while not split.done():
            refresh()
            await asyncio.sleep(_REFRESH_INTERVAL)
        refresh()
        return split.result()


def _write_outputs(session, output_dir, zip_name):
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    if zip_name:
        if not zip_name.lower().endswith('.zip'):
            zip_name = f"{zip_name}.zip"
        archive = output_path / zip_name
        archive.write_bytes(session.pack_results())
        return [archive]

    return [result.handle.save(output_path / result.name) for result in session.results]


def _print_results(session):
    results_table = Table(title="Split Results")
    results_table.add_column("File", style="green")
    results_table.add_column("Pages", style="cyan", justify="right")
    results_table.add_column("Size", style="magenta", justify="right")
    results_table.add_column("Share", style="yellow", justify="right")

    for entry in session.summarize_results():
        results_table.add_row(
            entry['name'],
            str(entry['page_count']),
            format_file_size(entry['byte_size']),
            f"{entry['share']:.1f}%",
        )

    console.print(results_table)


def _run_split(session, output_dir, zip_name, dry_run):
    specs = session.build_plan()
    if is_empty_plan(specs):
        raise EmptyPlanError(f"Nothing to split in '{session.mode.value}' mode.")
    _print_plan(session, specs)

    if dry_run:
        console.print("\n[bold yellow]⚠ Dry run, nothing written[/bold yellow]\n")
        return

    console.print(f"\n[bold cyan]Splitting into {len(specs)} file(s)...[/bold cyan]")
    state = asyncio.run(_split_with_progress(session))

    if state is not ProcessState.DONE:
        _fail(session.error or "Split failed")

    created_files = _write_outputs(session, output_dir, zip_name)

    console.print(f"\n[bold green]✓ Successfully created {len(session.results)} file(s)[/bold green]")
    console.print(f"[dim]Output directory: {os.path.abspath(output_dir)}[/dim]\n")
    _print_results(session)

    if zip_name:
        console.print(f"\n[bold]Archive:[/bold] {os.path.basename(created_files[0])}")
    console.print()


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """
    Split Planner CLI - Plan and split PDF files by ranges, chunks, page lists or AI suggestions.
    """
    _configure_logging(verbose)


@cli.command(name="info")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option('--password', default=None, help='Password for encrypted PDFs', type=str)
def show_info(input_pdf, password):
    """
    Display information about a PDF file.

    Example:

        split-planner info input.pdf
    """
    try:
        session = _open_session(input_pdf, password)

        table = Table(title=f"PDF Information: {os.path.basename(input_pdf)}")
        table.add_column("Property", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")

        table.add_row("File Path", os.path.abspath(input_pdf))
        table.add_row("File Size", format_file_size(os.path.getsize(input_pdf)))
        table.add_row("Number of Pages", str(session.page_count))

        console.print()
        console.print(table)
        console.print()

    except SplitPlannerException as e:
        _fail(e)
    except Exception as e:
        _fail(f"Unexpected error: {e}")


@cli.command(name="ranges")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--range', '-r', 'ranges',
    required=True,
    multiple=True,
    help="Page range with optional label (e.g. '1-5:Intro'); repeatable",
    type=str
)
@_split_options
def split_ranges(input_pdf, ranges, output_dir, zip_name, rotate, password, dry_run):
    """
    Split PDF into labeled page ranges.

    Examples:

        split-planner ranges input.pdf -r '1-5:Intro' -r '6-10'

        split-planner ranges input.pdf -r '1-3' -r '4-9:Body' --rotate 2:90 --zip parts
    """
    try:
        session = _open_session(input_pdf, password)
        _print_document(session, input_pdf)

        for item in session.plan:
            session.remove_range(item.id)
        for value in ranges:
            start, end, label = parse_range_option(value)
            session.add_range(start, end, label)

        _apply_rotations(session, rotate)
        _run_split(session, output_dir, zip_name, dry_run)

    except SplitPlannerException as e:
        _fail(e)
    except Exception as e:
        _fail(f"Unexpected error: {e}")


@cli.command(name="chunks")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--size', '-s',
    required=True,
    help='Number of pages per chunk',
    type=int
)
@_split_options
def split_chunks(input_pdf, size, output_dir, zip_name, rotate, password, dry_run):
    """
    Split PDF into chunks of N pages.

    Examples:

        split-planner chunks input.pdf -s 5

        split-planner chunks input.pdf --size 10 -o chunks --zip chunks
    """
    try:
        session = _open_session(input_pdf, password)
        session.set_mode(SplitMode.FIXED)
        session.set_fixed_chunk_size(size)
        _print_document(session, input_pdf)

        _apply_rotations(session, rotate)
        _run_split(session, output_dir, zip_name, dry_run)

    except SplitPlannerException as e:
        _fail(e)
    except Exception as e:
        _fail(f"Unexpected error: {e}")


@cli.command(name="extract")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--pages', '-p',
    required=True,
    help="Pages to extract (e.g., '1, 3, 5-8')",
    type=str
)
@_split_options
def extract(input_pdf, pages, output_dir, zip_name, rotate, password, dry_run):
    """
    Extract specific pages into a single new PDF.

    Unknown or out of range entries are ignored.

    Examples:

        split-planner extract input.pdf -p '1,3,5'

        split-planner extract input.pdf --pages '1-5, 10, 15-20' -o selected
    """
    try:
        session = _open_session(input_pdf, password)
        session.set_mode(SplitMode.EXTRACT)
        session.set_extract_expression(pages)
        _print_document(session, input_pdf)

        _apply_rotations(session, rotate)
        _run_split(session, output_dir, zip_name, dry_run)

    except SplitPlannerException as e:
        _fail(e)
    except Exception as e:
        _fail(f"Unexpected error: {e}")


@cli.command(name="suggest")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--prompt',
    required=True,
    help="How the document should be split (e.g. 'Split into chapters')",
    type=str
)
@click.option(
    '--api-key',
    default=None,
    help='Gemini API key (defaults to GEMINI_API_KEY)',
    type=str
)
@_split_options
def suggest(input_pdf, prompt, api_key, output_dir, zip_name, rotate, password, dry_run):
    """
    Ask Gemini for ranges, then split by them.

    Examples:

        split-planner suggest report.pdf --prompt 'One file per chapter'

        split-planner suggest report.pdf --prompt 'Split intro from appendix' --dry-run
    """
    try:
        session = _open_session(input_pdf, password, api_key)
        session.set_mode(SplitMode.AI_SMART)
        _print_document(session, input_pdf)

        with console.status("[bold cyan]Requesting suggestions...[/bold cyan]"):
            suggested = asyncio.run(session.request_suggestions(prompt))
        console.print(f"[bold green]✓ Received {len(suggested)} suggested range(s)[/bold green]")

        _apply_rotations(session, rotate)
        _run_split(session, output_dir, zip_name, dry_run)

    except SplitPlannerException as e:
        _fail(e)
    except Exception as e:
        _fail(f"Unexpected error: {e}")


if __name__ == '__main__':
    cli()
