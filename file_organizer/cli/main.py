# file_organizer/cli/main.py

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from file_organizer.core.errors import OrganizerError
from file_organizer.core.organizer import Config, Organizer, RunStats
from file_organizer.utils.logger import setup_logging

__version__ = "1.0.0"

# Progress and summary go to stdout, diagnostics to stderr.
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def print_summary(stats: RunStats, dry_run: bool = False):
    """Renders the end-of-run counters as a rich table."""
    table = Table(title="📊 Execution Summary", show_header=False, title_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="bold")

    moved_label = "📝 Files To Move" if dry_run else "✅ Files Moved"
    table.add_row("⏱️  Duration", f"{stats.duration.total_seconds():.3f}s")
    table.add_row(moved_label, str(stats.moved))
    table.add_row("⏭️  Skipped", str(stats.skipped))
    table.add_row("❌ Failed", f"[red]{stats.failed}[/red]" if stats.failed else "0")
    table.add_row("💾 Total Size", f"{stats.total_bytes / (1024 * 1024):.2f} MB")
    console.print(table)


@click.command(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(version=__version__, prog_name="File Organizer")
@click.argument('directory', required=False, type=click.Path(path_type=Path))
@click.option('-d', '--dir', 'dir_option', type=click.Path(path_type=Path), default='.', show_default=True,
              help="Directory to organize. A positional DIRECTORY takes precedence.")
@click.option('--dry-run', is_flag=True, help="Preview mode: show actions without executing them.")
@click.option('-v', '--verbose', is_flag=True, help="Enable verbose logging.")
@click.option('--log-file', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the detailed log here instead of the per-user app directory.")
def organize(directory: Path | None, dir_option: Path, dry_run: bool, verbose: bool, log_file: Path | None):
    """
    🗂️ Sorts the files in DIRECTORY into sub-folders by type.

    Every regular, non-hidden file at the top level of the directory is
    moved into a category folder (Images, Documents, Audio, ...) next to
    it. Sub-directories are left alone.
    """
    setup_logging(verbose=verbose, dry_run=dry_run, log_file_path=log_file)

    target = directory if directory is not None else dir_option
    source_dir = target.expanduser().absolute()

    config = Config(source_dir=source_dir, dry_run=dry_run, verbose=verbose)
    organizer = Organizer(config)

    try:
        # The path is checked before anything is announced, so a typo fails fast.
        organizer.validate_source()

        console.print(f"[bold cyan]🚀 Starting file organization in:[/bold cyan] "
                      f"[bright_magenta]{escape(str(source_dir))}[/bright_magenta]")
        if dry_run:
            console.print("[yellow]🚧 DRY RUN MODE: No changes will be made.[/yellow]")

        console.print("Scanning files...")
        stats = organizer.run()
    except OrganizerError as e:
        err_console.print(f"[bold red]❌ Execution failed: {escape(str(e))}[/bold red]")
        logger.debug("Organize command failed.", exc_info=True)
        sys.exit(1)
    except Exception as e:
        # Anything else is a bug, but the user still gets a diagnostic rather than a traceback.
        err_console.print(f"[bold red]❌ An unexpected error occurred: {escape(str(e))}[/bold red]")
        logger.error("Organize command failed.", exc_info=True)
        sys.exit(1)

    print_summary(stats, dry_run=dry_run)
    if stats.failed:
        console.print(f"[yellow]{stats.failed} file(s) could not be moved. Run with -v for details.[/yellow]")
