# Main CLI entry point for tidyup

import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from tqdm import tqdm

from . import __app_name__, __version__
from .config import USAGE, TidyConfig, resolve_config
from .engine import TidyReport, get_engine
from .routing import Classification, get_routing_table
from .utils.errors import ConfigError, HelpRequested, TidyIOError
from .utils.logger import setup_logging


class ProgressReporter:
    """Prints per-file progress lines and drives the optional progress bar"""

    def __init__(self, verbose: bool = False, show_bar: bool = False):
        self.verbose = verbose
        self.show_bar = show_bar
        self.bar: Optional[tqdm] = None

    def __call__(self, index: int, total: int, result: Classification):
        if self.show_bar and self.bar is None:
            self.bar = tqdm(total=total, desc="Tidying", unit="file", file=sys.stderr)

        if self.verbose:
            line = _format_progress_line(result)
            if self.bar is not None:
                self.bar.write(line, file=sys.stdout)
            else:
                click.echo(line)

        if self.bar is not None:
            self.bar.update(1)

    def close(self):
        if self.bar is not None:
            self.bar.close()
            self.bar = None


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_extra_args": True,
        "help_option_names": [],
    },
    add_help_option=False,
)
@click.argument('tokens', nargs=-1, type=click.UNPROCESSED)
def cli(tokens):
    """
    tidyup - group the files of a directory into category folders

    Argument scanning is done by the resolver so that extension lists can
    span several tokens (`-e png jpg`).
    """
    try:
        config = resolve_config(list(tokens))
    except HelpRequested:
        click.echo(USAGE)
        return
    except ConfigError as e:
        # Bad arguments show usage and stop without an error status
        click.echo(f"Error: {e}", err=True)
        click.echo(USAGE)
        return

    if config.show_version:
        click.echo(f"{__app_name__} v{__version__}")
        return

    if config.list_rules:
        _display_rules()
        return

    try:
        logger = setup_logging(verbose=config.verbose, log_file=config.log_file)
    except OSError as e:
        click.echo(f"Failed to tidy directory: cannot open log file '{config.log_file}': {e}.", err=True)
        sys.exit(1)

    click.echo(f"Cleaning {config.directory}")
    if config.dry_run:
        click.echo("DRY RUN - no folders will be created and no files moved")

    reporter = ProgressReporter(verbose=config.verbose, show_bar=config.show_progress)
    try:
        report = get_engine().run(config, progress_callback=reporter)
        reporter.close()
        _display_results(report, config)
        logger.debug("Run complete")
    except TidyIOError as e:
        reporter.close()
        click.echo(f"Failed to tidy directory: {e}.", err=True)
        sys.exit(1)
    finally:
        logger.close()

    click.echo("Tidyup finished.")


def _format_progress_line(result: Classification) -> str:
    if result.should_move:
        return f"{result.name} → {result.category}"
    return f"{result.name} (skipped: {result.skip_reason.value})"


def _display_results(report: TidyReport, config: TidyConfig):
    """Print the end-of-run summary"""
    summary = report.get_summary()
    verb = "Would move" if report.dry_run else "Moved"

    click.echo(f"{verb} {summary['moved_files']} of {summary['total_files']} file(s)")

    if summary['folders_created']:
        created = "Would create" if report.dry_run else "Created"
        names = ", ".join(folder.name for folder in report.folders_created)
        click.echo(f"{created} {summary['folders_created']} folder(s): {names}")

    if config.verbose and summary['skipped_by_reason']:
        click.echo(f"Skipped {summary['skipped_files']} file(s):")
        for reason, count in summary['skipped_by_reason'].items():
            click.echo(f"   {reason}: {count}")


def _display_rules():
    """Print the routing table"""
    table = Table(title="tidyup routing table")
    table.add_column("Folder", style="cyan")
    table.add_column("Extensions")

    for category, extensions in get_routing_table().get_all_rules().items():
        table.add_row(category, ", ".join(extensions))

    Console().print(table)


def main():
    """Main entry point"""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
