"""Main CLI entry point for LookML Transfer Tool."""

import sys
from typing import Optional
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..config.config import Config
from ..sheet.table import Column, TransferSheet
from ..transfer.engine import TransferEngine
from ..transfer.orchestrator import BatchSummary
from ..transfer.validation import ProjectValidator
from ..transfer.workflow import TransferStatus
from ..utils.logging import setup_logging

console = Console()

DEFAULT_CONFIG_PATHS = ['config.yaml', 'config.yml', '.lookml-transfer.yaml']


@click.group()
@click.version_option(version='0.1.0', prog_name='lookml-transfer')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """LookML Transfer Tool - Move LookML projects between Looker instances."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    setup_logging('DEBUG' if verbose else 'INFO')


@cli.command()
@click.option(
    '--output',
    '-o',
    default='config.yaml',
    help='Output configuration file path',
)
def init(output: str) -> None:
    """Initialize a new configuration file."""
    console.print(
        Panel.fit(
            '[bold green]LookML Transfer Tool[/bold green]\n'
            'Initializing configuration...',
            border_style='green',
        )
    )

    try:
        Config.create_template(output)

        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(
            f'[yellow]Please edit {output} with your Looker and GitHub details[/yellow]'
        )

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(1)


@cli.command()
@click.argument('sheet_path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def transfer(ctx: click.Context, sheet_path: str) -> None:
    """Transfer every pending project listed in SHEET_PATH."""
    console.print(
        Panel.fit(
            '[bold blue]LookML Transfer Tool[/bold blue]\n'
            'Starting project transfer...',
            border_style='blue',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        sheet = TransferSheet(sheet_path)
        summary = TransferEngine(config).run(sheet)

        _display_transfer_summary(summary)

    except Exception as e:
        console.print(f'[red]✗[/red] Transfer failed: {escape(str(e))}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)

    if summary.failed:
        sys.exit(2)


@cli.command()
@click.argument('project_id')
@click.option(
    '--sheet',
    'sheet_path',
    type=click.Path(exists=True, dir_okay=False),
    help='Record the result in this transfer sheet',
)
@click.pass_context
def validate(ctx: click.Context, project_id: str, sheet_path: Optional[str]) -> None:
    """Validate PROJECT_ID on the target instance."""
    console.print(
        Panel.fit(
            '[bold cyan]LookML Transfer Tool[/bold cyan]\nValidating project...',
            border_style='cyan',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        with ProjectValidator(config.target) as validator:
            result = validator.validate(project_id)

            if sheet_path:
                validator.record(TransferSheet(sheet_path), result)

    except Exception as e:
        console.print(f'[red]✗[/red] Validation failed: {escape(str(e))}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)

    if result.succeeded:
        console.print(f'[green]✓[/green] {project_id}: {result.summary}')
    else:
        console.print(f'[red]✗[/red] {project_id}: validation reported errors')
        for error in result.errors:
            console.print(f'  • {escape(error)}')
        sys.exit(2)


@cli.command()
@click.argument(
    'sheet_path', required=False, type=click.Path(exists=True, dir_okay=False)
)
@click.pass_context
def status(ctx: click.Context, sheet_path: Optional[str]) -> None:
    """Show configuration and, with SHEET_PATH, each row's transfer status."""
    console.print(
        Panel.fit(
            '[bold magenta]LookML Transfer Tool[/bold magenta]\nTransfer Status',
            border_style='magenta',
        )
    )

    try:
        config = _load_config(ctx)

        table = Table(title='Transfer Configuration')
        table.add_column('Setting', style='cyan')
        table.add_column('Value', style='green')

        table.add_row('Source URL', config.source.url)
        table.add_row('Target URL', config.target.url)
        table.add_row('GitHub API', config.github.api_url)
        table.add_row('Branch Prefix', config.transfer.branch_prefix)
        table.add_row('Branch Attempts', str(config.transfer.max_attempts))
        table.add_row(
            'Retry Delays',
            ', '.join(f'{delay:g}s' for delay in config.transfer.retry_delays),
        )

        console.print(table)

        if sheet_path:
            _display_sheet_status(TransferSheet(sheet_path))

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to load status: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    config_path = ctx.obj.get('config_path')

    if config_path:
        return Config.from_file(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if Path(path).exists():
            return Config.from_file(path)

    try:
        return Config.from_env()
    except Exception:
        raise FileNotFoundError(
            'No configuration found. Use --config to specify a file or run '
            '"lookml-transfer init" to create one.'
        )


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)

    setup_logging(
        level='DEBUG' if verbose else config.logging.level,
        log_file=config.logging.file,
        log_format=config.logging.format,
    )


def _display_transfer_summary(summary: BatchSummary) -> None:
    """Display batch results."""
    table = Table(title='Transfer Summary')
    table.add_column('Total', style='blue')
    table.add_column('Successful', style='green')
    table.add_column('Failed', style='red')
    table.add_column('Skipped', style='yellow')
    table.add_column('Invalid', style='yellow')
    table.add_row(
        str(summary.total_rows),
        str(summary.successful),
        str(summary.failed),
        str(summary.skipped),
        str(summary.invalid),
    )
    console.print(table)

    if summary.completed_at:
        duration = summary.completed_at - summary.started_at
        console.print(f'\n[blue]Transfer Duration:[/blue] {duration}')

    failures = [outcome for outcome in summary.outcomes if not outcome.success]
    if failures:
        console.print(f'\n[red]Errors ({len(failures)}):[/red]')
        for outcome in failures:
            console.print(f'  • {outcome.project_id}: {escape(outcome.message)}')


def _display_sheet_status(sheet: TransferSheet) -> None:
    table = Table(title=f'Sheet {sheet.path.name}')
    table.add_column('Project', style='cyan')
    table.add_column('Outcome')
    table.add_column('Transfer Results')
    table.add_column('Validation Results')

    styles = {TransferStatus.SUCCESS: 'green', TransferStatus.FAILED: 'red'}
    for row in sheet.rows():
        outcome = TransferStatus.from_cell(row.transfer_results)
        label = outcome.value if outcome else 'pending'
        style = styles.get(outcome, 'yellow')
        table.add_row(
            row.project,
            f'[{style}]{label}[/{style}]',
            row.transfer_results,
            sheet.get(row.key, Column.VALIDATION),
        )

    console.print(table)


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Transfer interrupted by user[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
