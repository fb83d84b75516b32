"""Main CLI entry point."""

import sys
from typing import List, Optional

import click
from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tfaws.config.parser import Config, ConfigValidationError
from tfaws.provider import Provider
from tfaws.state.models import flatten_attributes
from tfaws.sweep.registry import SweepResult
from tfaws.utils.errors import NotFoundError, ProviderError, error_handler
from tfaws.utils.logging import get_logger, setup_logging

console = Console()
logger = get_logger(__name__)


@click.group()
@click.option('--profile', help='AWS profile to use')
@click.option('--region', help='AWS region')
@click.option('--config', 'config_path', default=None, help='Path to configuration file (default: tfaws.yaml)')
@click.option('--log-level', default='info', type=click.Choice(['debug', 'info', 'warning', 'error']))
@click.option('--log-dir', default='.tfaws/logs', help='Directory for JSON log files')
@click.pass_context
def cli(ctx, profile, region, config_path, log_level, log_dir):
    """AWS resource handlers, tag sync and test-resource sweepers."""
    ctx.ensure_object(dict)
    ctx.obj['profile'] = profile
    ctx.obj['region'] = region
    ctx.obj['config_path'] = config_path

    setup_logging(log_level, log_dir)


def load_config(config_path: Optional[str]) -> Config:
    """Load and validate configuration file."""
    try:
        return Config(config_path).load()
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] Configuration file not found: {config_path}")
        sys.exit(1)
    except ConfigValidationError as e:
        console.print("[red]Configuration validation failed:[/red]\n")
        console.print(str(e))
        sys.exit(1)


def get_provider(ctx) -> Provider:
    """The provider for this invocation, honoring --profile and --region."""
    if ctx.obj.get('provider') is not None:
        return ctx.obj['provider']

    cfg = load_config(ctx.obj.get('config_path'))
    overrides = {}
    if ctx.obj.get('profile'):
        overrides['profile'] = ctx.obj['profile']
    if ctx.obj.get('region'):
        overrides['region'] = ctx.obj['region']

    ctx.obj['sweep_config'] = cfg.sweep
    ctx.obj['provider'] = Provider(cfg.provider.model_copy(update=overrides))
    return ctx.obj['provider']


@cli.command()
@click.option('--region', 'regions', multiple=True, help='Region to sweep (repeatable)')
@click.option('--sweeper', 'sweepers', multiple=True, help='Sweeper to run with its dependencies (repeatable)')
@click.option('--allow-failures', is_flag=True, help='Continue after a sweeper fails')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
@click.pass_context
def sweep(ctx, regions, sweepers, allow_failures, yes):
    """Delete leaked test resources in the given regions."""
    provider = get_provider(ctx)
    sweep_config = ctx.obj.get('sweep_config')

    regions = list(regions) or (sweep_config.regions if sweep_config else []) or [provider.clients.region]
    regions = [r for r in regions if r]
    names = list(sweepers) or (sweep_config.sweepers if sweep_config else [])
    allow_failures = allow_failures or bool(sweep_config and sweep_config.allow_failures)

    if not regions:
        console.print("[red]Error:[/red] No region to sweep, pass --region")
        sys.exit(1)

    registry = provider.sweepers()
    try:
        order = registry.execution_order(names)
    except ProviderError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(Panel.fit(
        f"[bold red]WARNING: This deletes every matching resource[/bold red]\n\n"
        f"Regions: {', '.join(regions)}\n"
        f"Sweepers: {', '.join(order) or 'none'}\n",
        title="Sweep",
        border_style="red"
    ))

    if not yes and not click.confirm("Proceed with sweeping?", default=False):
        console.print("[yellow]Sweep cancelled[/yellow]")
        return

    try:
        results = registry.run(regions, names=names, allow_failures=allow_failures)
    except ProviderError as e:
        error_handler.log_error(e)
        console.print(f"[red]✗ Sweep failed:[/red] {e}")
        sys.exit(1)

    _print_sweep_results(results)
    if any(not r.is_success() for r in results):
        sys.exit(1)


def _print_sweep_results(results: List[SweepResult]) -> None:
    table = Table(title="Sweep Results", show_header=True, header_style="bold")
    table.add_column("Sweeper", style="cyan")
    table.add_column("Region")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Error", style="red")

    for result in results:
        status = "[green]success[/green]" if result.is_success() else "[red]failed[/red]"
        table.add_row(
            result.sweeper,
            result.region,
            status,
            f"{result.duration:.1f}s",
            str(result.error) if result.error else ""
        )

    console.print(table)


@cli.command('sweepers')
@click.pass_context
def list_sweepers(ctx):
    """List registered sweepers and their dependencies."""
    registry = get_provider(ctx).sweepers()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Sweeper", style="cyan")
    table.add_column("Dependencies")

    for sweeper in registry.list_sweepers():
        table.add_row(sweeper.name, ", ".join(sweeper.dependencies) or "-")

    console.print(table)


@cli.command('import')
@click.argument('type_name')
@click.argument('identifier')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json']), default='table', help='Output format')
@click.pass_context
def import_resource(ctx, type_name, identifier, output_format):
    """Read an existing resource by TYPE_NAME and IDENTIFIER and print its state."""
    provider = get_provider(ctx)

    try:
        handler = provider.resource(type_name)
        state = handler.import_state(identifier)
    except NotFoundError:
        console.print(f"[red]Error:[/red] {type_name} {identifier} not found")
        sys.exit(1)
    except (ProviderError, ClientError, BotoCoreError) as e:
        console.print(f"[red]Error:[/red] {error_handler.handle_exception(e).to_user_message()}")
        sys.exit(1)

    if output_format == 'json':
        console.print_json(data=state.model_dump(mode='json'))
        return

    attributes = flatten_attributes(state.model_dump(mode='json'))
    table = Table(title=f"{type_name}: {identifier}", show_header=True, header_style="bold")
    table.add_column("Attribute", style="cyan")
    table.add_column("Value", style="white")
    for key, value in sorted(attributes.items()):
        table.add_row(key, value)
    console.print(table)


@cli.command('types')
@click.pass_context
def resource_types(ctx):
    """List supported resource types."""
    for type_name in get_provider(ctx).resource_types():
        console.print(type_name)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
