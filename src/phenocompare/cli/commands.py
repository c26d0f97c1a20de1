"""Configuration commands for the PhenoCompare CLI"""
import json
import os
import sys

import click
from rich.console import Console
from rich.table import Table

from ..core.config import PhenoCompareConfig

console = Console()


def _config(ctx) -> PhenoCompareConfig:
    return PhenoCompareConfig(ctx.obj.get("config_file") if ctx.obj else None)


@click.group()
def config_group():
    """Manage configuration"""
    pass


@config_group.command(name='show')
@click.option('--raw', is_flag=True, help='Show raw JSON')
@click.pass_context
def config_show(ctx, raw):
    """Show current configuration"""
    config = _config(ctx)

    if raw:
        console.print(json.dumps(config._config, indent=2))
        return

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="dim")

    for key in PhenoCompareConfig.DEFAULTS:
        value = config.get(key)
        if value is None:
            continue
        if config.from_file(key) and config._config.get(key) is not None:
            source = "config file"
        elif config._config.get(key) is None and os.getenv(key.upper()):
            source = "environment"
        else:
            source = "default"
        table.add_row(key, str(value), source)

    console.print(table)
    console.print(f"[dim]Config file: {config.config_file}[/dim]")


@config_group.command(name='get')
@click.argument('key')
@click.pass_context
def config_get(ctx, key):
    """Get a configuration value"""
    value = _config(ctx).get(key)

    if value is not None:
        console.print(f"{key} = {value}")
    else:
        console.print(f"[yellow]No value set for '{key}'[/yellow]")


@config_group.command(name='set')
@click.argument('key')
@click.argument('value')
@click.pass_context
def config_set(ctx, key, value):
    """Set a configuration value"""
    config = _config(ctx)

    if key in PhenoCompareConfig.NUMERIC_FIELDS:
        try:
            value = int(value)
        except ValueError:
            console.print(f"[red]Error: {key} must be a number[/red]")
            sys.exit(1)
    elif key in PhenoCompareConfig.BOOLEAN_FIELDS:
        value = value.lower() in ('yes', 'true', '1')
    elif key in PhenoCompareConfig.LIST_FIELDS:
        value = [part.strip() for part in value.split(",") if part.strip()]

    config.set(key, value)
    console.print(f"[green]✓ {key} = {value}[/green]")


@config_group.command(name='reset')
@click.argument('keys', nargs=-1)
@click.pass_context
def config_reset(ctx, keys):
    """Reset configuration (all keys, or only KEYS) to defaults"""
    _config(ctx).reset(list(keys) or None)
    console.print("[yellow]Configuration reset[/yellow]")
