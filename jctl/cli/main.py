#!/usr/bin/env python3
"""
jctl - Journey Control CLI
Main entry point for journey validation and navigation tooling
"""

import click

from .journey import journey
from ..core.version import get_version

@click.group()
@click.option('--config', type=click.Path(exists=True), help='Engine config file path')
@click.pass_context
def cli(ctx, config):
    """Journey Control - Validate, lint and walk form journey definitions"""
    ctx.ensure_object(dict)
    ctx.obj['config'] = config

@cli.command()
def version():
    """Show version information"""
    version_str = get_version()
    click.echo(f"jctl version {version_str}")

# Add subcommand groups
cli.add_command(journey)

if __name__ == '__main__':
    cli()
