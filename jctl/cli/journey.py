"""
Journey CLI commands - External interface layer
"""

import asyncio
import json
from pathlib import Path
from typing import Optional, Tuple
import click

from ..services.journey.journey_service import JourneyService
from ..core.journey.field_catalog import get_default_catalog
from ..core.config import load_engine_config
from ..core.exceptions import ConfigError, JourneyError, ServiceError
from ..core.logger import setup_logger


def _service(ctx: click.Context) -> JourneyService:
    """Build the service with the engine config named on the root group"""
    config_path = (ctx.obj or {}).get('config')
    try:
        return JourneyService(load_engine_config(config_path))
    except ConfigError as e:
        click.echo(f"❌ {e}", err=True)
        exit(1)


def _print_result(result: dict, as_json: bool) -> None:
    """Print a validation result and exit 1 when it has errors"""
    if not result['success']:
        click.echo(f"❌ {result['error']}", err=True)
        exit(1)

    if as_json:
        click.echo(json.dumps(result['report'], indent=2))
    else:
        click.echo(result['formatted'])

    if result['exit_code'] != 0:
        exit(result['exit_code'])


@click.group()
def journey():
    """Journey definition validation and navigation commands"""
    pass


@journey.command()
@click.argument('file',
               type=click.Path(exists=True, path_type=Path))
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
@click.option('--json', 'as_json',
              is_flag=True,
              help='Print the machine-readable report')
@click.pass_context
def validate(ctx, file: Path, verbose: bool, as_json: bool):
    """Validate a journey definition file"""

    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(log_level)

    _print_result(_service(ctx).validate_file(file), as_json)


@journey.command()
@click.argument('url')
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
@click.option('--json', 'as_json',
              is_flag=True,
              help='Print the machine-readable report')
@click.pass_context
def fetch(ctx, url: str, verbose: bool, as_json: bool):
    """Fetch a published journey definition and validate it"""

    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(log_level)

    result = asyncio.run(_service(ctx).validate_url(url))
    _print_result(result, as_json)


@journey.command()
@click.argument('file',
               type=click.Path(exists=True, path_type=Path))
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
@click.option('--json', 'as_json',
              is_flag=True,
              help='Print the machine-readable report')
@click.pass_context
def lint(ctx, file: Path, verbose: bool, as_json: bool):
    """Check a journey file against the house conventions"""

    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(log_level)

    _print_result(_service(ctx).lint_file(file), as_json)


@journey.command('check-all')
@click.argument('directory',
               required=False,
               type=click.Path(file_okay=False, path_type=Path))
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
@click.option('--json', 'as_json',
              is_flag=True,
              help='Print the machine-readable report')
@click.pass_context
def check_all(ctx, directory: Optional[Path], verbose: bool, as_json: bool):
    """Validate every journey in a directory (default: the configured journeys dir)"""

    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(log_level)

    service = _service(ctx)
    directory = directory or Path(service.config.journeys_dir)
    _print_result(service.validate_directory(directory), as_json)


@journey.command()
@click.argument('file',
               type=click.Path(exists=True, path_type=Path))
@click.option('-p', '--page',
              required=True,
              help='Id of the submitted page')
@click.option('-f', '--field', 'fields',
              multiple=True,
              help='Submitted value as key=value (repeat a key for checkboxes)')
@click.option('--strict',
              is_flag=True,
              help='Refuse journeys that fail validation')
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
@click.pass_context
def submit(ctx, file: Path, page: str, fields: Tuple[str, ...], strict: bool, verbose: bool):
    """Submit form data to one page of a journey and show where it routes"""

    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(log_level)

    submission = {}
    for item in fields:
        if '=' not in item:
            click.echo(f"❌ Invalid field '{item}', expected key=value", err=True)
            exit(1)
        key, value = item.split('=', 1)
        if key in submission:
            previous = submission[key]
            submission[key] = (previous if isinstance(previous, list) else [previous]) + [value]
        else:
            submission[key] = value

    try:
        service = _service(ctx)
        journey_model = service.load_journey(file, strict=strict)
        result = service.submit_form(journey_model, page, submission)
    except (JourneyError, ServiceError) as e:
        click.echo(f"❌ Command failed: {e}", err=True)
        exit(1)

    click.echo(json.dumps(result, indent=2))
    if not result['success']:
        exit(1)


@journey.command('sample-data')
@click.argument('file',
               type=click.Path(exists=True, path_type=Path))
@click.argument('page')
@click.option('-v', '--verbose',
              is_flag=True,
              help='Enable verbose logging')
@click.pass_context
def sample_data(ctx, file: Path, page: str, verbose: bool):
    """Print sample form data that satisfies a page"""

    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(log_level)

    result = _service(ctx).sample_data(file, page)
    if not result['success']:
        click.echo(f"❌ {result['error']}", err=True)
        exit(1)

    click.echo(json.dumps(result['data'], indent=2))


@journey.command()
def fields():
    """List the fields in the field catalog"""

    catalog = get_default_catalog()
    for field_id in catalog.field_ids():
        hint = catalog.hint(field_id)
        example = catalog.example(field_id)
        line = f"  {field_id}"
        if example:
            line += f" (e.g. {example})"
        if hint:
            line += f" - {hint}"
        click.echo(line)
