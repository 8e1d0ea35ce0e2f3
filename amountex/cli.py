"""
AmountEx CLI commands

This module provides command-line interface for amount extraction.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
import yaml

from amountex.config.amountex_config import AmountExConfig
from amountex.exceptions import AmountExError
from amountex.processors.amounts.pipeline import AmountPipeline

logger = logging.getLogger(__name__)


def _setup_logging(config: AmountExConfig) -> None:
    logging_config = config.get_logging_config()
    logging.basicConfig(
        level=getattr(logging, str(logging_config.get('level', 'INFO')).upper(), logging.INFO),
        format=logging_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
        stream=sys.stderr
    )


def _read_input(text, file) -> str:
    """Text argument, --file contents, or stdin when piped"""
    if file:
        return Path(file).read_text(encoding='utf-8')
    if text:
        return text
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return ''


def _require_text(text, file) -> str:
    content = _read_input(text, file)
    if not content or not content.strip():
        click.echo('Error: Text input is required', err=True)
        sys.exit(1)
    return content


@click.group()
def cli():
    """AmountEx command-line interface"""
    _setup_logging(AmountExConfig())


@cli.command()
@click.argument('text', required=False)
@click.option('--file', 'file', type=click.Path(exists=True, dir_okay=False), help='Read bill text from a file')
@click.option('--pretty', is_flag=True, help='Indent the JSON output')
def extract(text, file, pretty):
    """Extract amounts from bill text (full pipeline)"""
    content = _require_text(text, file)
    try:
        pipeline = AmountPipeline()
    except AmountExError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    result = asyncio.run(pipeline.execute_full_pipeline(content))
    click.echo(json.dumps(result.to_dict(), indent=2 if pretty else None, ensure_ascii=False))


@cli.command()
@click.argument('number', type=click.IntRange(1, 4))
@click.argument('text', required=False)
@click.option('--file', 'file', type=click.Path(exists=True, dir_okay=False), help='Read bill text from a file')
def stage(number, text, file):
    """Run the pipeline up to stage NUMBER (1-4) and show the intermediates"""
    content = _require_text(text, file)
    try:
        pipeline = AmountPipeline()
    except AmountExError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    inspection = asyncio.run(pipeline.inspect_stage(content, number))
    click.echo(json.dumps(inspection.to_dict(), indent=2, ensure_ascii=False))


@cli.group()
def config():
    """Show or initialize configuration"""
    pass


@config.command('show')
def config_show():
    """Show the effective configuration (API keys masked)"""
    settings = AmountExConfig().get_all()
    llm = settings.get('llm', {})
    if llm.get('api_key'):
        llm['api_key'] = '****'
    click.echo(yaml.safe_dump(settings, default_flow_style=False, sort_keys=False))


@config.command('init')
@click.option('--provider', type=click.Choice(['none', 'openai', 'gemini', 'ollama']), help='LLM provider')
@click.option('--model', help='LLM model name')
@click.option('--path', 'path', type=click.Path(dir_okay=False), help='Where to write the config file')
def config_init(provider, model, path):
    """Write a user configuration file"""
    amountex_config = AmountExConfig()
    if provider:
        amountex_config.set('llm.provider', provider)
    if model:
        amountex_config.set('llm.model', model)

    if not amountex_config.validate():
        click.echo('Error: Invalid configuration', err=True)
        sys.exit(1)

    try:
        saved = amountex_config.save(Path(path) if path else None)
    except OSError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    click.echo(f'Configuration written to {saved}')


if __name__ == '__main__':
    cli()
