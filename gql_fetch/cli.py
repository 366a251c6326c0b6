#!/usr/bin/env python3
"""
gql-fetch command line tool.

Sends a single GraphQL operation to an endpoint and prints the response,
mostly for poking at servers and debugging configurations.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from pydantic import ValidationError

from .client import GraphQLClient
from .config import ConfigLoader, LogLevel, Settings
from .logging import setup_logging
from .models import ClientConfig, new_request
from .validator import validate_query


def parse_headers(values: Tuple[str, ...]) -> Dict[str, str]:
    """Parse repeated ``Name: value`` options."""
    headers: Dict[str, str] = {}
    for value in values:
        name, sep, header_value = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"{value!r} is not 'Name: value'", param_hint="--header")
        headers[name.strip()] = header_value.strip()
    return headers


def parse_variables(value: Optional[str]) -> Dict[str, Any]:
    if not value:
        return {}
    try:
        variables = json.loads(value)
    except ValueError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint="--variables")
    if not isinstance(variables, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--variables")
    return variables


@click.group()
@click.version_option(package_name="gql-fetch")
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False), help='Configuration file path')
@click.option(
    '--log-level',
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    help='Override the configured log level',
)
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], log_level: Optional[str]) -> None:
    """GraphQL over HTTP with caching and retries."""
    try:
        settings = ConfigLoader().load_config(config_file)
    except ValueError as e:
        raise click.ClickException(f"Configuration error: {e}")

    if log_level:
        settings.logging.level = LogLevel(log_level.upper())
    setup_logging(settings.logging)

    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings


@cli.command()
@click.argument('endpoint', required=False)
@click.option('--query', '-q', help='GraphQL document')
@click.option('--query-file', '-f', type=click.Path(exists=True, dir_okay=False), help='Read the document from a file')
@click.option('--variables', '-v', help='Variables as a JSON object')
@click.option('--operation-name', '-o', help='Operation name')
@click.option('--header', '-H', 'headers', multiple=True, help="Extra header 'Name: value' (repeatable)")
@click.option('--timeout-ms', type=click.IntRange(min=1), help='Per-attempt timeout in milliseconds')
@click.option('--retries', type=click.IntRange(min=0), help='Retries after the first failed attempt')
@click.option('--json', 'as_json', is_flag=True, help='Print the response as JSON')
@click.pass_context
def execute(
    ctx: click.Context,
    endpoint: Optional[str],
    query: Optional[str],
    query_file: Optional[str],
    variables: Optional[str],
    operation_name: Optional[str],
    headers: Tuple[str, ...],
    timeout_ms: Optional[int],
    retries: Optional[int],
    as_json: bool,
) -> None:
    """Execute one GraphQL operation against ENDPOINT."""
    settings: Settings = ctx.obj['settings']

    if query_file:
        query = Path(query_file).read_text(encoding="utf-8")
    if not query:
        raise click.UsageError("Provide a document with --query or --query-file")

    client_config = build_client_config(settings, endpoint, headers, timeout_ms, retries)
    request = new_request(query, parse_variables(variables), operation_name)

    client = GraphQLClient(client_config)
    response = client.execute_sync(request)

    if as_json:
        click.echo(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    else:
        click.echo(response.describe())

    if not response.is_success:
        sys.exit(1)


def build_client_config(
    settings: Settings,
    endpoint: Optional[str],
    headers: Tuple[str, ...],
    timeout_ms: Optional[int],
    retries: Optional[int],
) -> ClientConfig:
    """Overlay command line options on the loaded client configuration."""
    data: Dict[str, Any] = settings.client.model_dump(mode="json") if settings.client else {}

    if endpoint:
        data['endpoint'] = endpoint
    if headers:
        data['headers'] = {**data.get('headers', {}), **parse_headers(headers)}
    if timeout_ms is not None:
        data['timeout_ms'] = timeout_ms
    if retries is not None:
        data['max_retries'] = retries

    if 'endpoint' not in data:
        raise click.UsageError("No endpoint given and none configured (GQL_FETCH_ENDPOINT)")

    try:
        return ClientConfig(**data)
    except ValidationError as e:
        raise click.ClickException(f"Invalid client configuration: {e}")


@cli.command()
@click.argument('query')
def validate(query: str) -> None:
    """Check that QUERY looks like a GraphQL operation."""
    if validate_query(query):
        click.echo("✓ Query looks valid")
    else:
        click.echo("✗ Invalid GraphQL query")
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == '__main__':
    main()
