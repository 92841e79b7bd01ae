"""Command line interface for the Librato client."""

import logging
from datetime import datetime
from typing import Optional

import click
import pandas as pd

from .client import MetricsClient
from .errors import LibratoError
from .types import KINDS, CounterMeasurement, GaugeMeasurement, Metric


@click.group()
@click.option('--user', envvar='LIBRATO_USER', help='Librato account user (or LIBRATO_USER)')
@click.option('--token', envvar='LIBRATO_TOKEN', help='Librato API token (or LIBRATO_TOKEN)')
@click.option('--verbose', is_flag=True, help='Log HTTP requests')
@click.pass_context
def cli(ctx, user: Optional[str], token: Optional[str], verbose: bool):
    """Librato metrics client CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    ctx.obj = {'user': user, 'token': token}


def _run(ctx, action):
    """Open a client from the group options and report library errors to click."""
    try:
        with MetricsClient(ctx.obj['user'], ctx.obj['token']) as client:
            action(client)
    except LibratoError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.option('--name', required=True, help='Metric name')
@click.option('--value', required=True, type=float, help='Counter value')
@click.option('--source', help='Source of the measurement')
@click.option('--time', 'measurement_time', type=click.DateTime(), help='Measurement time (UTC)')
@click.pass_context
def submit(ctx, name: str, value: float, source: Optional[str], measurement_time: Optional[datetime]):
    """Submit a single counter measurement."""
    _run(ctx, lambda client: client.submit_measurement(CounterMeasurement(
        name=name, value=value, source=source, measurement_time=measurement_time)))
    click.echo(f"Submitted {name}={value}")


@cli.command('submit-gauge')
@click.option('--name', required=True, help='Metric name')
@click.option('--count', required=True, type=int, help='Number of samples')
@click.option('--sum', 'total', required=True, type=float, help='Sum of samples')
@click.option('--max', 'maximum', type=float, help='Largest sample')
@click.option('--min', 'minimum', type=float, help='Smallest sample')
@click.option('--sum-squares', type=float, help='Sum of squared samples')
@click.option('--source', help='Source of the measurement')
@click.pass_context
def submit_gauge(ctx, name: str, count: int, total: float, maximum: Optional[float],
                 minimum: Optional[float], sum_squares: Optional[float], source: Optional[str]):
    """Submit aggregated gauge statistics."""
    _run(ctx, lambda client: client.submit_measurement(GaugeMeasurement(
        name=name, count=count, sum=total, max=maximum, min=minimum,
        sum_squares=sum_squares, source=source)))
    click.echo(f"Submitted gauge {name} (count={count})")


@cli.command('submit-csv')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def submit_csv(ctx, path: str):
    """Submit every row of a CSV file as one batch."""
    df = pd.read_csv(path)
    if df.empty:
        click.echo("No measurements found")
        return
    _run(ctx, lambda client: client.submit_dataframe(df))
    click.echo(f"Submitted {len(df)} measurements")


@cli.command('create-metric')
@click.option('--name', required=True, help='Metric name')
@click.option('--type', 'kind', type=click.Choice(KINDS), default='gauge', help='Metric type')
@click.option('--display-name', help='Name shown in the Librato UI')
@click.option('--description', help='Metric description')
@click.option('--period', type=click.IntRange(min=0), help='Reporting period in seconds')
@click.pass_context
def create_metric(ctx, name: str, kind: str, display_name: Optional[str],
                  description: Optional[str], period: Optional[int]):
    """Create or update a metric definition."""
    _run(ctx, lambda client: client.create_metric(Metric(
        name=name, type=kind, display_name=display_name,
        description=description, period=period)))
    click.echo(f"Created metric {name}")


@cli.command('delete-metric')
@click.option('--name', required=True, help='Metric name')
@click.pass_context
def delete_metric(ctx, name: str):
    """Delete a metric definition."""
    _run(ctx, lambda client: client.delete_metric(Metric(name=name)))
    click.echo(f"Deleted metric {name}")


if __name__ == '__main__':
    cli()
