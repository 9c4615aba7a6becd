import functools
import logging
from typing import Optional, Tuple

import click

from .config import (
    DEFAULT_DATABASE_URL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_REDIS_URL,
    LOG_FORMAT,
    PAGE_SIZE,
    PROBE_IDS,
)
from .exceptions import WorldCacheError
from .models import CityCountry, ProbeTimings
from .pipeline import WorldCachePipeline


def _get_pipeline(ctx: click.Context) -> WorldCachePipeline:
    """Connect on first use; the pipeline is closed with the click context."""
    if ctx.obj.get("pipeline") is None:
        pipeline = WorldCachePipeline.from_urls(
            database_url=ctx.obj["db_url"],
            redis_url=ctx.obj["redis_url"],
        )
        ctx.obj["pipeline"] = ctx.with_resource(pipeline)
    return ctx.obj["pipeline"]


def _handle_errors(func):
    """Report WorldCacheError as a click error instead of a traceback."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except WorldCacheError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def _echo_timings(timings: ProbeTimings) -> None:
    for line in timings.report_lines():
        click.echo(line)


@click.group()
@click.option(
    "--db-url",
    envvar="WORLD_DB_URL",
    default=DEFAULT_DATABASE_URL,
    show_default=True,
    help="SQLAlchemy URL of the world database (or set WORLD_DB_URL).",
)
@click.option(
    "--redis-url",
    envvar="WORLD_REDIS_URL",
    default=DEFAULT_REDIS_URL,
    show_default=True,
    help="Redis URL for the city cache (or set WORLD_REDIS_URL).",
)
@click.option(
    "--log-level",
    envvar="WORLD_LOG_LEVEL",
    default=DEFAULT_LOG_LEVEL,
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity.",
)
@click.pass_context
def main(ctx: click.Context, db_url: str, redis_url: str, log_level: str) -> None:
    """Cache the world dataset in Redis and compare read latency.

    Every option has a default, and `world-cache run` with no arguments
    reproduces the fixed one-shot run: local MySQL world database, local
    Redis, pages of 500 cities and the built-in probe ids. Options and
    environment variables only override those defaults.
    """
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)
    ctx.obj = {"db_url": db_url, "redis_url": redis_url, "pipeline": None}


@main.command()
@click.argument("ids", nargs=-1, type=int)
@click.option(
    "--page-size",
    type=int,
    default=PAGE_SIZE,
    show_default=True,
    help="Cities fetched per relational query.",
)
@click.pass_context
@_handle_errors
def run(ctx: click.Context, ids: Tuple[int, ...], page_size: int) -> None:
    """Load the cache, then time cache and database reads of IDS."""
    pipeline = _get_pipeline(ctx)
    timings = pipeline.run(city_ids=ids or PROBE_IDS, page_size=page_size)
    _echo_timings(timings)


@main.command()
@click.option(
    "--page-size",
    type=int,
    default=PAGE_SIZE,
    show_default=True,
    help="Cities fetched per relational query.",
)
@click.pass_context
@_handle_errors
def load(ctx: click.Context, page_size: int) -> None:
    """Denormalize every city and write it to the cache."""
    pipeline = _get_pipeline(ctx)
    written = pipeline.load(page_size=page_size)
    click.echo(f"Cached {written} cities")


@main.command()
@click.argument("ids", nargs=-1, type=int)
@click.pass_context
@_handle_errors
def probe(ctx: click.Context, ids: Tuple[int, ...]) -> None:
    """Time cache and database reads of IDS against an already loaded cache."""
    pipeline = _get_pipeline(ctx)
    _echo_timings(pipeline.compare(ids or PROBE_IDS))


@main.command()
@click.argument("city_id", type=int)
@click.pass_context
@_handle_errors
def show(ctx: click.Context, city_id: int) -> None:
    """Print the cached document for CITY_ID."""
    pipeline = _get_pipeline(ctx)
    document: Optional[CityCountry] = pipeline.cache.read(city_id)
    if document is None:
        raise click.ClickException(f"City {city_id} is not cached")
    click.echo(document.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    main()
