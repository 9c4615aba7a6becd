"""
Latency comparison between the cache and the relational store.

Both passes read the same probe ids: the cache pass decodes the flattened
documents, the relational pass loads each city with its country and
languages. Each pass is timed once; this is a demonstration, not a
benchmark.
"""

import logging
import time
from typing import Any, Callable, Sequence, Tuple

from sqlalchemy.orm import sessionmaker

from .cache import CityCache
from .db import session_scope
from .models import ProbeTimings
from .repository import WorldRepository

logger = logging.getLogger(__name__)


def elapsed_ms(func: Callable[..., Any], *args, **kwargs) -> Tuple[Any, int]:
    """Call ``func`` and return its result with the wall-clock time in milliseconds."""
    start = time.perf_counter()
    result = func(*args, **kwargs)
    elapsed = int((time.perf_counter() - start) * 1000)
    return result, elapsed


def probe_relational(session_factory: sessionmaker, city_ids: Sequence[int]) -> int:
    """
    Load every probed city with its country and languages in one session.

    The languages are touched but not used; the point is to pay the join
    cost for each id.

    Returns:
        Number of cities loaded

    Raises:
        CityNotFoundError: If an id has no city row
    """
    probed = 0
    with session_scope(session_factory) as session:
        repo = WorldRepository(session)
        for city_id in city_ids:
            city = repo.get_city_by_id(city_id, with_country=True)
            languages = city.country.languages
            logger.debug(f"Probed city {city_id} ({len(languages)} languages)")
            probed += 1
    return probed


def compare(
    cache: CityCache,
    session_factory: sessionmaker,
    city_ids: Sequence[int],
) -> ProbeTimings:
    """Time a cache read pass and a relational pass over the same ids."""
    city_ids = list(city_ids)

    result, cache_ms = elapsed_ms(cache.read_many, city_ids)
    if result.has_misses:
        logger.warning(
            f"Cache probe incomplete: missing={result.missing}, invalid={result.invalid}"
        )

    _, relational_ms = elapsed_ms(probe_relational, session_factory, city_ids)

    timings = ProbeTimings(
        cache_ms=cache_ms,
        relational_ms=relational_ms,
        probe_ids=city_ids,
    )
    logger.info(
        f"Probed {len(city_ids)} ids: cache={cache_ms}ms, relational={relational_ms}ms"
    )
    return timings
