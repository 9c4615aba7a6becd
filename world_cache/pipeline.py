import logging
from logging import Logger
from typing import Callable, List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .cache import CityCache
from .config import (
    DEFAULT_DATABASE_URL,
    DEFAULT_REDIS_URL,
    MAX_PAGE_SIZE,
    PAGE_SIZE,
    PROBE_IDS,
)
from .db import make_engine, make_session_factory, session_scope
from .entities import City
from .models import CacheReadResult, CityCountry, ProbeTimings
from .probe import compare, probe_relational
from .repository import WorldRepository
from .transform import transform_cities

logger: Logger = logging.getLogger(__name__)


class WorldCachePipeline:
    """
    Loads the world dataset into the cache and compares read latency.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        cache: CityCache,
        engine: Optional[Engine] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            session_factory: Factory for relational sessions
            cache: Cache receiving the city documents
            engine: Engine to dispose on close, when the pipeline owns it
        """
        self.session_factory = session_factory
        self.cache = cache
        self._engine = engine

    @classmethod
    def from_urls(
        cls,
        database_url: str = DEFAULT_DATABASE_URL,
        redis_url: str = DEFAULT_REDIS_URL,
    ) -> "WorldCachePipeline":
        """Connect to both stores and check that Redis answers."""
        engine = make_engine(database_url)
        cache = CityCache.from_url(redis_url)
        try:
            cache.check_connection()
        except Exception:
            engine.dispose()
            raise
        return cls(make_session_factory(engine), cache, engine=engine)

    def fetch_cities(
        self,
        page_size: int = PAGE_SIZE,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> List[City]:
        """
        Load every city with its country and languages, one page at a time.
        """
        if page_size < 1:
            raise ValueError("Page size must be at least 1")
        if page_size > MAX_PAGE_SIZE:
            logger.warning(
                f"Page size {page_size} exceeds recommended max of {MAX_PAGE_SIZE}"
            )

        cities: List[City] = []
        with session_scope(self.session_factory) as session:
            repo = WorldRepository(session)
            total = repo.count_all_cities()
            num_pages = (total + page_size - 1) // page_size

            logger.info(f"Loading {total} cities in {num_pages} pages")

            for offset in range(0, total, page_size):
                cities.extend(repo.page_cities(offset, page_size, with_country=True))
                page_num = offset // page_size + 1
                if progress_callback:
                    progress_callback(page_num, num_pages)

        logger.info(f"Loaded {len(cities)} cities")
        return cities

    def transform(self, cities: Sequence[City]) -> List[CityCountry]:
        return transform_cities(cities)

    def push_to_cache(self, documents: Sequence[CityCountry]) -> int:
        return self.cache.write_all(documents)

    def load(
        self,
        page_size: int = PAGE_SIZE,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """
        Fetch, denormalize and cache the whole dataset.

        Returns:
            Number of documents written
        """
        cities = self.fetch_cities(page_size=page_size, progress_callback=progress_callback)
        documents = self.transform(cities)
        return self.push_to_cache(documents)

    def verify(self, city_ids: Sequence[int]) -> CacheReadResult:
        return self.cache.read_many(city_ids)

    def probe(self, city_ids: Sequence[int]) -> int:
        return probe_relational(self.session_factory, city_ids)

    def compare(self, city_ids: Sequence[int] = PROBE_IDS) -> ProbeTimings:
        return compare(self.cache, self.session_factory, city_ids)

    def run(
        self,
        city_ids: Sequence[int] = PROBE_IDS,
        page_size: int = PAGE_SIZE,
    ) -> ProbeTimings:
        """Load the cache, then time both read paths over ``city_ids``."""
        self.load(page_size=page_size)
        return self.compare(city_ids)

    def close(self):
        """Dispose the engine if this pipeline created it."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Disposed database engine")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
