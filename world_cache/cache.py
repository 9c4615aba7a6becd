"""
Redis-backed store for denormalized city documents.

Each document is stored as JSON under its decimal city id. Every pass opens
its own connection and closes it on exit. Per-document encode/decode
failures are logged and skipped; connectivity failures abort the pass.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, Optional, Union

import redis
from pydantic import ValidationError

from .config import DEFAULT_REDIS_URL
from .exceptions import CacheError, SerializationError
from .models import CacheReadResult, CityCountry

logger = logging.getLogger(__name__)


def encode_document(document: CityCountry) -> str:
    """Serialize a document to its JSON cache value."""
    try:
        return document.model_dump_json(by_alias=True)
    except (ValueError, TypeError) as e:
        raise SerializationError(
            f"Could not encode city {document.id}: {e}", city_id=document.id
        ) from e


def decode_document(city_id: int, value: Union[str, bytes]) -> CityCountry:
    """
    Parse a JSON cache value back into a document.

    Raw bytes are accepted; bytes that are not valid UTF-8 fail validation
    like any other malformed value.

    Raises:
        SerializationError: If the value is not a valid document for this id
    """
    try:
        document = CityCountry.model_validate_json(value)
    except ValidationError as e:
        raise SerializationError(
            f"Could not decode city {city_id}: {e}", city_id=city_id
        ) from e

    if document.id != city_id:
        raise SerializationError(
            f"Cache entry {city_id} holds city {document.id}", city_id=city_id
        )
    return document


def _fetch_value(client: redis.Redis, city_id: int) -> Optional[Union[str, bytes]]:
    """GET the raw value for a city; a client-side decode failure counts as malformed."""
    try:
        return client.get(str(city_id))
    except UnicodeDecodeError as e:
        raise SerializationError(
            f"Could not decode city {city_id}: {e}", city_id=city_id
        ) from e


class CityCache:
    """
    Cache of CityCountry documents keyed by city id.

    Example:
        >>> cache = CityCache.from_url("redis://localhost:6379/0")
        >>> cache.write_all(documents)
        >>> result = cache.read_many([3, 123])
        >>> print(result.found[3].country_name)  # Afghanistan
    """

    def __init__(self, client_factory: Callable[[], redis.Redis]):
        """
        Initialize the cache.

        Args:
            client_factory: Callable returning a new Redis client; called once per
                pass. Values are decoded here, so the client should return
                raw bytes (decode_responses=False)
        """
        self.client_factory = client_factory

    @classmethod
    def from_url(cls, url: str = DEFAULT_REDIS_URL) -> "CityCache":
        """Build a cache that connects to the Redis server at ``url``."""
        return cls(lambda: redis.Redis.from_url(url, decode_responses=False))

    @contextmanager
    def _get_connection(self) -> Iterator[redis.Redis]:
        """Context manager for one Redis connection."""
        client = self.client_factory()
        try:
            yield client
        except redis.RedisError as e:
            logger.error(f"Redis error: {e}")
            raise CacheError(f"Cache error: {e}") from e
        finally:
            client.close()

    def check_connection(self) -> None:
        """
        Ping the server once.

        Raises:
            CacheError: If the server cannot be reached
        """
        with self._get_connection() as client:
            client.ping()
        logger.info("Connected to Redis")

    def write(self, document: CityCountry) -> None:
        """Store a single document, replacing any previous value."""
        value = encode_document(document)
        with self._get_connection() as client:
            client.set(document.cache_key, value)
        logger.debug(f"Cache SET: {document.cache_key}")

    def write_all(self, documents: Iterable[CityCountry]) -> int:
        """
        Store every document under its city id.

        Writes go through one non-transactional pipeline. A document that
        fails to encode is logged and skipped.

        Returns:
            Number of documents written
        """
        written = 0
        skipped = 0

        with self._get_connection() as client:
            pipe = client.pipeline(transaction=False)
            for document in documents:
                try:
                    value = encode_document(document)
                except SerializationError as e:
                    logger.error(f"Skipping city {e.city_id}: {e}", exc_info=True)
                    skipped += 1
                    continue
                pipe.set(document.cache_key, value)
                written += 1
            pipe.execute()

        logger.info(f"Wrote {written} documents to cache ({skipped} skipped)")
        return written

    def read(self, city_id: int) -> Optional[CityCountry]:
        """
        Retrieve one document.

        Returns:
            The decoded document, or None if the key is absent

        Raises:
            SerializationError: If the cached value cannot be decoded
        """
        with self._get_connection() as client:
            value = _fetch_value(client, city_id)

        if value is None:
            logger.debug(f"Cache MISS: {city_id}")
            return None
        return decode_document(city_id, value)

    def read_many(self, city_ids: Iterable[int]) -> CacheReadResult:
        """
        Retrieve and decode the documents for ``city_ids``.

        Missing keys and undecodable values are logged and reported in the
        result; they never stop the remaining lookups.
        """
        result = CacheReadResult()

        with self._get_connection() as client:
            for city_id in city_ids:
                try:
                    value = _fetch_value(client, city_id)
                    if value is None:
                        logger.warning(f"Cache MISS: {city_id}")
                        result.missing.append(city_id)
                        continue
                    result.found[city_id] = decode_document(city_id, value)
                except SerializationError as e:
                    logger.error(f"Invalid cache entry {city_id}: {e}", exc_info=True)
                    result.invalid.append(city_id)

        logger.info(
            f"Read {len(result.found)} documents from cache "
            f"({len(result.missing)} missing, {len(result.invalid)} invalid)"
        )
        return result
