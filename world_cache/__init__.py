"""Cache the world dataset in Redis as denormalized city documents."""

from .cache import CityCache
from .exceptions import (
    CacheError,
    CityNotFoundError,
    DataAccessError,
    MissingCountryError,
    SerializationError,
    WorldCacheError,
)
from .models import CacheReadResult, CityCountry, Continent, Language, ProbeTimings
from .pipeline import WorldCachePipeline

__version__ = "0.1.0"
