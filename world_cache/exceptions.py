"""Custom exceptions for the world cache loader."""


class WorldCacheError(Exception):
    """Base exception for world cache errors."""
    pass


class CacheError(WorldCacheError):
    """Raised when the Redis cache cannot be reached or a command fails."""
    pass


class SerializationError(WorldCacheError):
    """Raised when a document cannot be encoded or decoded."""

    def __init__(self, message: str, city_id: int):
        self.city_id = city_id
        super().__init__(message)


class DataAccessError(WorldCacheError):
    """Raised when the relational store fails."""
    pass


class CityNotFoundError(DataAccessError):
    """Raised when a city id has no row in the relational store."""

    def __init__(self, city_id: int):
        self.city_id = city_id
        super().__init__(f"City {city_id} not found")


class MissingCountryError(WorldCacheError):
    """Raised when a city reaches the denormalizer without its country."""

    def __init__(self, city_id: int):
        self.city_id = city_id
        super().__init__(f"City {city_id} has no country loaded")
