"""
Pydantic models for the denormalized city documents.

``CityCountry`` is the document written to the cache: one per city, carrying
the owning country's fields and its language set so a reader needs no join.
Field names are camelCase on the wire and snake_case in Python.
"""

import enum
from typing import Dict, FrozenSet, List

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from .config import CACHE_LABEL, RELATIONAL_LABEL


class Continent(str, enum.Enum):
    ASIA = "Asia"
    EUROPE = "Europe"
    NORTH_AMERICA = "North America"
    AFRICA = "Africa"
    OCEANIA = "Oceania"
    ANTARCTICA = "Antarctica"
    SOUTH_AMERICA = "South America"


class Language(BaseModel):
    """
    A language spoken in a country, without the country code.

    Frozen, so instances hash and compare by value and a set of them
    collapses duplicate (language, is_official, percentage) tuples.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    language: str = Field(..., description="Language name")
    is_official: bool = Field(..., description="Official language of the country")
    percentage: float = Field(..., description="Share of the population speaking it")


class CityCountry(BaseModel):
    """
    Flattened city document.

    Built once per transform pass and never mutated. ``id`` is the source
    city id and, stringified, the cache key.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int = Field(..., description="City id, also the cache key")
    name: str = Field(..., description="City name")
    population: int = Field(..., description="City population")
    district: str = Field(..., description="City district")

    alternative_country_code: str = Field(..., description="Two-letter country code")
    continent: Continent = Field(..., description="Continent of the country")
    country_code: str = Field(..., description="Three-letter country code")
    country_name: str = Field(..., description="Country name")
    country_population: int = Field(..., description="Country population")
    country_region: str = Field(..., description="Region of the country")
    country_surface_area: float = Field(..., description="Country surface area")

    languages: FrozenSet[Language] = Field(
        default_factory=frozenset,
        description="Every language of the country",
    )

    @property
    def cache_key(self) -> str:
        return str(self.id)

    @field_serializer("languages")
    def serialize_languages(self, languages: FrozenSet[Language]) -> List[Language]:
        """Emit languages in a stable order so encoded documents are deterministic."""
        return sorted(
            languages,
            key=lambda lang: (lang.language, lang.is_official, lang.percentage),
        )


class CacheReadResult(BaseModel):
    """Outcome of reading a batch of city ids from the cache."""

    found: Dict[int, CityCountry] = Field(
        default_factory=dict,
        description="Decoded documents by city id",
    )
    missing: List[int] = Field(default_factory=list, description="Ids with no cache entry")
    invalid: List[int] = Field(
        default_factory=list,
        description="Ids whose cached value failed to decode",
    )

    @property
    def has_misses(self) -> bool:
        """Check if any id was absent or undecodable."""
        return bool(self.missing or self.invalid)

    @property
    def all_found(self) -> bool:
        return not self.has_misses


class ProbeTimings(BaseModel):
    """Elapsed wall-clock time of the cache and relational probe passes."""

    cache_ms: int = Field(..., ge=0, description="Cache read pass, milliseconds")
    relational_ms: int = Field(..., ge=0, description="Relational walk pass, milliseconds")
    probe_ids: List[int] = Field(default_factory=list, description="Ids probed")

    def report_lines(
        self,
        cache_label: str = CACHE_LABEL,
        relational_label: str = RELATIONAL_LABEL,
    ) -> List[str]:
        """Return the two labelled output lines."""
        return [
            f"{cache_label}: \t{self.cache_ms} ms",
            f"{relational_label}: \t{self.relational_ms} ms",
        ]
