"""Denormalize cities and their countries into cache documents."""

import logging
from typing import Iterable, List

from .entities import City, CountryLanguage
from .exceptions import MissingCountryError
from .models import CityCountry, Language

logger = logging.getLogger(__name__)


def summarize_language(country_language: CountryLanguage) -> Language:
    """Project a country-language row onto a Language, dropping the country code."""
    return Language(
        language=country_language.language,
        is_official=country_language.is_official,
        percentage=country_language.percentage,
    )


def denormalize_city(city: City) -> CityCountry:
    """
    Flatten a city and its owning country into one document.

    The city must have been loaded with its country and the country's
    languages.

    Raises:
        MissingCountryError: If the city has no country
    """
    country = city.country
    if country is None:
        raise MissingCountryError(city.id)

    return CityCountry(
        id=city.id,
        name=city.name,
        population=city.population,
        district=city.district,
        alternative_country_code=country.code_2,
        continent=country.continent,
        country_code=country.code,
        country_name=country.name,
        country_population=country.population,
        country_region=country.region,
        country_surface_area=country.surface_area,
        languages=frozenset(summarize_language(cl) for cl in country.languages),
    )


def transform_cities(cities: Iterable[City]) -> List[CityCountry]:
    """Denormalize every city, preserving input order."""
    documents = [denormalize_city(city) for city in cities]
    logger.info(f"Transformed {len(documents)} cities into documents")
    return documents
