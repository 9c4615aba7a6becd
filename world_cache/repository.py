"""
Relational access to the world dataset.

Every query takes a ``with_country`` flag that decides, up front, whether the
owning country and its language set are loaded alongside each city.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .entities import City, Country
from .exceptions import CityNotFoundError

logger = logging.getLogger(__name__)


def _with_country_and_languages():
    return selectinload(City.country).selectinload(Country.languages)


class WorldRepository:
    """Read-only queries over cities, countries and languages."""

    def __init__(self, session: Session):
        self.session = session

    def count_all_cities(self) -> int:
        """Return the total number of city rows."""
        total = self.session.scalar(select(func.count()).select_from(City))
        return int(total or 0)

    def page_cities(
        self,
        offset: int,
        limit: int,
        with_country: bool = True,
    ) -> List[City]:
        """
        Return one page of cities ordered by id.

        Args:
            offset: Number of rows to skip
            limit: Maximum number of rows to return
            with_country: Load each city's country and its languages
        """
        stmt = select(City).order_by(City.id).offset(offset).limit(limit)
        if with_country:
            stmt = stmt.options(_with_country_and_languages())

        cities = list(self.session.scalars(stmt))
        logger.debug(f"Fetched {len(cities)} cities (offset={offset}, limit={limit})")
        return cities

    def get_city_by_id(self, city_id: int, with_country: bool = True) -> City:
        """
        Return a single city.

        Raises:
            CityNotFoundError: If no city has this id
        """
        stmt = select(City).where(City.id == city_id)
        if with_country:
            stmt = stmt.options(_with_country_and_languages())

        city = self.session.scalars(stmt).one_or_none()
        if city is None:
            raise CityNotFoundError(city_id)
        return city
