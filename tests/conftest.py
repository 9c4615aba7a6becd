"""Shared fixtures: a small seeded world database and an in-memory Redis."""

import fakeredis
import pytest

from world_cache.cache import CityCache
from world_cache.db import Base, make_engine, make_session_factory, session_scope
from world_cache.entities import City, Country, CountryLanguage
from world_cache.models import Continent
from world_cache.pipeline import WorldCachePipeline


COUNTRIES = [
    dict(
        code="AFG", code_2="AF", name="Afghanistan", continent=Continent.ASIA,
        region="Southern and Central Asia", surface_area=652090.0, indep_year=1919,
        population=22720000, life_expectancy=45.9, gnp=5976.0,
        local_name="Afganistan/Afqanestan", government_form="Islamic Emirate",
        head_of_state="Mohammad Omar", capital=3,
    ),
    dict(
        code="NLD", code_2="NL", name="Netherlands", continent=Continent.EUROPE,
        region="Western Europe", surface_area=41526.0, indep_year=1581,
        population=15864000, life_expectancy=78.3, gnp=371362.0, gnp_old=360478.0,
        local_name="Nederland", government_form="Constitutional Monarchy",
        head_of_state="Beatrix", capital=5,
    ),
    dict(
        code="ATA", code_2="AQ", name="Antarctica", continent=Continent.ANTARCTICA,
        region="Antarctica", surface_area=13120000.0, population=0,
        local_name="–", government_form="Co-administrated",
    ),
]

LANGUAGES = [
    dict(country_code="AFG", language="Pashto", is_official=True, percentage=52.4),
    dict(country_code="AFG", language="Dari", is_official=True, percentage=32.1),
    dict(country_code="NLD", language="Dutch", is_official=True, percentage=95.6),
    dict(country_code="NLD", language="Fries", is_official=False, percentage=3.7),
    dict(country_code="NLD", language="Arabic", is_official=False, percentage=0.9),
]

CITIES = [
    dict(id=3, name="Kabul", country_code="AFG", district="Kabol", population=1780000),
    dict(id=4, name="Qandahar", country_code="AFG", district="Qandahar", population=237500),
    dict(id=5, name="Amsterdam", country_code="NLD", district="Noord-Holland", population=731200),
    dict(id=6, name="Rotterdam", country_code="NLD", district="Zuid-Holland", population=593321),
    dict(id=10, name="Tilburg", country_code="NLD", district="Noord-Brabant", population=193238),
    dict(id=123, name="Groningen", country_code="NLD", district="Groningen", population=172701),
    dict(id=189, name="Utrecht", country_code="NLD", district="Utrecht", population=234323),
]


@pytest.fixture
def db_url(tmp_path):
    """SQLite URL of a freshly seeded world database."""
    url = f"sqlite:///{tmp_path / 'world.sqlite'}"
    engine = make_engine(url)
    Base.metadata.create_all(engine)

    with session_scope(make_session_factory(engine)) as session:
        session.add_all(Country(**row) for row in COUNTRIES)
        session.flush()
        session.add_all(CountryLanguage(**row) for row in LANGUAGES)
        session.add_all(City(**row) for row in CITIES)

    engine.dispose()
    return url


@pytest.fixture
def engine(db_url):
    engine = make_engine(db_url)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server):
    """Direct client on the same fake server, for inspecting cache contents."""
    client = fakeredis.FakeRedis(server=redis_server, decode_responses=True)
    yield client
    client.close()


@pytest.fixture
def cache(redis_server):
    return CityCache(lambda: fakeredis.FakeRedis(server=redis_server))


@pytest.fixture
def pipeline(session_factory, cache):
    return WorldCachePipeline(session_factory, cache)
