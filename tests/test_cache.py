"""Tests for the Redis city cache."""

import json

import fakeredis
import pytest

from world_cache import cache as cache_module
from world_cache.cache import CityCache, decode_document, encode_document
from world_cache.exceptions import CacheError, SerializationError
from world_cache.models import CityCountry, Continent, Language


def _document(city_id, name="Kabul", languages=None):
    if languages is None:
        languages = {
            Language(language="Pashto", is_official=True, percentage=52.4),
            Language(language="Dari", is_official=True, percentage=32.1),
        }
    return CityCountry(
        id=city_id,
        name=name,
        population=1780000,
        district="Kabol",
        alternative_country_code="AF",
        continent=Continent.ASIA,
        country_code="AFG",
        country_name="Afghanistan",
        country_population=22720000,
        country_region="Southern and Central Asia",
        country_surface_area=652090.0,
        languages=frozenset(languages),
    )


def test_write_and_read(cache):
    """Test a written document reads back equal."""
    document = _document(3)
    cache.write(document)

    assert cache.read(3) == document


def test_key_is_decimal_id(cache, redis_client):
    """Test documents are stored under the plain decimal id."""
    cache.write_all([_document(3), _document(2545)])

    assert sorted(redis_client.keys("*")) == ["2545", "3"]
    stored = json.loads(redis_client.get("3"))
    assert stored["id"] == 3
    assert stored["countryName"] == "Afghanistan"


def test_write_all_returns_count(cache):
    documents = [_document(i) for i in (3, 4, 5)]
    assert cache.write_all(documents) == 3
    assert cache.read_many([3, 4, 5]).all_found


def test_overwrite_keeps_latest(cache):
    """Test writing a key twice leaves only the second value."""
    cache.write(_document(3, name="Kabul"))
    cache.write(_document(3, name="Herat"))

    assert cache.read(3).name == "Herat"


def test_read_missing_key(cache):
    """Test an unwritten key reads as absent."""
    assert cache.read(999) is None


def test_read_many_reports_missing_without_raising(cache):
    """Test absent keys are reported and the remaining ids still read."""
    cache.write_all([_document(3), _document(123)])

    result = cache.read_many([3, 2545, 123])

    assert set(result.found) == {3, 123}
    assert result.missing == [2545]
    assert result.invalid == []
    assert result.found[3] == _document(3)


def test_read_many_reports_malformed_values(cache, redis_client):
    """Test undecodable values are skipped and reported."""
    cache.write(_document(3))
    redis_client.set("4", "{not json")
    redis_client.set("5", json.dumps({"id": 5, "name": "Amsterdam"}))

    result = cache.read_many([4, 3, 5])

    assert list(result.found) == [3]
    assert result.invalid == [4, 5]
    assert result.missing == []


def test_entry_for_other_city_is_invalid(cache, redis_client):
    """Test a value stored under the wrong key is not accepted."""
    redis_client.set("10", encode_document(_document(3)))

    result = cache.read_many([10])
    assert result.invalid == [10]


def test_read_many_reports_non_utf8_values(cache, redis_server):
    """Test a value that is not valid UTF-8 is reported and the pass continues."""
    cache.write_all([_document(3), _document(123)])
    raw = fakeredis.FakeRedis(server=redis_server)
    raw.set("4", b"\xff\xfe{not utf8")

    result = cache.read_many([3, 4, 123])

    assert set(result.found) == {3, 123}
    assert result.invalid == [4]
    assert result.missing == []


def test_non_utf8_value_with_decoding_client(redis_server):
    """Test a client that decodes responses itself still reports the value as invalid."""
    cache = CityCache(lambda: fakeredis.FakeRedis(server=redis_server, decode_responses=True))
    cache.write(_document(3))
    fakeredis.FakeRedis(server=redis_server).set("4", b"\xff\xfe{not utf8")

    result = cache.read_many([4, 3])

    assert result.invalid == [4]
    assert list(result.found) == [3]
    with pytest.raises(SerializationError):
        cache.read(4)


def test_read_single_malformed_raises(cache, redis_client):
    redis_client.set("4", "[]")
    with pytest.raises(SerializationError) as exc_info:
        cache.read(4)
    assert exc_info.value.city_id == 4


def test_write_all_skips_documents_that_fail_to_encode(cache, monkeypatch):
    """Test one encode failure does not abort the pass.

    Only the skip logic of write_all is exercised here; the encoder itself is
    replaced. Real encoder failures are covered below.
    """
    real_encode = cache_module.encode_document

    def flaky_encode(document):
        if document.id == 4:
            raise SerializationError("boom", city_id=4)
        return real_encode(document)

    monkeypatch.setattr(cache_module, "encode_document", flaky_encode)

    written = cache.write_all([_document(3), _document(4), _document(5)])

    assert written == 2
    result = cache.read_many([3, 4, 5])
    assert set(result.found) == {3, 5}
    assert result.missing == [4]


def test_decode_round_trip():
    document = _document(3, languages=set())
    assert decode_document(3, encode_document(document)) == document


def test_connection_failure_is_cache_error(cache, redis_server):
    """Test an unreachable server aborts with CacheError."""
    redis_server.connected = False

    with pytest.raises(CacheError):
        cache.write_all([_document(3)])
    with pytest.raises(CacheError):
        cache.read_many([3])
    with pytest.raises(CacheError):
        cache.check_connection()


def test_check_connection(cache):
    cache.check_connection()


def test_each_pass_closes_its_client(redis_server):
    """Test the client is closed after every pass, including failing ones."""
    created = []
    closed = set()

    class TrackingRedis(fakeredis.FakeRedis):
        def close(self):
            closed.add(id(self))
            super().close()

    def factory():
        client = TrackingRedis(server=redis_server)
        created.append(client)
        return client

    cache = CityCache(factory)
    cache.write(_document(3))
    cache.read_many([3])

    redis_server.connected = False
    with pytest.raises(CacheError):
        cache.read_many([3])

    assert len(created) == 3
    assert all(id(client) in closed for client in created)


def test_encode_failure_raises_serialization_error():
    """Test a document the JSON encoder cannot handle is reported with its id."""
    broken = _document(4).model_copy(update={"name": object()})

    with pytest.raises(SerializationError) as exc_info:
        encode_document(broken)
    assert exc_info.value.city_id == 4


def test_write_all_skips_unencodable_document(cache):
    """Test the real encoder failing on one document leaves the others written."""
    broken = _document(4).model_copy(update={"name": object()})

    written = cache.write_all([_document(3), broken, _document(5)])

    assert written == 2
    result = cache.read_many([3, 4, 5])
    assert set(result.found) == {3, 5}
    assert result.missing == [4]
