from unittest.mock import MagicMock

import pytest

from vin.core.errors import InvalidArgumentError
from vin.core.generator import Generator
from vin.core.identifier import Id
from vin.models.reservation import Reservation

from tests.conftest import CUSTOM_EPOCH, random_data_type

# 2023-11-14T22:13:20Z
SECONDS = 1_700_000_000


def reservation(start=99, end=99, logical_shard_id=1, seconds=SECONDS, microseconds=0):
    return Reservation(
        start_sequence=start,
        end_sequence=end,
        logical_shard_id=logical_shard_id,
        seconds=seconds,
        microseconds=microseconds,
    )


@pytest.fixture
def client():
    client = MagicMock()
    client.reserve.return_value = reservation()
    return client


@pytest.fixture
def generator(config, client):
    return Generator(config, client)


@pytest.mark.parametrize("data_type", ["foo", None, 1.0, True, -1])
def test_invalid_data_type(generator, client, data_type):
    with pytest.raises(InvalidArgumentError):
        generator.generate_ids(data_type, 1)
    client.reserve.assert_not_called()


def test_data_type_over_the_max(generator, client, config):
    with pytest.raises(InvalidArgumentError, match="0..511"):
        generator.generate_ids(config.max_data_type + 1, 1)
    client.reserve.assert_not_called()


@pytest.mark.parametrize("count", ["bar", None, 2.0, 0, -1])
def test_invalid_count(generator, client, config, count):
    with pytest.raises(InvalidArgumentError):
        generator.generate_ids(random_data_type(config), count)
    client.reserve.assert_not_called()


def test_timestamp_before_custom_epoch(generator, client):
    with pytest.raises(InvalidArgumentError, match="timestamp cannot be before the custom epoch"):
        generator.generate_ids(0, 1, timestamp=CUSTOM_EPOCH - 1000)
    client.reserve.assert_not_called()


def test_timestamp_not_an_integer(generator, client):
    with pytest.raises(InvalidArgumentError, match="timestamp must be an integer"):
        generator.generate_ids(0, 1, timestamp="not_a_timestamp")
    client.reserve.assert_not_called()


def test_timestamp_beyond_timestamp_bits(generator, client, config):
    with pytest.raises(InvalidArgumentError, match="41 bits"):
        generator.generate_ids(0, 1, timestamp=CUSTOM_EPOCH + config.max_timestamp + 1)
    client.reserve.assert_not_called()


def test_invalid_argument_is_a_value_error(generator):
    with pytest.raises(ValueError):
        generator.generate_ids(-1, 1)


def test_worked_example(generator, client, config):
    ids = generator.generate_ids(0, 1)

    assert ids == [1_818_408_622_490_648_675]
    id = Id(id=ids[0], config=config)
    assert id.sequence == 99
    assert id.data_type == 0
    assert id.logical_shard_id == 1
    assert id.custom_timestamp == SECONDS * 1000 - CUSTOM_EPOCH
    client.reserve.assert_called_once_with(0, 1, None)


def test_one_id_per_reserved_sequence(generator, client, config):
    client.reserve.return_value = reservation(start=10, end=15)

    ids = generator.generate_ids(7, 6)

    assert len(ids) == 6
    assert ids == sorted(ids)
    assert [Id(id=id, config=config).sequence for id in ids] == list(range(10, 16))


def test_short_grant_is_returned_as_is(generator, client):
    client.reserve.return_value = reservation(start=2046, end=2047)
    assert len(generator.generate_ids(7, 6)) == 2


def test_sub_millisecond_part_is_truncated(generator, client, config):
    client.reserve.return_value = reservation(microseconds=42_999)
    id = Id(id=generator.generate_ids(0, 1)[0], config=config)
    assert id.custom_timestamp == SECONDS * 1000 + 42 - CUSTOM_EPOCH


def test_explicit_timestamp_wins_over_redis_time(generator, client, config):
    timestamp = CUSTOM_EPOCH + 86_400_000

    id = Id(id=generator.generate_ids(0, 1, timestamp=timestamp)[0], config=config)

    assert id.custom_timestamp == 86_400_000
    client.reserve.assert_called_once_with(0, 1, timestamp)


def test_timestamp_equal_to_custom_epoch(generator, config):
    id = Id(id=generator.generate_ids(0, 1, timestamp=CUSTOM_EPOCH)[0], config=config)
    assert id.custom_timestamp == 0
