import threading
from time import time
from unittest.mock import MagicMock

import pytest

from vin.core.errors import InvalidArgumentError, VINError
from vin.core.generator import Generator
from vin.core.identifier import Id
from vin.core.vin import VIN

from tests.conftest import CUSTOM_EPOCH, make_config, random_data_type

CUSTOM_TIMESTAMP = CUSTOM_EPOCH + 86_400_000


@pytest.fixture
def vin(config, connection_manager):
    return VIN(config=config, connection_manager=connection_manager)


def stub_generator(config, *batches):
    generator = Generator(config, MagicMock())
    generator.generate_ids = MagicMock(side_effect=list(batches))
    return generator


def decoded(vin, ids):
    return [Id(id=id, config=vin.config) for id in ids]


def test_generate_id(vin, config):
    data_type = random_data_type(config)
    id = vin.decode(vin.generate_id(data_type))
    assert id.data_type == data_type
    assert 0 <= id.sequence <= config.max_sequence


def test_generate_ids_are_distinct_and_ascending(vin):
    ids = vin.generate_ids(3, 25)
    assert len(ids) == 25
    assert len(set(ids)) == 25
    assert ids == sorted(ids)


def test_generate_ids_contains_a_current_timestamp(vin):
    now_ms = int(time() * 1000)
    for id in decoded(vin, vin.generate_ids(1, 3)):
        assert abs(id.timestamp.with_unix_epoch().milliseconds - now_ms) < 5000


def test_generate_ids_respects_logical_shard_range(connection_manager):
    config = make_config(logical_shard_id_range=(2, 3))
    vin = VIN(config=config, connection_manager=connection_manager)
    shards = {vin.decode(vin.generate_id(0)).logical_shard_id for _ in range(6)}
    assert shards == {2, 3}


def test_generate_more_ids_than_one_reservation_can_hold(vin, config):
    count = config.max_sequence + 100
    ids = vin.generate_ids(0, count)
    assert len(ids) == count
    assert len(set(ids)) == count


def test_explicit_timestamp_across_several_reservations(vin, config):
    count = config.max_sequence + 100

    ids = vin.generate_ids(0, count, timestamp=CUSTOM_TIMESTAMP)

    assert len(ids) == count
    assert len(set(ids)) == count
    assert {id.custom_timestamp for id in decoded(vin, ids)} == {CUSTOM_TIMESTAMP - CUSTOM_EPOCH}


def test_explicit_timestamp_gives_consecutive_sequences(vin):
    ids = decoded(vin, vin.generate_ids(0, 5, timestamp=CUSTOM_TIMESTAMP))
    sequences = [id.sequence for id in ids]
    assert sequences == list(range(sequences[0], sequences[0] + 5))


def test_same_explicit_timestamp_twice(vin):
    first = vin.decode(vin.generate_id(0, timestamp=CUSTOM_TIMESTAMP))
    second = vin.decode(vin.generate_id(0, timestamp=CUSTOM_TIMESTAMP))

    assert first.id != second.id
    assert first.timestamp == second.timestamp
    assert first.timestamp.with_unix_epoch().milliseconds == CUSTOM_TIMESTAMP
    if first.logical_shard_id == second.logical_shard_id:
        assert first.sequence != second.sequence


def test_concurrent_callers_with_the_same_timestamp(vin):
    ids = []
    lock = threading.Lock()

    def worker():
        id = vin.generate_id(0, timestamp=CUSTOM_TIMESTAMP)
        with lock:
            ids.append(id)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(set(ids)) == 10


def test_timestamp_before_custom_epoch(vin):
    with pytest.raises(InvalidArgumentError, match="custom epoch"):
        vin.generate_id(0, timestamp=CUSTOM_EPOCH - 1000)


def test_invalid_data_type_makes_no_redis_call(config):
    generator = Generator(config, MagicMock())
    vin = VIN(generator=generator)

    with pytest.raises(InvalidArgumentError):
        vin.generate_id(config.max_data_type + 1)
    generator.client.reserve.assert_not_called()


@pytest.mark.parametrize("count", [0, -3])
def test_count_below_one(vin, count):
    with pytest.raises(InvalidArgumentError):
        vin.generate_ids(0, count)


def test_loops_with_the_same_arguments(config):
    generator = stub_generator(config, [1, 2], [3], [4, 5])
    vin = VIN(generator=generator)

    assert vin.generate_ids(9, 5, timestamp=CUSTOM_TIMESTAMP) == [1, 2, 3, 4, 5]
    assert [c.args[:2] + (c.kwargs["timestamp"],) for c in generator.generate_ids.call_args_list] == [
        (9, 5, CUSTOM_TIMESTAMP),
        (9, 3, CUSTOM_TIMESTAMP),
        (9, 2, CUSTOM_TIMESTAMP),
    ]


def test_stops_when_no_progress_is_made(config):
    generator = stub_generator(config, [1, 2, 3], [4], [])
    vin = VIN(generator=generator)

    assert vin.generate_ids(0, 10) == [1, 2, 3, 4]
    assert generator.generate_ids.call_count == 3


def test_generate_id_with_nothing_reserved(config):
    vin = VIN(generator=stub_generator(config, []))
    with pytest.raises(VINError):
        vin.generate_id(0)


def test_config_from_environment(vin_env):
    vin_env.setenv("VIN_LOGICAL_SHARD_ID_RANGE_MAX", "3")
    vin = VIN()
    assert vin.config.sequence_bits == 11
    assert vin.config.logical_shard_id_range == (0, 3)
