import os
import random

import fakeredis
import pytest

from vin.core.redis import RedisConnectionManager
from vin.core.request import ReservationClient
from vin.models.config import Config

# 2017-01-01T00:00:00Z
CUSTOM_EPOCH = 1_483_228_800_000


def make_config(**overrides):
    values = {
        "custom_epoch": CUSTOM_EPOCH,
        "timestamp_bits": 41,
        "logical_shard_id_bits": 3,
        "data_type_bits": 9,
        "sequence_bits": 11,
    }
    values.update(overrides)
    return Config(**values)


def random_data_type(config):
    return random.randint(0, config.max_data_type)


def random_logical_shard_id(config):
    return random.randint(config.min_logical_shard_id, config.max_logical_shard_id)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def connection_manager(fake_redis):
    return RedisConnectionManager(client=fake_redis)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def reservation_client(config, connection_manager, sleeps):
    return ReservationClient(config, connection_manager, sleep=sleeps.append)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Strip VIN_* variables and point the YAML config at a missing file."""
    for name in list(os.environ):
        if name.startswith("VIN_") or name == "REDIS_URL":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("VIN_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    return monkeypatch


@pytest.fixture
def vin_env(clean_env):
    clean_env.setenv("VIN_CUSTOM_EPOCH", str(CUSTOM_EPOCH))
    clean_env.setenv("VIN_TIMESTAMP_BITS", "41")
    clean_env.setenv("VIN_LOGICAL_SHARD_ID_BITS", "3")
    clean_env.setenv("VIN_DATA_TYPE_BITS", "9")
    clean_env.setenv("VIN_SEQUENCE_BITS", "11")
    return clean_env
