#!/usr/bin/env python3
"""
Public entry point for generating VIN identifiers.
"""

import threading
from typing import List, Optional

from loguru import logger

from vin.core.config import load_config, load_settings
from vin.core.errors import VINError
from vin.core.generator import Generator
from vin.core.identifier import Id
from vin.core.redis import RedisConnectionManager
from vin.core.request import ReservationClient
from vin.models.config import Config


class VIN:
    """
    Generates identifiers, looping over reservations until the requested
    count is met.

    A reservation can be smaller than requested when the current millisecond
    runs out of sequences, so ``generate_ids`` keeps asking. If a round adds
    nothing, it stops and returns the short list; callers can detect this by
    comparing the length with ``count``.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        generator: Optional[Generator] = None,
        connection_manager: Optional[RedisConnectionManager] = None,
    ):
        """
        Initialize the generator facade.

        Args:
            config: Generator configuration (optional, loaded from the environment otherwise)
            generator: Generator to drive (optional)
            connection_manager: Redis connection manager (optional)
        """
        if generator is not None:
            config = config or generator.config
        elif config is None:
            settings = load_settings()
            config = load_config(settings)
            connection_manager = connection_manager or RedisConnectionManager(settings.redis_url)
        self.config = config
        self.generator = generator or Generator(config, ReservationClient(config, connection_manager))

    def generate_id(self, data_type: int, timestamp: Optional[int] = None) -> int:
        ids = self.generate_ids(data_type, 1, timestamp=timestamp)
        if not ids:
            raise VINError(f"No ID could be reserved for data_type {data_type}")
        return ids[0]

    def generate_ids(self, data_type: int, count: int, timestamp: Optional[int] = None) -> List[int]:
        """
        Generate ``count`` IDs.

        Args:
            data_type: Data type tag
            count: Number of IDs wanted, at least 1
            timestamp: Explicit timestamp in Unix milliseconds shared by every ID (optional)

        Returns:
            List of IDs; shorter than ``count`` only if Redis stopped granting
        """
        self.generator.validate(data_type, count, timestamp)

        ids: List[int] = []
        while len(ids) < count:
            initial_count = len(ids)
            ids += self.generator.generate_ids(data_type, count - len(ids), timestamp=timestamp)
            if len(ids) <= initial_count:
                logger.warning(f"ID generation stalled at {len(ids)} of {count} IDs for data_type {data_type}")
                break
        return ids

    def decode(self, id: int) -> Id:
        return Id(id=id, config=self.config)


_default_instance: Optional[VIN] = None
_default_lock = threading.Lock()


def default_vin() -> VIN:
    """Process-wide instance configured from the environment, created on first use."""
    global _default_instance
    if _default_instance is None:
        with _default_lock:
            if _default_instance is None:
                _default_instance = VIN()
    return _default_instance


def generate_id(data_type: int, timestamp: Optional[int] = None) -> int:
    """
    Generate a new ID with the default instance.

    Returns:
        ID as integer
    """
    return default_vin().generate_id(data_type, timestamp=timestamp)


def generate_ids(data_type: int, count: int, timestamp: Optional[int] = None) -> List[int]:
    """
    Generate ``count`` IDs with the default instance.

    Returns:
        List of IDs
    """
    return default_vin().generate_ids(data_type, count, timestamp=timestamp)
