#!/usr/bin/env python3
"""
Coordination client that reserves sequence ranges from Redis.
"""

import threading
import time
from typing import Callable, List, Optional

from loguru import logger
from redis.exceptions import ResponseError

from vin.core.lua_script import generate_script
from vin.core.redis import RedisConnectionManager
from vin.models.config import Config
from vin.models.reservation import Reservation

MAX_TRIES = 5


def backoff_delay(attempt: int) -> float:
    """Seconds to sleep after the given 1-based failed attempt."""
    return (attempt * attempt) / 900


class ReservationClient:
    """
    Issues one atomic reservation per attempt against the Redis script.

    The SHA of the loaded script is the only mutable state. It is dropped on
    every command error so the next attempt reloads the script, which covers
    a Redis restart that flushed the script cache.
    """

    def __init__(
        self,
        config: Config,
        connection_manager: Optional[RedisConnectionManager] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the reservation client.

        Args:
            config: Generator configuration
            connection_manager: Redis connection manager (optional)
            sleep: Sleep function used between retries
        """
        self.config = config
        self.connection_manager = connection_manager or RedisConnectionManager()
        self.sleep = sleep
        self._script: Optional[str] = None
        self._script_sha: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def script(self) -> str:
        if self._script is None:
            self._script = generate_script(self.config)
        return self._script

    @property
    def script_sha(self) -> Optional[str]:
        """SHA of the loaded script, or None when it must be (re)loaded."""
        return self._script_sha

    def load_script(self) -> str:
        """Load the script into Redis unless a SHA is already cached."""
        with self._lock:
            if self._script_sha is None:
                client = self.connection_manager.connect()
                self._script_sha = client.script_load(self.script)
                logger.debug(f"Loaded ID generation script {self._script_sha}")
            return self._script_sha

    def invalidate_script(self) -> None:
        """Forget the cached SHA so the next call reloads the script."""
        with self._lock:
            self._script_sha = None

    def reserve(self, data_type: int, count: int, timestamp: Optional[int] = None) -> Reservation:
        """
        Reserve up to ``count`` sequences on one logical shard.

        Args:
            data_type: Data type tag
            count: Number of IDs wanted
            timestamp: Explicit timestamp in Unix milliseconds (optional)

        Returns:
            Reservation, possibly smaller than requested

        Raises:
            redis.exceptions.ResponseError: When all attempts failed; the last
                error is re-raised unchanged
        """
        keys = self._keys(data_type, count, timestamp)
        attempt = 0
        while True:
            attempt += 1
            try:
                return Reservation.from_redis(self._evalsha(keys))
            except ResponseError as e:
                if attempt >= MAX_TRIES:
                    logger.error(f"Reservation failed after {attempt} attempts: {str(e)}")
                    raise
                self.invalidate_script()
                delay = backoff_delay(attempt)
                logger.warning(f"Reservation attempt {attempt} failed, retrying in {delay:.4f}s: {str(e)}")
                self.sleep(delay)

    def _evalsha(self, keys: List[str]):
        sha = self.load_script()
        client = self.connection_manager.connect()
        return client.evalsha(sha, len(keys), *keys)

    @staticmethod
    def _keys(data_type: int, count: int, timestamp: Optional[int]) -> List[str]:
        keys = [str(data_type), str(count)]
        if timestamp is not None:
            keys.append(str(timestamp))
        return keys
