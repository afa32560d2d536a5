#!/usr/bin/env python3
"""
Redis connection module for the VIN ID generator.
"""

import os
import threading
from typing import Optional

import redis
from loguru import logger

DEFAULT_REDIS_URL = "redis://127.0.0.1:6379"


def redis_url_from_env() -> str:
    """Resolve the Redis URL from VIN_REDIS_URL, then REDIS_URL, then the local default."""
    return os.environ.get("VIN_REDIS_URL") or os.environ.get("REDIS_URL") or DEFAULT_REDIS_URL


class RedisConnectionManager:
    """Redis connection manager."""

    def __init__(self, url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """Initialize Redis connection manager.

        Args:
            url: Redis URL (optional, resolved from the environment otherwise)
            client: Pre-built Redis client (optional)
        """
        self.url = url or redis_url_from_env()
        self.client = client
        self._lock = threading.Lock()

    def connect(self) -> redis.Redis:
        """Connect to Redis.

        Returns:
            Redis client
        """
        if self.client is not None:
            return self.client

        with self._lock:
            if self.client is not None:
                return self.client
            try:
                client = redis.Redis.from_url(self.url, decode_responses=True)
                client.ping()
                logger.info(f"Connected to Redis at {self._safe_url()}")
            except Exception as e:
                logger.error(f"Failed to connect to Redis at {self._safe_url()}: {str(e)}")
                raise
            self.client = client
            return client

    def disconnect(self) -> None:
        """Disconnect from Redis."""
        with self._lock:
            if self.client is not None:
                self.client.close()
                self.client = None
                logger.info("Disconnected from Redis")

    def _safe_url(self) -> str:
        # Never log credentials.
        if "@" in self.url:
            scheme, _, rest = self.url.partition("://")
            return f"{scheme}://***@{rest.rsplit('@', 1)[1]}"
        return self.url
