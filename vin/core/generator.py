#!/usr/bin/env python3
"""
Single-reservation ID generator.
"""

from typing import List, Optional

from vin.core.errors import InvalidArgumentError
from vin.core.identifier import encode
from vin.core.request import ReservationClient
from vin.core.timestamp import Timestamp
from vin.models.config import Config


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class Generator:
    """
    Turns one Redis reservation into a list of IDs.

    It makes exactly one reservation per call, so it may return fewer IDs
    than requested. Looping until the count is met is up to the caller.
    """

    def __init__(self, config: Config, client: Optional[ReservationClient] = None):
        self.config = config
        self.client = client or ReservationClient(config)

    def generate_ids(self, data_type: int, count: int = 1, timestamp: Optional[int] = None) -> List[int]:
        """
        Generate up to ``count`` IDs from a single reservation.

        Args:
            data_type: Data type tag within the configured range
            count: Positive number of IDs wanted
            timestamp: Explicit timestamp in Unix milliseconds (optional)

        Returns:
            IDs in ascending sequence order

        Raises:
            InvalidArgumentError: If any argument is invalid; Redis is not contacted
        """
        self.validate(data_type, count, timestamp)

        reservation = self.client.reserve(data_type, count, timestamp)

        if timestamp is not None:
            base = Timestamp(timestamp)
        else:
            base = Timestamp.from_redis(reservation.seconds, reservation.microseconds)
        custom_timestamp = base.with_epoch(self.config.custom_epoch).milliseconds

        return [
            encode(self.config, custom_timestamp, reservation.logical_shard_id, data_type, sequence)
            for sequence in reservation.sequence
        ]

    def validate(self, data_type: int, count: int, timestamp: Optional[int] = None) -> None:
        """Reject bad arguments before any Redis call."""
        if not _is_integer(data_type):
            raise InvalidArgumentError("data_type must be an integer")
        min_data_type, max_data_type = self.config.data_type_allowed_range
        if not min_data_type <= data_type <= max_data_type:
            raise InvalidArgumentError(
                f"data_type is outside the allowed range of {min_data_type}..{max_data_type}"
            )

        if not _is_integer(count):
            raise InvalidArgumentError("count must be an integer")
        if count < 1:
            raise InvalidArgumentError("count must be a positive number")

        if timestamp is None:
            return
        if not _is_integer(timestamp):
            raise InvalidArgumentError("timestamp must be an integer")
        if timestamp < self.config.custom_epoch:
            raise InvalidArgumentError(
                f"timestamp cannot be before the custom epoch ({self.config.custom_epoch})"
            )
        if timestamp - self.config.custom_epoch > self.config.max_timestamp:
            raise InvalidArgumentError(
                f"timestamp is too far past the custom epoch to fit in {self.config.timestamp_bits} bits"
            )
