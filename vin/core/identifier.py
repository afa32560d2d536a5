#!/usr/bin/env python3
"""
Packing and unpacking of VIN identifiers.
"""

from typing import Any, Dict

from vin.core.timestamp import Timestamp
from vin.models.config import Config


def encode(config: Config, timestamp: int, logical_shard_id: int, data_type: int, sequence: int) -> int:
    """
    Pack the four fields into one integer.

    Each field is masked to its width, so an out-of-range value never spills
    into a neighbouring field.

    Args:
        config: Generator configuration
        timestamp: Milliseconds since ``config.custom_epoch``
        logical_shard_id: Logical shard ID
        data_type: Data type tag
        sequence: Per-millisecond sequence

    Returns:
        Raw identifier
    """
    layout = config.layout
    return (
        ((timestamp & layout.max_timestamp) << layout.timestamp_shift)
        | ((logical_shard_id & layout.max_logical_shard_id) << layout.logical_shard_id_shift)
        | ((data_type & layout.max_data_type) << layout.data_type_shift)
        | ((sequence & layout.max_sequence) << layout.sequence_shift)
    )


def decode(id: int, config: Config) -> Dict[str, Any]:
    """
    Unpack a raw identifier.

    Bits above the configured width are ignored, so this never fails.

    Returns:
        Dictionary with ``timestamp``, ``logical_shard_id``, ``data_type``
        and ``sequence``
    """
    return Id(id=id, config=config).to_dict()


class Id:
    """Read-only view over a raw identifier."""

    def __init__(self, id: int, config: Config):
        self.id = id
        self.config = config
        self._layout = config.layout

    @property
    def custom_timestamp(self) -> int:
        """Milliseconds since the custom epoch."""
        return (self.id & self._layout.timestamp_mask) >> self._layout.timestamp_shift

    @property
    def timestamp(self) -> Timestamp:
        return Timestamp(self.custom_timestamp, epoch=self.config.custom_epoch)

    @property
    def logical_shard_id(self) -> int:
        return (self.id & self._layout.logical_shard_id_mask) >> self._layout.logical_shard_id_shift

    @property
    def data_type(self) -> int:
        return (self.id & self._layout.data_type_mask) >> self._layout.data_type_shift

    @property
    def sequence(self) -> int:
        return (self.id & self._layout.sequence_mask) >> self._layout.sequence_shift

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.custom_timestamp,
            "unix_timestamp": self.timestamp.with_unix_epoch().milliseconds,
            "logical_shard_id": self.logical_shard_id,
            "data_type": self.data_type,
            "sequence": self.sequence,
        }

    def __int__(self) -> int:
        return self.id

    def __eq__(self, other):
        if not isinstance(other, Id):
            return NotImplemented
        return self.id == other.id and self.config == other.config

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return (
            f"<Id(id={self.id}, timestamp={self.custom_timestamp}, logical_shard_id={self.logical_shard_id}, "
            f"data_type={self.data_type}, sequence={self.sequence})>"
        )
