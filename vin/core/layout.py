#!/usr/bin/env python3
"""
Bit layout of a VIN identifier.

From least to most significant: sequence, data type, logical shard ID,
timestamp. Keeping the timestamp on top makes raw IDs sort roughly by
creation time.
"""

from typing import Dict


def max_value(bits: int) -> int:
    """Largest unsigned value representable in ``bits`` bits."""
    return ~(-1 << bits)


class Layout:
    """Shifts, masks and maxima derived from the four field widths."""

    __slots__ = (
        "timestamp_bits",
        "logical_shard_id_bits",
        "data_type_bits",
        "sequence_bits",
    )

    def __init__(self, timestamp_bits: int, logical_shard_id_bits: int, data_type_bits: int, sequence_bits: int):
        self.timestamp_bits = timestamp_bits
        self.logical_shard_id_bits = logical_shard_id_bits
        self.data_type_bits = data_type_bits
        self.sequence_bits = sequence_bits

    @property
    def total_bits(self) -> int:
        return self.timestamp_bits + self.logical_shard_id_bits + self.data_type_bits + self.sequence_bits

    @property
    def sequence_shift(self) -> int:
        return 0

    @property
    def data_type_shift(self) -> int:
        return self.sequence_bits

    @property
    def logical_shard_id_shift(self) -> int:
        return self.sequence_bits + self.data_type_bits

    @property
    def timestamp_shift(self) -> int:
        return self.sequence_bits + self.data_type_bits + self.logical_shard_id_bits

    @property
    def max_sequence(self) -> int:
        return max_value(self.sequence_bits)

    @property
    def max_data_type(self) -> int:
        return max_value(self.data_type_bits)

    @property
    def max_logical_shard_id(self) -> int:
        return max_value(self.logical_shard_id_bits)

    @property
    def max_timestamp(self) -> int:
        return max_value(self.timestamp_bits)

    @property
    def max_id(self) -> int:
        return max_value(self.total_bits)

    @property
    def sequence_mask(self) -> int:
        return self.max_sequence << self.sequence_shift

    @property
    def data_type_mask(self) -> int:
        return self.max_data_type << self.data_type_shift

    @property
    def logical_shard_id_mask(self) -> int:
        return self.max_logical_shard_id << self.logical_shard_id_shift

    @property
    def timestamp_mask(self) -> int:
        return self.max_timestamp << self.timestamp_shift

    def to_dict(self) -> Dict[str, int]:
        """Constants handed to the Lua script renderer."""
        return {
            "timestamp_shift": self.timestamp_shift,
            "logical_shard_id_shift": self.logical_shard_id_shift,
            "data_type_shift": self.data_type_shift,
            "sequence_shift": self.sequence_shift,
            "max_sequence": self.max_sequence,
            "max_data_type": self.max_data_type,
            "max_logical_shard_id": self.max_logical_shard_id,
            "max_timestamp": self.max_timestamp,
        }

    def __eq__(self, other):
        if not isinstance(other, Layout):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __hash__(self):
        return hash(tuple(getattr(self, name) for name in self.__slots__))

    def __repr__(self):
        return (
            f"<Layout(timestamp={self.timestamp_bits}, logical_shard_id={self.logical_shard_id_bits}, "
            f"data_type={self.data_type_bits}, sequence={self.sequence_bits})>"
        )
