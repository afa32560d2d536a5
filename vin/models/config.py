#!/usr/bin/env python3
"""
Generator configuration model.
"""

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from vin.core.errors import ConfigurationError
from vin.core.layout import Layout, max_value

# Identifiers are stored as 64-bit integers.
MAX_TOTAL_BITS = 64

DEFAULT_EXPLICIT_TIMESTAMP_TTL_MS = 24 * 60 * 60 * 1000


class Config(BaseModel):
    """
    Immutable description of the ID layout and the Redis key namespace.

    ``logical_shard_id_range`` is inclusive on both ends and defaults to every
    shard ID the configured bit width allows.

    Every construction failure, malformed or out of range, is raised as
    ``ConfigurationError``.
    """

    model_config = ConfigDict(frozen=True)

    # Expressed in milliseconds since the Unix epoch.
    custom_epoch: int = Field(ge=0)

    # 40 bits gives 1099511627776 milliseconds, or 34.8 years.
    timestamp_bits: int = Field(ge=0)

    # 3 bits gives 8 logical shards.
    logical_shard_id_bits: int = Field(ge=0)

    # 9 bits gives 512 data types.
    data_type_bits: int = Field(ge=0)

    # 11 bits gives 2048 IDs per millisecond per logical shard.
    sequence_bits: int = Field(ge=0)

    logical_shard_id_range: Tuple[int, int]

    key_prefix: str = Field(default="vin", pattern=r"^[A-Za-z0-9_.:-]+$")
    explicit_timestamp_ttl_ms: int = Field(default=DEFAULT_EXPLICIT_TIMESTAMP_TTL_MS, gt=0)

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid VIN configuration: {str(e)}") from e

    @model_validator(mode="before")
    @classmethod
    def default_logical_shard_id_range(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("logical_shard_id_range") is not None:
            return data
        try:
            bits = int(data.get("logical_shard_id_bits"))
        except (TypeError, ValueError):
            return data
        if bits < 0:
            return data
        return {**data, "logical_shard_id_range": (0, max_value(bits))}

    @model_validator(mode="after")
    def check_layout(self) -> "Config":
        total = self.layout.total_bits
        if total > MAX_TOTAL_BITS:
            raise ConfigurationError(
                f"timestamp_bits + logical_shard_id_bits + data_type_bits + sequence_bits is {total}, "
                f"which exceeds the maximum of {MAX_TOTAL_BITS} bits"
            )

        low, high = self.logical_shard_id_range
        allowed_low, allowed_high = self.logical_shard_id_allowed_range
        if low > high or low < allowed_low or high > allowed_high:
            raise ConfigurationError(
                f"logical_shard_id_range {low}..{high} is outside the allowed range of "
                f"{allowed_low}..{allowed_high} defined by logical_shard_id_bits={self.logical_shard_id_bits}"
            )
        return self

    @property
    def layout(self) -> Layout:
        return Layout(self.timestamp_bits, self.logical_shard_id_bits, self.data_type_bits, self.sequence_bits)

    @property
    def min_logical_shard_id(self) -> int:
        return 0

    @property
    def max_logical_shard_id(self) -> int:
        return max_value(self.logical_shard_id_bits)

    @property
    def logical_shard_id_allowed_range(self) -> Tuple[int, int]:
        return (self.min_logical_shard_id, self.max_logical_shard_id)

    @property
    def min_data_type(self) -> int:
        return 0

    @property
    def max_data_type(self) -> int:
        return max_value(self.data_type_bits)

    @property
    def data_type_allowed_range(self) -> Tuple[int, int]:
        return (self.min_data_type, self.max_data_type)

    @property
    def max_sequence(self) -> int:
        return max_value(self.sequence_bits)

    @property
    def max_timestamp(self) -> int:
        return max_value(self.timestamp_bits)

    @property
    def sequence_shift(self) -> int:
        return self.layout.sequence_shift

    @property
    def data_type_shift(self) -> int:
        return self.layout.data_type_shift

    @property
    def logical_shard_id_shift(self) -> int:
        return self.layout.logical_shard_id_shift

    @property
    def timestamp_shift(self) -> int:
        return self.layout.timestamp_shift
