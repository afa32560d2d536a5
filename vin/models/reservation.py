#!/usr/bin/env python3
"""
Reservation returned by the Redis ID generation script.
"""

from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Reservation(BaseModel):
    """One atomic grant of a contiguous, inclusive sequence range on one shard."""

    model_config = ConfigDict(frozen=True)

    start_sequence: int = Field(ge=0)
    end_sequence: int = Field(ge=0)
    logical_shard_id: int = Field(ge=0)
    seconds: int = Field(ge=0)
    microseconds: int = Field(ge=0, lt=1_000_000)

    @model_validator(mode="after")
    def check_sequence_range(self) -> "Reservation":
        if self.end_sequence < self.start_sequence:
            raise ValueError(
                f"end_sequence {self.end_sequence} is lower than start_sequence {self.start_sequence}"
            )
        return self

    @property
    def sequence(self) -> range:
        return range(self.start_sequence, self.end_sequence + 1)

    @property
    def count(self) -> int:
        return self.end_sequence - self.start_sequence + 1

    @classmethod
    def from_redis(cls, response: Sequence) -> "Reservation":
        """Build a reservation from the script's five-element reply."""
        start_sequence, end_sequence, logical_shard_id, seconds, microseconds = (int(v) for v in response)
        return cls(
            start_sequence=start_sequence,
            end_sequence=end_sequence,
            logical_shard_id=logical_shard_id,
            seconds=seconds,
            microseconds=microseconds,
        )

    def __repr__(self):
        return (
            f"<Reservation(sequence={self.start_sequence}..{self.end_sequence}, "
            f"logical_shard_id={self.logical_shard_id}, seconds={self.seconds}, microseconds={self.microseconds})>"
        )
