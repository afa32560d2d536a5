#!/usr/bin/env python3
"""
Millisecond timestamps relative to an arbitrary epoch.
"""

from datetime import datetime, timedelta, timezone

UNIX_EPOCH = 0

_UNIX_EPOCH_DATETIME = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Timestamp:
    """
    A number of milliseconds elapsed since ``epoch``.

    ``epoch`` is itself expressed in milliseconds since the Unix epoch. All
    arithmetic is integer arithmetic.
    """

    __slots__ = ("milliseconds", "epoch")

    def __init__(self, milliseconds: int, epoch: int = UNIX_EPOCH):
        self.milliseconds = milliseconds
        self.epoch = epoch

    @classmethod
    def from_redis(cls, seconds: int, microseconds_part: int) -> "Timestamp":
        """
        Build a Unix-epoch timestamp from a Redis ``TIME`` reply.

        Args:
            seconds: Whole seconds since the Unix epoch
            microseconds_part: Microseconds within the current second

        Returns:
            Timestamp truncated to the millisecond
        """
        return cls(int(seconds) * 1000 + int(microseconds_part) // 1000, epoch=UNIX_EPOCH)

    @classmethod
    def from_datetime(cls, value: datetime) -> "Timestamp":
        """Build a Unix-epoch timestamp from a datetime; naive values are taken as UTC."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        delta = value - _UNIX_EPOCH_DATETIME
        milliseconds = (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000
        return cls(milliseconds, epoch=UNIX_EPOCH)

    @property
    def seconds(self) -> int:
        return self.milliseconds // 1000

    @property
    def microseconds_part(self) -> int:
        return (self.milliseconds % 1000) * 1000

    def with_epoch(self, new_epoch: int) -> "Timestamp":
        """Re-base onto ``new_epoch``. No clamping is applied."""
        return Timestamp(self.milliseconds + (self.epoch - new_epoch), epoch=new_epoch)

    def with_unix_epoch(self) -> "Timestamp":
        return self.with_epoch(UNIX_EPOCH)

    def to_datetime(self) -> datetime:
        """Absolute instant as an aware UTC datetime."""
        return _UNIX_EPOCH_DATETIME + timedelta(milliseconds=self.epoch + self.milliseconds)

    def __int__(self) -> int:
        return self.milliseconds

    def __eq__(self, other):
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self.milliseconds == other.milliseconds and self.epoch == other.epoch

    def __hash__(self):
        return hash((self.milliseconds, self.epoch))

    def __repr__(self):
        return f"<Timestamp(milliseconds={self.milliseconds}, epoch={self.epoch})>"
