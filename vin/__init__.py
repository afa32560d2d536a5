"""
VIN: distributed, roughly time-ordered integer IDs coordinated through Redis.
"""

__version__ = "0.1.0"

from vin.core.errors import ConfigurationError, InvalidArgumentError, VINError
from vin.core.identifier import Id, decode, encode
from vin.core.timestamp import Timestamp
from vin.core.vin import VIN, generate_id, generate_ids
from vin.models.config import Config

__all__ = [
    "VIN",
    "Config",
    "Id",
    "Timestamp",
    "VINError",
    "ConfigurationError",
    "InvalidArgumentError",
    "decode",
    "encode",
    "generate_id",
    "generate_ids",
]
