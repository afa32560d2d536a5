#!/usr/bin/env python3
"""
Exception types for the VIN ID generator.
"""


class VINError(Exception):
    """Base class for all VIN errors."""


class ConfigurationError(VINError):
    """Raised when the generator configuration is missing or out of range."""


class InvalidArgumentError(VINError, ValueError):
    """Raised when a caller passes a bad data type, count or timestamp.

    Always raised before any Redis round trip and never retried.
    """
