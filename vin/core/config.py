#!/usr/bin/env python3
"""
Configuration module for the VIN ID generator.

Values come from ``VIN_*`` environment variables (or a ``.env`` file) and
optionally from a YAML file; the environment wins.
"""

import os
import sys
from typing import Any, Dict, Optional

import yaml
from loguru import logger
from pydantic import ValidationError
from pydantic_settings import BaseSettings

from vin.core.errors import ConfigurationError
from vin.core.layout import max_value
from vin.models.config import Config

REQUIRED_FIELDS = (
    "custom_epoch",
    "timestamp_bits",
    "logical_shard_id_bits",
    "data_type_bits",
    "sequence_bits",
)

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
)


class Settings(BaseSettings):
    """Settings from environment variables."""

    custom_epoch: Optional[int] = None
    timestamp_bits: Optional[int] = None
    logical_shard_id_bits: Optional[int] = None
    data_type_bits: Optional[int] = None
    sequence_bits: Optional[int] = None
    logical_shard_id_range_min: Optional[int] = None
    logical_shard_id_range_max: Optional[int] = None
    key_prefix: Optional[str] = None
    explicit_timestamp_ttl_ms: Optional[int] = None

    # Redis configuration
    redis_url: Optional[str] = None

    # Logging configuration
    log_level: str = "INFO"

    # Configuration file path
    config_path: str = "config/vin.yaml"

    model_config = {
        "env_prefix": "VIN_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


def load_settings() -> Settings:
    """
    Load settings from the environment.

    Raises:
        ConfigurationError: If a variable cannot be parsed
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid VIN environment variables: {str(e)}") from e


def load_yaml_config(file_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Only the top-level ``vin`` section is used.

    Args:
        file_path: Path to YAML configuration file

    Returns:
        Configuration dictionary, empty when the file does not exist
    """
    if not os.path.exists(file_path):
        logger.debug(f"Configuration file not found: {file_path}")
        return {}

    try:
        with open(file_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error loading configuration file {file_path}: {str(e)}") from e

    section = data.get("vin", {}) if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration file {file_path} must contain a 'vin' mapping")
    return section


def merge_configs(settings: Settings, file_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge environment and file configurations.

    Args:
        settings: Environment configuration
        file_config: File configuration

    Returns:
        Merged configuration
    """
    merged = {**file_config}

    file_range = merged.pop("logical_shard_id_range", None)
    if file_range is not None:
        if not isinstance(file_range, (list, tuple)) or len(file_range) != 2:
            raise ConfigurationError("logical_shard_id_range must be a list of two integers")
        merged["logical_shard_id_range_min"], merged["logical_shard_id_range_max"] = file_range

    for key, value in settings.model_dump(exclude={"redis_url", "log_level", "config_path"}).items():
        if value is not None:
            merged[key] = value

    return merged


def build_config(values: Dict[str, Any]) -> Config:
    """
    Build a ``Config`` from merged settings.

    A missing range bound defaults to the matching bound of the range allowed
    by ``logical_shard_id_bits``.

    Raises:
        ConfigurationError: If a required value is missing or out of range
    """
    missing = [name for name in REQUIRED_FIELDS if values.get(name) is None]
    if missing:
        names = ", ".join(f"VIN_{name.upper()}" for name in missing)
        raise ConfigurationError(f"Missing required configuration: {names}")

    fields = {name: values[name] for name in REQUIRED_FIELDS}
    for name in ("key_prefix", "explicit_timestamp_ttl_ms"):
        if values.get(name) is not None:
            fields[name] = values[name]

    range_min = values.get("logical_shard_id_range_min")
    range_max = values.get("logical_shard_id_range_max")
    if range_min is not None or range_max is not None:
        try:
            allowed_max = max_value(int(values["logical_shard_id_bits"]))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid logical_shard_id_bits: {values['logical_shard_id_bits']}") from e
        fields["logical_shard_id_range"] = (
            0 if range_min is None else range_min,
            allowed_max if range_max is None else range_max,
        )

    return Config(**fields)


def load_config(settings: Optional[Settings] = None) -> Config:
    """
    Load the generator configuration.

    Returns:
        Immutable configuration

    Raises:
        ConfigurationError: If the configuration is missing or invalid
    """
    settings = settings or load_settings()
    file_config = load_yaml_config(settings.config_path)
    config = build_config(merge_configs(settings, file_config))
    logger.debug(
        f"VIN configuration loaded: epoch={config.custom_epoch}, layout={config.layout!r}, "
        f"logical_shard_id_range={config.logical_shard_id_range}"
    )
    return config


def setup_logging(level: str = "INFO") -> None:
    """
    Set up logging configuration.

    Args:
        level: Minimum log level for the stderr sink
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
