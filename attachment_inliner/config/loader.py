"""
Configuration loader module for the attachment inliner.

This module provides utilities for loading and validating configuration files.
"""

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Type, TypeVar, get_origin

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ValidationError

from attachment_inliner.config.models import MainConfig
from attachment_inliner.exceptions import ConfigurationError
from attachment_inliner.utils.logging import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "ATTACHMENT_INLINER_"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    if config_file.suffix in (".yaml", ".yml"):
        with open(config_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    with open(config_file, "rb") as f:
        return tomllib.load(f)


def apply_env_overrides(
    config_dict: Dict[str, Any], config_model: Type[BaseModel]
) -> Dict[str, Any]:
    """
    Override configuration values from ``ATTACHMENT_INLINER_<SECTION>_<KEY>`` variables.

    Only sections that are themselves Pydantic models are considered, and
    mapping fields are never overridden. List values are read as
    comma-separated strings; everything else is left for Pydantic to coerce.

    Args:
        config_dict: Raw configuration values, updated in place.
        config_model: Model describing the sections.

    Returns:
        The updated configuration dictionary.
    """
    for section, section_field in config_model.model_fields.items():
        section_model = section_field.annotation
        if not (isinstance(section_model, type) and issubclass(section_model, BaseModel)):
            continue
        for key, field in section_model.model_fields.items():
            if get_origin(field.annotation) is dict:
                continue
            env_name = f"{ENV_PREFIX}{section}_{key}".upper()
            value = os.environ.get(env_name)
            if value is None:
                continue
            if get_origin(field.annotation) in (list, tuple):
                value = [item.strip() for item in value.split(",") if item.strip()]
            section_values = config_dict.get(section) or {}
            section_values[key] = value
            config_dict[section] = section_values
            logger.debug("config_env_override", variable=env_name)
    return config_dict


def load_config(
    config_path: str, config_model: Type[ModelT] = MainConfig
) -> ModelT:
    """
    Load and validate configuration from a TOML or YAML file using a Pydantic model.

    A ``.env`` file in the working directory is loaded first, so its values
    take part in the environment overrides.

    Args:
        config_path: Path to the configuration file.
        config_model: Pydantic model class to use for validation.

    Returns:
        Validated configuration object.

    Raises:
        ConfigurationError: If the configuration file doesn't exist or is invalid.
    """
    config_file = Path(config_path).resolve()
    if not config_file.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}", config_file=str(config_file)
        )

    load_dotenv(find_dotenv(usecwd=True))

    try:
        config_dict = _read_config_file(config_file)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, OSError) as e:
        logger.error("config_parse_failed", config_file=str(config_file), error=str(e))
        raise ConfigurationError(
            f"Invalid configuration: {e}", config_file=str(config_file)
        ) from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            "Invalid configuration: expected a mapping at the top level",
            config_file=str(config_file),
        )

    try:
        return config_model(**apply_env_overrides(config_dict, config_model))
    except ValidationError as e:
        logger.error("config_validation_failed", config_file=str(config_file), error=str(e))
        raise ConfigurationError(
            f"Invalid configuration: {e}", config_file=str(config_file)
        ) from e
