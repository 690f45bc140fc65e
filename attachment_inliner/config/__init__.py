"""
Configuration module for the attachment inliner.

This module provides configuration models and utilities for loading and validating configuration.
"""

from attachment_inliner.config.loader import apply_env_overrides, load_config
from attachment_inliner.config.models import (
    AttachmentConfig,
    HttpConfig,
    LoggingConfig,
    MainConfig,
    RetryConfig,
    StorageConfig,
)

__all__ = [
    "AttachmentConfig",
    "HttpConfig",
    "LoggingConfig",
    "MainConfig",
    "RetryConfig",
    "StorageConfig",
    "apply_env_overrides",
    "load_config",
]
