"""
Utilities module for the attachment inliner.

This module provides utility functions for the attachment inliner.
"""

from attachment_inliner.utils.logging import (
    get_logger,
    log_with_context,
    setup_logging,
)

__all__ = [
    "get_logger",
    "log_with_context",
    "setup_logging",
]
