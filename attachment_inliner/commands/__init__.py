"""
Command handlers for the attachment inliner.

This module provides command handlers for the attachment inliner CLI.
"""

from attachment_inliner.commands.transform import (
    TransformSummary,
    read_ndjson,
    transform_ndjson_command,
)

__all__ = [
    "TransformSummary",
    "read_ndjson",
    "transform_ndjson_command",
]
