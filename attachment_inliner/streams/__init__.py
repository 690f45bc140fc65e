"""
Stream transforms for FHIR resources.

This module provides the DocumentReference attachment handler and its
retry and inlining policies.
"""

from attachment_inliner.streams.document_reference import (
    ATTACHMENTS_FOLDER,
    DocumentReferenceHandler,
)
from attachment_inliner.streams.envelope import (
    EnvelopedBinary,
    FetchResult,
    RawBytes,
    classify_response,
    decode_payload,
)
from attachment_inliner.streams.inline import InlinePolicy, generate_file_name
from attachment_inliner.streams.retry import RetryPolicy
from attachment_inliner.streams.types import HttpResponse

__all__ = [
    "ATTACHMENTS_FOLDER",
    "DocumentReferenceHandler",
    "EnvelopedBinary",
    "FetchResult",
    "HttpResponse",
    "InlinePolicy",
    "RawBytes",
    "RetryPolicy",
    "classify_response",
    "decode_payload",
    "generate_file_name",
]
