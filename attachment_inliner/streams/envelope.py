"""
Decoding of attachment download responses.

A server may answer an attachment download either with the raw bytes or with
a FHIR ``Binary`` resource wrapping them as base64. Responses are first
classified into one of the two variants and then decoded explicitly.
"""

import base64
import binascii
import json
import re
from dataclasses import dataclass
from typing import Any, Union

from attachment_inliner.exceptions import UnexpectedResponseError
from attachment_inliner.streams.types import HttpResponse

JSON_CONTENT_TYPE = re.compile(r"\bapplication/(?:fhir\+)?json(?:\+fhir)?\b", re.IGNORECASE)


@dataclass(frozen=True)
class FetchResult:
    """Content type and bytes of one successful attachment download."""
    content_type: str
    data: bytes


@dataclass(frozen=True)
class RawBytes:
    """The response body is the attachment itself."""
    content_type: str
    body: bytes


@dataclass(frozen=True)
class EnvelopedBinary:
    """The response body is a Binary resource carrying base64 data."""
    content_type: str
    # Raw "data" element, validated on decode
    data: Any


FetchPayload = Union[RawBytes, EnvelopedBinary]


def classify_response(
    response: HttpResponse, fallback_content_type: str, url: str
) -> FetchPayload:
    """
    Classify a successful response as raw bytes or an enveloped Binary.

    Args:
        response: The successful HTTP response.
        fallback_content_type: Content type to use when the server sends none.
        url: Attachment URL, used in error messages.

    Returns:
        The classified payload.

    Raises:
        UnexpectedResponseError: If a JSON response body cannot be parsed.
    """
    content_type = response.header("content-type") or ""

    if JSON_CONTENT_TYPE.search(content_type):
        try:
            resource = json.loads(response.body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise UnexpectedResponseError(
                f"Invalid JSON in attachment response: {e}", url=url
            ) from e
        if isinstance(resource, dict) and resource.get("resourceType") == "Binary":
            return EnvelopedBinary(
                content_type=resource.get("contentType") or "",
                data=resource.get("data"),
            )

    return RawBytes(content_type=content_type or fallback_content_type, body=response.body)


def decode_payload(payload: FetchPayload, url: str) -> FetchResult:
    """
    Turn a classified payload into the attachment content type and bytes.

    Raises:
        UnexpectedResponseError: If a Binary resource has no base64 data or
            holds invalid base64 data.
    """
    if isinstance(payload, EnvelopedBinary):
        if not isinstance(payload.data, str):
            raise UnexpectedResponseError("Binary resource has no base64 data", url=url)
        try:
            data = base64.b64decode("".join(payload.data.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise UnexpectedResponseError(
                f"Invalid base64 data in Binary resource: {e}", url=url
            ) from e
        return FetchResult(content_type=payload.content_type, data=data)
    return FetchResult(content_type=payload.content_type, data=payload.body)
