"""
Unit tests for response classification and Binary unwrapping.
"""

import base64
import json

import pytest

from attachment_inliner.exceptions import UnexpectedResponseError
from attachment_inliner.streams import (
    EnvelopedBinary,
    FetchResult,
    HttpResponse,
    RawBytes,
    classify_response,
    decode_payload,
)


def json_response(content_type: str, resource: dict) -> HttpResponse:
    return HttpResponse(200, {"Content-Type": content_type}, json.dumps(resource).encode())


class TestClassifyResponse:
    """Tests for the classify_response function."""

    def test_raw_bytes(self):
        response = HttpResponse(200, {"content-type": "image/png"}, b"png")
        assert classify_response(response, "image/jpeg", "u") == RawBytes("image/png", b"png")

    def test_fallback_content_type(self):
        response = HttpResponse(200, {}, b"data")
        assert classify_response(response, "image/jpeg", "u") == RawBytes("image/jpeg", b"data")

    @pytest.mark.parametrize(
        "content_type",
        ["application/json", "application/json+fhir", "application/fhir+json; charset=utf-8"],
    )
    def test_binary_envelope(self, content_type):
        response = json_response(
            content_type, {"resourceType": "Binary", "contentType": "text/plain", "data": "aGk="}
        )
        assert classify_response(response, "", "u") == EnvelopedBinary("text/plain", "aGk=")

    def test_other_json_resource_is_raw(self):
        response = json_response("application/json", {"resourceType": "Patient"})
        payload = classify_response(response, "", "u")
        assert isinstance(payload, RawBytes)
        assert payload.content_type == "application/json"

    def test_invalid_json(self):
        response = HttpResponse(200, {"content-type": "application/json"}, b"<html>")
        with pytest.raises(UnexpectedResponseError):
            classify_response(response, "", "u")


class TestDecodePayload:
    """Tests for the decode_payload function."""

    def test_raw(self):
        assert decode_payload(RawBytes("image/png", b"png"), "u") == FetchResult("image/png", b"png")

    def test_binary(self):
        data = base64.b64encode(b"some bytes").decode("ascii")
        wrapped = data[:4] + "\n" + data[4:]
        result = decode_payload(EnvelopedBinary("application/octet-stream", wrapped), "u")
        assert result == FetchResult("application/octet-stream", b"some bytes")

    def test_invalid_base64(self):
        with pytest.raises(UnexpectedResponseError):
            decode_payload(EnvelopedBinary("text/plain", "not base64!"), "u")

    @pytest.mark.parametrize("data", [None, 123, ["aGk="]])
    def test_binary_without_string_data(self, data):
        with pytest.raises(UnexpectedResponseError):
            decode_payload(EnvelopedBinary("text/plain", data), "Binary/9")

    def test_binary_without_data_element(self):
        response = json_response(
            "application/fhir+json", {"resourceType": "Binary", "contentType": "text/plain"}
        )
        payload = classify_response(response, "", "Binary/9")
        with pytest.raises(UnexpectedResponseError):
            decode_payload(payload, "Binary/9")
