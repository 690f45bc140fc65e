"""Test fixtures for the attachment inliner."""

import logging
from collections.abc import Generator
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest
import structlog

from attachment_inliner.config import AttachmentConfig
from attachment_inliner.streams import DocumentReferenceHandler, HttpResponse, RetryPolicy


class FakeFetch:
    """Fetch collaborator answering with queued responses and recording calls."""

    def __init__(self, *responses: HttpResponse):
        self.responses: List[HttpResponse] = list(responses)
        self.calls: List[Tuple[str, Dict[str, str], bool]] = []

    async def __call__(
        self, url: str, headers: Mapping[str, str], accept_binary: bool = True
    ) -> HttpResponse:
        self.calls.append((url, dict(headers), accept_binary))
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class FakeStorage:
    """Save collaborator keeping files in memory."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}

    async def __call__(self, file_name: str, stream: Any, sub_folder: str) -> None:
        chunks = [chunk async for chunk in stream]
        self.files[f"{sub_folder}/{file_name}"] = b"".join(chunks)


class NoSleep:
    """Records retry delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo logging configuration done by a test."""
    yield
    structlog.reset_defaults()
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def no_sleep() -> NoSleep:
    return NoSleep()


@pytest.fixture
def downloads() -> List[Tuple[str, int]]:
    """Collects on_download_complete calls."""
    return []


@pytest.fixture
def make_handler(storage, no_sleep, downloads):
    """Build a handler around a FakeFetch with the given config overrides."""

    def _make(
        fetch: FakeFetch,
        extract_text: Optional[Any] = None,
        on_attachment: Optional[Any] = None,
        **overrides: Any,
    ) -> DocumentReferenceHandler:
        settings = {
            "download_attachments": False,
            "inline_attachments": 1024 * 1024,
            "inline_attachment_types": ["image/", "text/plain", "application/pdf"],
            "pdf_to_text": False,
            "base_url": "http://fhir.example.org/r4/",
        }
        settings.update(overrides)
        return DocumentReferenceHandler(
            AttachmentConfig(**settings),
            fetch=fetch,
            save=storage,
            on_download_complete=lambda url, size: downloads.append((url, size)),
            extract_text=extract_text,
            on_attachment=on_attachment,
            retry_policy=RetryPolicy(sleep=no_sleep),
        )

    return _make


def document_reference(*attachments: Dict[str, Any]) -> Dict[str, Any]:
    """Build a DocumentReference resource with the given attachments."""
    return {
        "resourceType": "DocumentReference",
        "id": "doc-1",
        "content": [{"attachment": attachment} for attachment in attachments],
    }


@pytest.fixture
def fake_fetch():
    """The FakeFetch class, for building fetch collaborators in tests."""
    return FakeFetch


@pytest.fixture
def doc_ref():
    """The DocumentReference builder."""
    return document_reference
