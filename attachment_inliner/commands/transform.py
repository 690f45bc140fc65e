"""
Transform NDJSON command handler.

This module provides the command handler for the transform command: it reads
FHIR resources from an NDJSON file, rewrites DocumentReference attachments
and writes the resources, in the same order, to an output NDJSON file.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

import aiofiles

from attachment_inliner.config import MainConfig
from attachment_inliner.exceptions import RecordParseError
from attachment_inliner.services import FileSystemStorage, HttpFetcher, extract_pdf_text
from attachment_inliner.streams import DocumentReferenceHandler, RetryPolicy
from attachment_inliner.utils import get_logger, log_with_context

logger = get_logger(__name__)


@dataclass
class TransformSummary:
    """Counters collected while transforming one NDJSON file."""
    resources: int = 0
    attachments: int = 0
    downloads: int = 0
    downloaded_bytes: int = 0

    def on_download_complete(self, url: str, byte_size: int) -> None:
        self.downloads += 1
        self.downloaded_bytes += byte_size


async def read_ndjson(path: Path) -> AsyncIterator[Dict[str, Any]]:
    """
    Yield the JSON objects of an NDJSON file, skipping blank lines.

    Raises:
        RecordParseError: If a line is not a JSON object.
    """
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        line_number = 0
        async for line in f:
            line_number += 1
            line = line.strip()
            if not line:
                continue
            try:
                resource = json.loads(line)
            except json.JSONDecodeError as e:
                raise RecordParseError(f"Invalid JSON: {e.msg}", line_number=line_number) from e
            if not isinstance(resource, dict):
                raise RecordParseError("Expected a JSON object", line_number=line_number)
            yield resource


async def transform_ndjson_command(
    config: MainConfig,
    input_path: str,
    output_path: str,
    fetch: Optional[Any] = None,
) -> TransformSummary:
    """
    Rewrite the attachments of the resources in an NDJSON file.

    Args:
        config: Validated configuration.
        input_path: NDJSON file to read.
        output_path: NDJSON file to write. Saved attachments go to
            ``<storage destination>/attachments``, the destination defaulting
            to the output file's directory.
        fetch: Fetch function to use instead of an ``HttpFetcher``.

    Returns:
        Summary of the processed resources and attachments.

    Raises:
        RecordParseError: If the input contains an invalid line.
        StreamError: If a resource cannot be transformed.
    """
    source = Path(input_path).resolve()
    target = Path(output_path).resolve()
    destination = Path(config.storage.destination) if config.storage.destination else target.parent
    target.parent.mkdir(parents=True, exist_ok=True)

    logger.info(
        "transform_started",
        input=str(source),
        output=str(target),
        destination=str(destination),
    )

    summary = TransformSummary()
    storage = FileSystemStorage(destination)
    http_fetcher = HttpFetcher(config.http) if fetch is None else None

    if http_fetcher is not None:
        await http_fetcher.start()
    try:
        handler = DocumentReferenceHandler(
            config.attachments,
            fetch=fetch or http_fetcher,
            save=storage.save,
            on_download_complete=summary.on_download_complete,
            extract_text=extract_pdf_text,
            retry_policy=RetryPolicy.from_config(config.retry),
        )

        async with aiofiles.open(target, "w", encoding="utf-8") as out:
            async for resource in handler.stream(read_ndjson(source)):
                await out.write(json.dumps(resource, ensure_ascii=False) + "\n")
                summary.resources += 1
        summary.attachments = handler.attachment_count
    finally:
        if http_fetcher is not None:
            await http_fetcher.stop()

    log_with_context(
        logger,
        "info",
        "transform_completed",
        {
            "resources": summary.resources,
            "attachments": summary.attachments,
            "downloads": summary.downloads,
            "downloaded_bytes": summary.downloaded_bytes,
        },
    )
    return summary
