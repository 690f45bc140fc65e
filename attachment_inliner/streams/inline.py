"""
Inlining and naming policy for DocumentReference attachments.

Decides whether fetched attachment bytes may be embedded into the resource,
performs the embedding (optionally converting PDFs to plain text first) and
generates unique file names for attachments that are saved instead.
"""

import base64
import inspect
import os
import secrets
import time
from typing import Optional
from urllib.parse import urlsplit

from attachment_inliner.config.models import AttachmentConfig
from attachment_inliner.exceptions import ExtractionError
from attachment_inliner.streams.types import Attachment, TextExtractor
from attachment_inliner.utils.logging import get_logger

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
TEXT_CONTENT_TYPE = "text/plain"


def generate_file_name(url: str, random_bytes: int = 6) -> str:
    """
    Generate a unique file name for a downloaded attachment.

    The name is ``<epoch milliseconds>-<random hex><extension>``, where the
    extension is taken from the path of ``url``.

    Args:
        url: Original attachment URL.
        random_bytes: Number of random bytes in the name.

    Returns:
        The file name.
    """
    extension = os.path.splitext(urlsplit(url).path)[1]
    return f"{time.time_ns() // 1_000_000}-{secrets.token_hex(random_bytes)}{extension}"


def is_pdf(content_type: str) -> bool:
    """Check for a PDF media type, ignoring parameters and case."""
    return content_type.split(";", 1)[0].strip().lower() == PDF_CONTENT_TYPE


class InlinePolicy:
    """Inline eligibility and embedding of attachment data."""

    def __init__(
        self, config: AttachmentConfig, extract_text: Optional[TextExtractor] = None
    ):
        """
        Initialize the policy.

        Args:
            config: Attachment configuration (ceiling, allowed types, pdf_to_text).
            extract_text: Converts PDF bytes to UTF-8 text. Required when
                ``pdf_to_text`` is enabled.
        """
        if config.pdf_to_text and extract_text is None:
            raise ValueError("pdf_to_text is enabled but no text extractor was given")
        self.config = config
        self.extract_text = extract_text

    def can_put_content_type_inline(self, content_type: Optional[str]) -> bool:
        """Check whether a content type starts with an allowed prefix, ignoring case."""
        if not content_type:
            return False
        content_type = content_type.lower()
        return any(
            content_type.startswith(prefix)
            for prefix in self.config.inline_attachment_types
        )

    def can_put_attachment_inline(self, data: bytes, content_type: Optional[str]) -> bool:
        """Check the content type and the size ceiling."""
        if len(data) > self.config.inline_attachments:
            return False
        return self.can_put_content_type_inline(content_type)

    async def _pdf_to_text(self, data: bytes) -> bytes:
        try:
            text = self.extract_text(data)
            if inspect.isawaitable(text):
                text = await text
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"Failed to extract text from PDF: {e}") from e
        if isinstance(text, str):
            text = text.encode("utf-8")
        return text

    async def inline_attachment_data(
        self, node: Attachment, data: bytes, content_type: str
    ) -> Attachment:
        """
        Embed ``data`` into the attachment node.

        PDFs are converted to plain text first when ``pdf_to_text`` is on. The
        node is mutated only after the final bytes are known, so a failed
        conversion leaves it untouched.

        Args:
            node: The attachment to update.
            data: Downloaded bytes.
            content_type: Content type of the downloaded bytes.

        Returns:
            The updated node.

        Raises:
            ExtractionError: If PDF text extraction fails.
        """
        final_type = node.get("contentType") or content_type
        if self.config.pdf_to_text and is_pdf(content_type):
            data = await self._pdf_to_text(data)
            final_type = TEXT_CONTENT_TYPE
            logger.debug("pdf_converted_to_text", size=len(data))

        if final_type:
            node["contentType"] = final_type
        node["size"] = len(data)
        node["data"] = base64.b64encode(data).decode("ascii")
        node.pop("url", None)
        return node
