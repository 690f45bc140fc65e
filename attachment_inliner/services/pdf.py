import asyncio

import fitz  # PyMuPDF

from attachment_inliner.exceptions import ExtractionError
from attachment_inliner.utils.logging import get_logger

logger = get_logger(__name__)


def extract_pdf_text_sync(data: bytes) -> bytes:
    """Extract the plain text of every page of a PDF, as UTF-8 bytes."""
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ExtractionError(f"Failed to open PDF: {e}") from e

    try:
        pages = [page.get_text() for page in doc]
    except Exception as e:
        raise ExtractionError(f"Failed to extract PDF text: {e}") from e
    finally:
        doc.close()

    logger.debug("pdf_text_extracted", pages=len(pages))
    return "\n".join(pages).encode("utf-8")


async def extract_pdf_text(data: bytes) -> bytes:
    """Extract PDF text without blocking the event loop."""
    return await asyncio.to_thread(extract_pdf_text_sync, data)
