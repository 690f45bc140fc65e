"""
Default collaborators of the attachment handler.

This module provides the HTTP client, the file system storage and the PDF
text extraction used when running from the command line.
"""

from attachment_inliner.services.http import HttpFetcher
from attachment_inliner.services.pdf import extract_pdf_text, extract_pdf_text_sync
from attachment_inliner.services.storage import FileSystemStorage

__all__ = [
    "FileSystemStorage",
    "HttpFetcher",
    "extract_pdf_text",
    "extract_pdf_text_sync",
]
