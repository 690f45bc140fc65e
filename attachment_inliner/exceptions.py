"""
Custom exception classes for the attachment inliner.

This module defines custom exception classes for different types of errors.
"""

from typing import Optional


class InlinerError(Exception):
    """
    Base exception class for all attachment inliner errors.
    """

    def __init__(self, message: str, exit_code: int = 1):
        """
        Initialize the exception.

        Args:
            message: Error message.
            exit_code: Exit code to use when this exception causes program termination.
        """
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class ConfigurationError(InlinerError):
    """
    Exception raised for configuration-related errors.
    """

    def __init__(
        self, message: str, config_file: Optional[str] = None, exit_code: int = 2
    ):
        """
        Initialize the exception.

        Args:
            message: Error message.
            config_file: Path to the configuration file that caused the error.
            exit_code: Exit code to use when this exception causes program termination.
        """
        self.config_file = config_file
        if config_file:
            message = f"{message} (config file: {config_file})"
        super().__init__(message, exit_code)


class FetchError(InlinerError):
    """
    Exception raised when an attachment download answers with an HTTP error status.

    The retry policy classifies these by ``status_code``.
    """

    def __init__(
        self,
        url: str,
        status_code: int,
        body: Optional[bytes] = None,
        exit_code: int = 3,
    ):
        """
        Initialize the exception.

        Args:
            url: The attachment URL as it appeared in the resource.
            status_code: HTTP status code returned by the server.
            body: Response body, if it was kept.
            exit_code: Exit code to use when this exception causes program termination.
        """
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Downloading the file from {url} failed (HTTP {status_code})", exit_code
        )


class UnexpectedResponseError(InlinerError):
    """
    Exception raised when a successful response cannot be decoded.
    """

    def __init__(self, message: str, url: Optional[str] = None, exit_code: int = 4):
        self.url = url
        if url:
            message = f"{message} (url: {url})"
        super().__init__(message, exit_code)


class ExtractionError(InlinerError):
    """
    Exception raised when text cannot be extracted from a PDF payload.
    """

    def __init__(self, message: str, exit_code: int = 5):
        super().__init__(message, exit_code)


class StorageError(InlinerError):
    """
    Exception raised when a downloaded attachment cannot be saved.
    """

    def __init__(
        self, message: str, file_name: Optional[str] = None, exit_code: int = 6
    ):
        """
        Initialize the exception.

        Args:
            message: Error message.
            file_name: Name of the file that could not be written.
            exit_code: Exit code to use when this exception causes program termination.
        """
        self.file_name = file_name
        if file_name:
            message = f"{message} (file: {file_name})"
        super().__init__(message, exit_code)


class StreamError(InlinerError):
    """
    Exception raised when an error escapes the per-record handler and ends the stream.
    """

    def __init__(self, message: str, exit_code: int = 7):
        super().__init__(message, exit_code)


class RecordParseError(InlinerError):
    """
    Exception raised for NDJSON input lines that are not valid JSON objects.
    """

    def __init__(
        self, message: str, line_number: Optional[int] = None, exit_code: int = 8
    ):
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line: {line_number})"
        super().__init__(message, exit_code)
