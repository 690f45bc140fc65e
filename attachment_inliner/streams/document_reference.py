"""
Attachment handling for a stream of FHIR resources.

``DocumentReferenceHandler`` receives resources one at a time. Resources that
are not DocumentReferences pass through untouched. For DocumentReferences,
every ``content[].attachment`` with a ``url`` is downloaded (with retries) and
then either inlined as base64 ``data`` or saved under ``attachments/`` with
the ``url`` rewritten to the local copy. Attachments that cannot be downloaded
keep their remote ``url``; they never fail the resource or the stream.
"""

from typing import Any, AsyncIterable, AsyncIterator, Iterable, Optional, Union
from urllib.parse import urljoin

from attachment_inliner.config.models import AttachmentConfig
from attachment_inliner.exceptions import FetchError, InlinerError, StreamError
from attachment_inliner.streams.envelope import FetchResult, classify_response, decode_payload
from attachment_inliner.streams.inline import InlinePolicy, generate_file_name
from attachment_inliner.streams.retry import RetryPolicy
from attachment_inliner.streams.types import (
    Attachment,
    AttachmentCallback,
    DownloadCompleteCallback,
    Fetch,
    Record,
    Save,
    TextExtractor,
)
from attachment_inliner.utils.logging import get_logger

logger = get_logger(__name__)

TARGET_RESOURCE_TYPE = "DocumentReference"
ATTACHMENTS_FOLDER = "attachments"
DEFAULT_ACCEPT = "application/json+fhir"
CHUNK_SIZE = 64 * 1024


async def iter_chunks(data: bytes, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Expose a byte payload as an async stream of chunks."""
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]


class DocumentReferenceHandler:
    """Rewrites attachment references of DocumentReference resources."""

    def __init__(
        self,
        config: AttachmentConfig,
        fetch: Fetch,
        save: Save,
        on_download_complete: DownloadCompleteCallback,
        extract_text: Optional[TextExtractor] = None,
        on_attachment: Optional[AttachmentCallback] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """
        Initialize the handler.

        Args:
            config: Attachment configuration.
            fetch: Downloads a URL; must not raise on HTTP error statuses.
            save: Persists a byte stream under a sub-folder.
            on_download_complete: Called with the original URL and byte size
                after every successful download.
            extract_text: PDF to text conversion, needed for ``pdf_to_text``.
            on_attachment: Called with the attachment node after it has been
                inlined or saved.
            retry_policy: Download retry policy; defaults to 4 attempts 5 seconds apart.
        """
        self.config = config
        self.fetch = fetch
        self.save = save
        self.on_download_complete = on_download_complete
        self.on_attachment = on_attachment
        self.inline_policy = InlinePolicy(config, extract_text)
        self.retry_policy = retry_policy or RetryPolicy()
        self.attachment_count = 0

    def can_put_content_type_inline(self, content_type: Optional[str]) -> bool:
        return self.inline_policy.can_put_content_type_inline(content_type)

    def can_put_attachment_inline(self, data: bytes, content_type: Optional[str]) -> bool:
        return self.inline_policy.can_put_attachment_inline(data, content_type)

    async def download_attachment(self, attachment: Attachment) -> FetchResult:
        """
        Download an attachment once.

        Relative URLs are resolved against the configured base URL. A FHIR
        Binary resource in the response is unwrapped.

        Raises:
            FetchError: If the server answers with a status of 400 or above.
            UnexpectedResponseError: If the response body cannot be decoded.
        """
        original_url = attachment.get("url")
        if not original_url:
            raise ValueError("download_attachment called on an attachment that has no 'url'")

        url = urljoin(self.config.base_url, original_url)
        declared_type = attachment.get("contentType") or ""

        response = await self.fetch(
            url,
            headers={"accept": declared_type or DEFAULT_ACCEPT},
            accept_binary=True,
        )

        if response.status_code >= 400:
            raise FetchError(url=original_url, status_code=response.status_code)

        payload = classify_response(response, declared_type, original_url)
        result = decode_payload(payload, original_url)
        self.on_download_complete(original_url, len(result.data))
        return result

    async def download_attachment_with_retries(self, attachment: Attachment) -> FetchResult:
        return await self.retry_policy.run(lambda: self.download_attachment(attachment))

    async def _persist(self, attachment: Attachment, data: bytes) -> None:
        file_name = generate_file_name(attachment["url"])
        await self.save(file_name, iter_chunks(data), ATTACHMENTS_FOLDER)
        attachment["url"] = f"./{ATTACHMENTS_FOLDER}/{file_name}"
        # A local pointer replaces any previously inlined content
        attachment.pop("data", None)
        attachment.pop("size", None)

    def _emit_attachment(self, attachment: Attachment) -> None:
        self.attachment_count += 1
        if self.on_attachment is not None:
            self.on_attachment(attachment)

    async def handle_attachment(self, attachment: Attachment) -> bool:
        """
        Download one attachment and inline or save it.

        Returns:
            True if the attachment was inlined or saved, False if it was skipped.

        Raises:
            StorageError: If saving the downloaded bytes fails.
        """
        url = attachment.get("url")
        if not url:
            return False

        maybe_inline = not attachment.get("contentType") or self.can_put_content_type_inline(
            attachment["contentType"]
        )
        should_download = self.config.download_attachments
        if not (maybe_inline or should_download):
            logger.debug("attachment_skipped", url=url, reason="not_inlineable")
            return False

        try:
            response = await self.download_attachment_with_retries(attachment)
        except FetchError as e:
            logger.warning(
                "attachment_download_failed", url=url, status_code=e.status_code
            )
            return False
        except Exception as e:
            logger.warning("attachment_download_failed", url=url, error=str(e))
            return False

        # Re-check now that the size and the server content type are known
        if self.can_put_attachment_inline(response.data, response.content_type):
            try:
                await self.inline_policy.inline_attachment_data(
                    attachment, response.data, response.content_type
                )
            except InlinerError as e:
                logger.warning("attachment_inline_failed", url=url, error=e.message)
                return False
            logger.info("attachment_inlined", url=url, size=attachment["size"])
        elif should_download:
            await self._persist(attachment, response.data)
            logger.info(
                "attachment_saved", url=url, path=attachment["url"], size=len(response.data)
            )
        else:
            logger.debug("attachment_skipped", url=url, reason="too_large_or_not_inlineable")
            return False

        self._emit_attachment(attachment)
        return True

    async def handle_attachment_references(self, resource: Record) -> Record:
        """
        Process every attachment of a DocumentReference, one after the other.

        Returns:
            The same resource, mutated in place.
        """
        for entry in resource.get("content") or []:
            attachment = entry.get("attachment") if isinstance(entry, dict) else None
            if not isinstance(attachment, dict):
                continue
            await self.handle_attachment(attachment)
        return resource

    async def transform(self, resource: Record) -> Record:
        """Return the resource, with attachments rewritten if it is a DocumentReference."""
        if resource.get("resourceType") != TARGET_RESOURCE_TYPE:
            return resource
        return await self.handle_attachment_references(resource)

    async def stream(
        self, resources: Union[Iterable[Record], AsyncIterable[Record]]
    ) -> AsyncIterator[Record]:
        """
        Transform resources one at a time, in order.

        The next resource is not pulled from ``resources`` until the current
        one, including its saves, has been fully handled.

        Raises:
            StreamError: If transforming a resource fails.
        """
        if hasattr(resources, "__aiter__"):
            async for resource in resources:
                yield await self._transform_or_fail(resource)
        else:
            for resource in resources:
                yield await self._transform_or_fail(resource)

    async def _transform_or_fail(self, resource: Any) -> Record:
        try:
            return await self.transform(resource)
        except Exception as e:
            raise StreamError(f"Failed to transform resource: {e}") from e
