from dataclasses import dataclass, field
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Mapping,
    Optional,
    Protocol,
    Union,
)

Record = Dict[str, Any]
Attachment = Dict[str, Any]


@dataclass
class HttpResponse:
    """Represents the answer of a fetch collaborator."""
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class Fetch(Protocol):
    """Downloads a URL. Must not raise on HTTP error statuses."""

    def __call__(
        self, url: str, headers: Mapping[str, str], accept_binary: bool
    ) -> Awaitable[HttpResponse]: ...


class Save(Protocol):
    """Durably stores a byte stream as ``<sub_folder>/<file_name>``."""

    def __call__(
        self, file_name: str, stream: AsyncIterator[bytes], sub_folder: str
    ) -> Awaitable[Any]: ...


DownloadCompleteCallback = Callable[[str, int], None]
AttachmentCallback = Callable[[Attachment], None]
TextExtractor = Callable[[bytes], Union[bytes, Awaitable[bytes]]]
