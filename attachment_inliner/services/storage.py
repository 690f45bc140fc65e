"""
Local file system storage for downloaded attachments.
"""

from pathlib import Path
from typing import AsyncIterator, Union

import aiofiles

from attachment_inliner.exceptions import StorageError
from attachment_inliner.utils.logging import get_logger

logger = get_logger(__name__)


class FileSystemStorage:
    """Saves byte streams below a destination directory."""

    def __init__(self, destination: Union[str, Path]):
        self.destination = Path(destination)

    def path_for(self, file_name: str, sub_folder: str = "") -> Path:
        """Return where ``file_name`` is stored, rejecting names that escape the folder."""
        folder = self.destination / sub_folder if sub_folder else self.destination
        path = folder / file_name
        if path.resolve().parent != folder.resolve():
            raise StorageError("Invalid attachment file name", file_name=file_name)
        return path

    async def save(
        self, file_name: str, stream: AsyncIterator[bytes], sub_folder: str = ""
    ) -> Path:
        """
        Write ``stream`` to ``<destination>/<sub_folder>/<file_name>``.

        Args:
            file_name: Name of the file to create.
            stream: Async iterator of byte chunks.
            sub_folder: Folder below the destination, created if missing.

        Returns:
            Path of the written file.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = self.path_for(file_name, sub_folder)
        size = 0
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                async for chunk in stream:
                    await f.write(chunk)
                    size += len(chunk)
        except OSError as e:
            logger.error("attachment_save_failed", path=str(path), error=str(e))
            raise StorageError(f"Failed to save attachment: {e}", file_name=file_name) from e

        logger.debug("attachment_file_written", path=str(path), size=size)
        return path

    __call__ = save
