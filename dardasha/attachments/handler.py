"""File attachment handler: stages at most one file for the next message."""

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

from ..encoding import to_data_uri
from ..errors import FileReadError, FileTooLargeError, UnsupportedFileTypeError
from ..models.chat import Attachment

logger = logging.getLogger(__name__)

MAX_ATTACHMENT_BYTES = 4 * 1024 * 1024

ACCEPTED_MIME_TYPES = ("application/pdf", "text/plain", "application/json", "text/csv")
ACCEPTED_MIME_PREFIXES = ("image/",)


def is_accepted_type(mime_type: str) -> bool:
    return mime_type in ACCEPTED_MIME_TYPES or mime_type.startswith(ACCEPTED_MIME_PREFIXES)


class FileAttachmentHandler:
    """Reads a user-selected file into a data URI and holds it until the next send."""

    def __init__(self, max_size_bytes: int = MAX_ATTACHMENT_BYTES):
        self.max_size_bytes = max_size_bytes
        self.staged: Optional[Attachment] = None

    @property
    def has_attachment(self) -> bool:
        return self.staged is not None

    async def select(self, path: Union[str, Path]) -> Attachment:
        """Stage a file, replacing any previously staged one.

        Raises:
            FileTooLargeError: Over the size ceiling; the staged file is unchanged.
            UnsupportedFileTypeError: Not an accepted type; the staged file is unchanged.
            FileReadError: The file could not be read; nothing stays staged.
        """
        file_path = Path(path).expanduser()
        mime_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        if not is_accepted_type(mime_type):
            raise UnsupportedFileTypeError(f"{file_path.name} has unsupported type {mime_type}")

        try:
            size = file_path.stat().st_size
        except OSError as e:
            self.staged = None
            raise FileReadError(f"Could not read {file_path}: {e}") from e

        if size > self.max_size_bytes:
            logger.info(f"Rejected {file_path.name}: {size} bytes > {self.max_size_bytes}")
            raise FileTooLargeError(f"{file_path.name} is {size} bytes; the limit is {self.max_size_bytes}")

        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, file_path.read_bytes)
        except OSError as e:
            logger.error(f"Error reading attachment {file_path}: {e}")
            self.staged = None
            raise FileReadError(f"Could not read {file_path}: {e}") from e

        # The file may have grown between stat() and read
        if len(data) > self.max_size_bytes:
            raise FileTooLargeError(f"{file_path.name} is {len(data)} bytes; the limit is {self.max_size_bytes}")

        self.staged = Attachment(
            data_uri=to_data_uri(data, mime_type),
            mime_type=mime_type,
            name=file_path.name,
            size_bytes=len(data),
        )
        logger.info(f"Staged attachment {file_path.name} ({mime_type}, {len(data)} bytes)")
        return self.staged

    def remove(self) -> Optional[Attachment]:
        """Drop the staged attachment, if any."""
        removed, self.staged = self.staged, None
        if removed:
            logger.info(f"Removed attachment {removed.name}")
        return removed

    def take(self) -> Optional[Attachment]:
        """Hand the staged attachment to a send and clear it."""
        attachment, self.staged = self.staged, None
        return attachment
