"""File attachment handling."""

from .handler import FileAttachmentHandler, MAX_ATTACHMENT_BYTES

__all__ = [
    "FileAttachmentHandler",
    "MAX_ATTACHMENT_BYTES",
]
