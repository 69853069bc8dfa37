# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
Image Source

Wraps a seekable binary stream behind the two operations the decoders need:
read exactly N bytes, and seek to an absolute offset. The cursor position is
the only state shared between the boot sector and directory decoders.
"""

import io
import os
import logging
from typing import BinaryIO

from .errors import ShortReadError, ImageOpenError

logger = logging.getLogger(__name__)


class ImageSource:
    """Sequential reader over a disk image (file or in-memory buffer)"""

    def __init__(self, stream: BinaryIO, name: str = '<stream>'):
        self.stream = stream
        self.name = name

    @classmethod
    def open(cls, image_path: str) -> 'ImageSource':
        """
        Open an image file for reading.

        Raises:
            ImageOpenError: If the file is missing, unreadable or a directory.
        """
        try:
            stream = open(image_path, 'rb')
        except OSError as e:
            logger.error(f"Cannot open image {image_path}: {e}")
            raise ImageOpenError(image_path, e) from e
        logger.debug(f"Opened image {image_path}")
        return cls(stream, name=image_path)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ImageSource':
        """Create a source over an in-memory image"""
        return cls(io.BytesIO(data), name='<memory>')

    def tell(self) -> int:
        return self.stream.tell()

    def size(self) -> int:
        """Total image size in bytes (cursor position is preserved)"""
        current = self.stream.tell()
        end = self.stream.seek(0, os.SEEK_END)
        self.stream.seek(current)
        return end

    def seek_absolute(self, offset: int):
        """Move the cursor to an absolute byte offset from the start of the image"""
        if offset < 0:
            raise ValueError(f"Negative seek offset: {offset}")
        self.stream.seek(offset, os.SEEK_SET)

    def read_exactly(self, count: int) -> bytes:
        """
        Read exactly `count` bytes from the current position.

        Raises:
            ShortReadError: If fewer bytes remain in the image.
        """
        offset = self.stream.tell()
        data = self.stream.read(count)
        if len(data) != count:
            logger.error(f"Short read in {self.name} at offset {offset}: {len(data)}/{count} bytes")
            raise ShortReadError(count, len(data), offset)
        return data

    def close(self):
        self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
