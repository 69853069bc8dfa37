# Copyright (c) 2026 Stephen P Smith
# MIT License

"""Exceptions raised while decoding FAT16 images."""

from typing import Optional


class FAT16Error(Exception):
    """Base class for all FAT16 decoding errors"""
    pass


class ShortReadError(FAT16Error):
    """Raised when the image ends before a fixed-size record could be read"""

    def __init__(self, expected: int, actual: int, offset: Optional[int] = None):
        self.expected = expected
        self.actual = actual
        self.offset = offset
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"Short read{where}: expected {expected} bytes, got {actual}")


class ImageOpenError(FAT16Error):
    """Raised when the image file cannot be opened"""

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot open image '{path}': {cause.strerror or cause}")


class FAT16CorruptionError(FAT16Error):
    """Raised when boot sector values describe an impossible layout"""
    pass
