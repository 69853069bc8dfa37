# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FAT16 image inspection backend.

Read-only decoding of the FAT16 boot sector and root directory.
"""

from .errors import FAT16Error, ShortReadError, ImageOpenError, FAT16CorruptionError
from .source import ImageSource
from .boot_sector import BootSector, VolumeGeometry, parse_boot_sector, read_boot_sector, compute_root_directory_offset
from .directory import DirectoryEntry, parse_directory_entry, iter_directory_entries, read_root_directory, filter_directory_entries
from .fat_utils import normalize_field, format_83_name, decode_fat_datetime, FatTimestamp
from .handler import FAT16Image, ImageScan, scan_image

__all__ = [
    'FAT16Error', 'ShortReadError', 'ImageOpenError', 'FAT16CorruptionError',
    'ImageSource',
    'BootSector', 'VolumeGeometry', 'parse_boot_sector', 'read_boot_sector',
    'compute_root_directory_offset',
    'DirectoryEntry', 'parse_directory_entry', 'iter_directory_entries', 'read_root_directory',
    'filter_directory_entries',
    'normalize_field', 'format_83_name', 'decode_fat_datetime', 'FatTimestamp',
    'FAT16Image', 'ImageScan', 'scan_image',
]
