# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FAT16 Directory Entries

This module provides the root directory decoding layer:
- Parsing 32-byte short filename (8.3) entries.
- Lazily iterating the fixed-size root directory region slot by slot.
- Filtering unused, end-of-directory and deleted slots for listing.

Long filename (VFAT) entries are not interpreted; they decode as ordinary
slots with attribute byte 0x0F.
"""

import struct
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from .errors import FAT16Error
from .fat_utils import (
    normalize_field, format_83_name, decode_fat_datetime, describe_attributes, FatTimestamp,
    DIR_ENTRY_SIZE, DIR_NAME_LEN, DIR_EXT_LEN, DIR_ATTR_OFFSET, DIR_RESERVED_OFFSET,
    DIR_RESERVED_LEN, DIR_LAST_MOD_TIME_OFFSET, DIR_LAST_MOD_DATE_OFFSET,
    DIR_START_CLUSTER_OFFSET, DIR_FILE_SIZE_OFFSET, DIR_END_MARKER, DIR_DELETED_MARKER,
    ATTR_READ_ONLY, ATTR_HIDDEN, ATTR_SYSTEM, ATTR_VOLUME_LABEL, ATTR_DIRECTORY, ATTR_ARCHIVE
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    """One 32-byte short filename slot. `attributes` keeps the raw bitmask."""

    name: bytes = b' ' * DIR_NAME_LEN
    ext: bytes = b' ' * DIR_EXT_LEN
    attributes: int = 0
    reserved: bytes = bytes(DIR_RESERVED_LEN)
    modify_time: int = 0
    modify_date: int = 0
    starting_cluster: int = 0
    file_size: int = 0

    @property
    def is_read_only(self) -> bool:
        return bool(self.attributes & ATTR_READ_ONLY)

    @property
    def is_hidden(self) -> bool:
        return bool(self.attributes & ATTR_HIDDEN)

    @property
    def is_system(self) -> bool:
        return bool(self.attributes & ATTR_SYSTEM)

    @property
    def is_volume_label(self) -> bool:
        return bool(self.attributes & ATTR_VOLUME_LABEL)

    @property
    def is_dir(self) -> bool:
        return bool(self.attributes & ATTR_DIRECTORY)

    @property
    def is_archive(self) -> bool:
        return bool(self.attributes & ATTR_ARCHIVE)

    @property
    def attribute_names(self) -> List[str]:
        return describe_attributes(self.attributes)

    @property
    def short_name(self) -> str:
        return normalize_field(self.name, DIR_NAME_LEN)

    @property
    def extension(self) -> str:
        return normalize_field(self.ext, DIR_EXT_LEN)

    @property
    def display_name(self) -> str:
        return format_83_name(self.short_name, self.extension)

    @property
    def is_unused(self) -> bool:
        """True when the normalized name is empty (slot is not reported)"""
        return self.short_name == ''

    @property
    def is_end_marker(self) -> bool:
        return self.name[0] == DIR_END_MARKER

    @property
    def is_deleted(self) -> bool:
        return self.name[0] == DIR_DELETED_MARKER

    @property
    def modified(self) -> FatTimestamp:
        return decode_fat_datetime(self.modify_date, self.modify_time)

    def pack(self) -> bytes:
        """Encode back into the 32-byte on-disk layout"""
        entry = bytearray(DIR_ENTRY_SIZE)
        entry[0:DIR_NAME_LEN] = _fixed(self.name, DIR_NAME_LEN)
        entry[DIR_NAME_LEN:DIR_ATTR_OFFSET] = _fixed(self.ext, DIR_EXT_LEN)
        entry[DIR_ATTR_OFFSET] = self.attributes
        entry[DIR_RESERVED_OFFSET:DIR_LAST_MOD_TIME_OFFSET] = _fixed(self.reserved, DIR_RESERVED_LEN)
        struct.pack_into('<HHHI', entry, DIR_LAST_MOD_TIME_OFFSET,
                         self.modify_time, self.modify_date, self.starting_cluster, self.file_size)
        return bytes(entry)


def _fixed(value: bytes, length: int) -> bytes:
    if len(value) != length:
        raise ValueError(f"Field must be exactly {length} bytes, got {len(value)}")
    return value


def parse_directory_entry(entry_data: bytes) -> DirectoryEntry:
    """Decode one 32-byte directory slot. Any attribute bit pattern is accepted."""
    if len(entry_data) != DIR_ENTRY_SIZE:
        raise FAT16Error(f"Directory entry must be {DIR_ENTRY_SIZE} bytes, got {len(entry_data)}")

    return DirectoryEntry(
        name=bytes(entry_data[0:DIR_NAME_LEN]),
        ext=bytes(entry_data[DIR_NAME_LEN:DIR_ATTR_OFFSET]),
        attributes=entry_data[DIR_ATTR_OFFSET],
        reserved=bytes(entry_data[DIR_RESERVED_OFFSET:DIR_LAST_MOD_TIME_OFFSET]),
        modify_time=struct.unpack('<H', entry_data[DIR_LAST_MOD_TIME_OFFSET:DIR_LAST_MOD_TIME_OFFSET+2])[0],
        modify_date=struct.unpack('<H', entry_data[DIR_LAST_MOD_DATE_OFFSET:DIR_LAST_MOD_DATE_OFFSET+2])[0],
        starting_cluster=struct.unpack('<H', entry_data[DIR_START_CLUSTER_OFFSET:DIR_START_CLUSTER_OFFSET+2])[0],
        file_size=struct.unpack('<I', entry_data[DIR_FILE_SIZE_OFFSET:DIR_FILE_SIZE_OFFSET+4])[0],
    )


def iter_directory_entries(source, count: int) -> Iterator[Tuple[int, DirectoryEntry]]:
    """
    Iterates through the 32-byte slots of the root directory.

    The source must already be positioned at the root directory offset. Slots
    are read sequentially with no seeking in between, and nothing is read
    until the generator is advanced.

    Args:
        source: An ImageSource positioned at the first slot.
        count: Number of slots to read (root_entries from the boot sector).

    Yields:
        A tuple of (int, DirectoryEntry): the slot index and its decoded entry.

    Raises:
        ShortReadError: If the image ends before a full slot could be read.
    """
    for i in range(count):
        yield i, parse_directory_entry(source.read_exactly(DIR_ENTRY_SIZE))


def read_root_directory(source, count: int, stop_at_end_marker: bool = False,
                        include_deleted: bool = True) -> List[Tuple[int, DirectoryEntry]]:
    """
    Reads the root directory and returns the slots worth reporting.

    Slots whose normalized name is empty are skipped but still consume a slot.
    By default a 0x00 first byte only skips that slot; with
    `stop_at_end_marker` it ends the scan as end-of-directory.

    Args:
        source: An ImageSource positioned at the root directory offset.
        count: Number of slots in the root directory.
        stop_at_end_marker: Stop at the first slot whose name starts with 0x00.
        include_deleted: Report slots whose name starts with 0xE5.

    Returns:
        A list of (slot index, DirectoryEntry) tuples in on-disk order.
    """
    return filter_directory_entries(iter_directory_entries(source, count),
                                    stop_at_end_marker=stop_at_end_marker,
                                    include_deleted=include_deleted)


def filter_directory_entries(slots: Iterable[Tuple[int, DirectoryEntry]], stop_at_end_marker: bool = False,
                             include_deleted: bool = True) -> List[Tuple[int, DirectoryEntry]]:
    """Apply the listing rules of read_root_directory to already decoded slots"""
    entries = []
    skipped = 0

    for i, entry in slots:
        if stop_at_end_marker and entry.is_end_marker:
            logger.debug(f"End-of-directory marker at slot {i}")
            break

        if entry.is_unused:
            skipped += 1
            continue

        if entry.is_deleted and not include_deleted:
            skipped += 1
            continue

        entries.append((i, entry))

    logger.debug(f"Root directory: {len(entries)} entries reported, {skipped} slots skipped")
    return entries
