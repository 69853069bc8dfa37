# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FAT16 field helpers: on-disk layout constants, 8.3 name normalization,
packed date/time decoding and attribute flag naming.
"""

from typing import List, NamedTuple

# Record sizes
BOOT_SECTOR_SIZE = 512
DIR_ENTRY_SIZE = 32

# Directory entry layout
DIR_NAME_LEN = 8
DIR_EXT_LEN = 3
DIR_SHORT_NAME_LEN = DIR_NAME_LEN + DIR_EXT_LEN
DIR_ATTR_OFFSET = 11
DIR_RESERVED_OFFSET = 12
DIR_RESERVED_LEN = 10
DIR_LAST_MOD_TIME_OFFSET = 22
DIR_LAST_MOD_DATE_OFFSET = 24
DIR_START_CLUSTER_OFFSET = 26
DIR_FILE_SIZE_OFFSET = 28

# First-byte markers of a short name
DIR_END_MARKER = 0x00
DIR_DELETED_MARKER = 0xE5

# Boot sector signatures
BOOT_SIGNATURE = 0xAA55
EXTENDED_BOOT_SIGNATURE = 0x29

# Attribute bits
ATTR_READ_ONLY = 0x01
ATTR_HIDDEN = 0x02
ATTR_SYSTEM = 0x04
ATTR_VOLUME_LABEL = 0x08
ATTR_DIRECTORY = 0x10
ATTR_ARCHIVE = 0x20

ATTRIBUTE_NAMES = {
    ATTR_READ_ONLY: 'read-only',
    ATTR_HIDDEN: 'hidden',
    ATTR_SYSTEM: 'system',
    ATTR_VOLUME_LABEL: 'label',
    ATTR_DIRECTORY: 'dir',
    ATTR_ARCHIVE: 'archive',
}

# Field terminators for padded names
_NAME_TERMINATORS = (0x00, 0x20)


class FatTimestamp(NamedTuple):
    """Raw calendar components of a packed FAT date/time pair"""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int


def normalize_field(data: bytes, length: int) -> str:
    """Convert a fixed-width padded name field to a display string

    Scans the first `length` bytes left to right and stops at the first
    NUL (0x00) or space (0x20). Bytes before the stop are decoded as Latin-1.

    Args:
        data: Raw field bytes
        length: Fixed width of the field (8 for names, 3 for extensions)

    Returns:
        The normalized text, empty if the first byte is a terminator
    """
    field = bytes(data[:length])
    for pos, byte in enumerate(field):
        if byte in _NAME_TERMINATORS:
            field = field[:pos]
            break
    return field.decode('latin-1')


def format_83_name(name: str, ext: str) -> str:
    """Join a normalized name and extension as NAME.EXT (or NAME without extension)"""
    return f"{name}.{ext}" if ext else name


def decode_fat_date(date_value: int) -> tuple:
    """Decode FAT date format to (year, month, day)

    Bits 15-9: Year (0 = 1980, 127 = 2107)
    Bits 8-5: Month (1-12)
    Bits 4-0: Day (1-31)

    Values are passed through unchecked; a corrupt entry may yield month 0
    or day 31 of February.
    """
    year = ((date_value >> 9) & 0x7F) + 1980
    month = (date_value >> 5) & 0x0F
    day = date_value & 0x1F
    return year, month, day


def decode_fat_time(time_value: int) -> tuple:
    """Decode FAT time format to (hours, minutes, seconds)

    Bits 15-11: Hours (0-23)
    Bits 10-5: Minutes (0-59)
    Bits 4-0: Seconds/2 (0-29, multiply by 2 to get actual seconds)
    """
    hours = (time_value >> 11) & 0x1F
    minutes = (time_value >> 5) & 0x3F
    seconds = (time_value & 0x1F) * 2
    return hours, minutes, seconds


def decode_fat_datetime(date_value: int, time_value: int) -> FatTimestamp:
    """Decode a packed date/time pair into its calendar components"""
    return FatTimestamp(*decode_fat_date(date_value), *decode_fat_time(time_value))


def format_fat_timestamp(ts: FatTimestamp) -> str:
    """Format as YYYY-MM-DD HH:MM:SS without range checks"""
    return (f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d} "
            f"{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}")


def describe_attributes(attr: int) -> List[str]:
    """Return the names of the set attribute bits, lowest bit first

    Bits without a name (0x40, 0x80) are reported as hex, e.g. '0x40'.
    """
    names = []
    for bit in range(8):
        mask = 1 << bit
        if attr & mask:
            names.append(ATTRIBUTE_NAMES.get(mask, f"0x{mask:02X}"))
    return names
