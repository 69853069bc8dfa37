import struct

import pytest

from fat16_backend.directory import (
    DirectoryEntry, parse_directory_entry, iter_directory_entries, read_root_directory
)
from fat16_backend.errors import FAT16Error, ShortReadError
from fat16_backend.fat_utils import FatTimestamp
from fat16_backend.source import ImageSource

from conftest import README_DATE, README_TIME


def raw_entry(name=b'README  ', ext=b'TXT', attr=0x20, mtime=README_TIME, mdate=README_DATE,
              cluster=2, size=1234):
    entry = bytearray(32)
    entry[0:8] = name
    entry[8:11] = ext
    entry[11] = attr
    entry[12:22] = bytes(range(1, 11))
    entry[22:24] = struct.pack('<H', mtime)
    entry[24:26] = struct.pack('<H', mdate)
    entry[26:28] = struct.pack('<H', cluster)
    entry[28:32] = struct.pack('<I', size)
    return bytes(entry)


class TestParseDirectoryEntry:
    def test_fields(self):
        entry = parse_directory_entry(raw_entry())
        assert entry.name == b'README  '
        assert entry.ext == b'TXT'
        assert entry.attributes == 0x20
        assert entry.reserved == bytes(range(1, 11))
        assert entry.modify_time == README_TIME
        assert entry.modify_date == README_DATE
        assert entry.starting_cluster == 2
        assert entry.file_size == 1234

    def test_display_name(self):
        entry = parse_directory_entry(raw_entry())
        assert entry.short_name == "README"
        assert entry.extension == "TXT"
        assert entry.display_name == "README.TXT"

    def test_display_name_without_extension(self):
        entry = parse_directory_entry(raw_entry(name=b'DOCS    ', ext=b'   ', attr=0x10))
        assert entry.display_name == "DOCS"

    def test_modified_timestamp(self):
        entry = parse_directory_entry(raw_entry())
        assert entry.modified == FatTimestamp(2013, 1, 23, 12, 11, 0)

    def test_large_file_size(self):
        entry = parse_directory_entry(raw_entry(size=0xFFFFFFFF))
        assert entry.file_size == 4294967295

    def test_pack_reproduces_raw_bytes(self):
        data = raw_entry()
        assert parse_directory_entry(data).pack() == data

    def test_wrong_size_rejected(self):
        with pytest.raises(FAT16Error):
            parse_directory_entry(bytes(31))


class TestAttributes:
    def test_volume_label(self):
        entry = parse_directory_entry(raw_entry(name=b'MYDISK  ', ext=b'   ', attr=0x08))
        assert entry.is_volume_label
        assert not entry.is_dir
        assert not entry.is_archive
        assert entry.attribute_names == ['label']

    def test_directory(self):
        entry = parse_directory_entry(raw_entry(attr=0x10))
        assert entry.is_dir
        assert not entry.is_volume_label
        assert not entry.is_archive

    def test_archive(self):
        entry = parse_directory_entry(raw_entry(attr=0x20))
        assert entry.is_archive
        assert not entry.is_dir
        assert not entry.is_volume_label

    def test_combined_bits(self):
        entry = parse_directory_entry(raw_entry(attr=0x01 | 0x02 | 0x04 | 0x20))
        assert entry.is_read_only
        assert entry.is_hidden
        assert entry.is_system
        assert entry.is_archive
        assert not entry.is_dir
        assert entry.attributes == 0x27

    def test_unnamed_bits_are_kept(self):
        entry = parse_directory_entry(raw_entry(attr=0xFF))
        assert entry.attributes == 0xFF
        assert entry.attribute_names[-2:] == ['0x40', '0x80']


class TestSlotMarkers:
    def test_all_zero_slot_is_unused(self):
        entry = parse_directory_entry(bytes(32))
        assert entry.short_name == ""
        assert entry.is_unused
        assert entry.is_end_marker

    def test_space_slot_is_unused_but_not_end(self):
        entry = DirectoryEntry()
        assert entry.is_unused
        assert not entry.is_end_marker

    def test_deleted_slot(self):
        entry = parse_directory_entry(raw_entry(name=b'\xe5EADME  '))
        assert entry.is_deleted
        assert not entry.is_unused
        assert entry.display_name == "\xe5EADME.TXT"


def directory_source(*slots, trailing=b''):
    return ImageSource.from_bytes(b''.join(slots) + trailing)


class TestIterDirectoryEntries:
    def test_yields_index_and_entry(self):
        source = directory_source(raw_entry(), raw_entry(name=b'HELLO   ', ext=b'C  '))
        entries = list(iter_directory_entries(source, 2))
        assert [i for i, _ in entries] == [0, 1]
        assert entries[1][1].display_name == "HELLO.C"

    def test_reads_exactly_count_slots(self):
        # More data follows the region; none of it may be consumed
        source = directory_source(raw_entry(), bytes(32), trailing=bytes(320))
        entries = list(iter_directory_entries(source, 2))
        assert len(entries) == 2
        assert source.tell() == 64

    def test_is_lazy(self):
        source = directory_source(raw_entry(), raw_entry())
        iterator = iter_directory_entries(source, 2)
        assert source.tell() == 0
        next(iterator)
        assert source.tell() == 32

    def test_zero_count(self):
        source = directory_source(raw_entry())
        assert list(iter_directory_entries(source, 0)) == []
        assert source.tell() == 0

    def test_truncated_slot_raises(self):
        source = ImageSource.from_bytes(raw_entry() + bytes(8))
        iterator = iter_directory_entries(source, 2)
        next(iterator)
        with pytest.raises(ShortReadError) as exc_info:
            next(iterator)
        assert exc_info.value.expected == 32
        assert exc_info.value.actual == 8
        assert exc_info.value.offset == 32


class TestReadRootDirectory:
    def test_skips_unused_slots_and_keeps_scanning(self):
        source = directory_source(raw_entry(), bytes(32), b' ' * 11 + bytes(21),
                                  raw_entry(name=b'HELLO   ', ext=b'C  '))
        entries = read_root_directory(source, 4)
        assert [(i, e.display_name) for i, e in entries] == [(0, "README.TXT"), (3, "HELLO.C")]
        assert source.tell() == 128

    def test_stop_at_end_marker(self):
        source = directory_source(raw_entry(), bytes(32), raw_entry(name=b'HELLO   ', ext=b'C  '))
        entries = read_root_directory(source, 3, stop_at_end_marker=True)
        assert [e.display_name for _, e in entries] == ["README.TXT"]
        assert source.tell() == 64

    def test_deleted_entries_reported_by_default(self):
        source = directory_source(raw_entry(name=b'\xe5EADME  '), raw_entry(name=b'KEEP    '))
        entries = read_root_directory(source, 2)
        assert len(entries) == 2

    def test_skip_deleted(self):
        source = directory_source(raw_entry(name=b'\xe5EADME  '), raw_entry(name=b'KEEP    '))
        entries = read_root_directory(source, 2, include_deleted=False)
        assert [e.display_name for _, e in entries] == ["KEEP.TXT"]

    def test_empty_directory(self):
        source = directory_source(bytes(32 * 4))
        assert read_root_directory(source, 4) == []

    def test_truncated_directory_raises(self):
        source = directory_source(raw_entry())
        with pytest.raises(ShortReadError):
            read_root_directory(source, 2)
