import dataclasses
import logging

import pytest

from fat16_backend.handler import FAT16Image, scan_image
from fat16_backend.errors import ShortReadError, ImageOpenError, FAT16CorruptionError
from fat16_backend.source import ImageSource

from conftest import build_image


class TestScanImage:
    def test_reports_named_entries(self, sample_image):
        scan = scan_image(ImageSource.from_bytes(sample_image))
        assert [(i, e.display_name) for i, e in scan.entries] == [
            (0, "MYDISK"), (1, "README.TXT"), (3, "DOCS")
        ]

    def test_boot_sector_and_geometry(self, sample_image):
        scan = scan_image(ImageSource.from_bytes(sample_image))
        assert scan.boot_sector.root_entries == 4
        assert scan.geometry.root_start == 8704
        assert scan.geometry.root_size == 128

    def test_reads_no_further_than_root_directory(self, sample_image):
        source = ImageSource.from_bytes(sample_image)
        scan_image(source)
        assert source.tell() == 8704 + 4 * 32

    def test_stop_at_end_marker(self, small_boot_sector, readme_entry):
        data = build_image(small_boot_sector, [readme_entry, dataclasses.replace(readme_entry, name=bytes(8)),
                                               dataclasses.replace(readme_entry, name=b'LATE    ')])
        assert len(scan_image(ImageSource.from_bytes(data)).entries) == 2
        assert len(scan_image(ImageSource.from_bytes(data), stop_at_end_marker=True).entries) == 1

    def test_image_smaller_than_boot_sector(self):
        with pytest.raises(ShortReadError):
            scan_image(ImageSource.from_bytes(bytes(300)))

    def test_root_offset_beyond_image(self, small_boot_sector):
        bs = dataclasses.replace(small_boot_sector, sectors_per_fat=0xFFFF)
        data = bs.pack() + bytes(8192)
        with pytest.raises(FAT16CorruptionError):
            scan_image(ImageSource.from_bytes(data))

    def test_root_directory_truncated(self, small_boot_sector, readme_entry):
        # Slot 1 holds only 8 of its 32 bytes
        data = build_image(small_boot_sector, [readme_entry])[:8704 + 40]
        with pytest.raises(ShortReadError) as exc_info:
            scan_image(ImageSource.from_bytes(data))
        assert exc_info.value.expected == 32
        assert exc_info.value.actual == 8
        assert exc_info.value.offset == 8704 + 32

    def test_truncated_after_end_marker(self, small_boot_sector, readme_entry):
        # Image ends right after the 0x00 end-of-directory slot
        data = build_image(small_boot_sector, [readme_entry])[:8704 + 64]
        scan = scan_image(ImageSource.from_bytes(data), stop_at_end_marker=True)
        assert [e.display_name for _, e in scan.entries] == ["README.TXT"]

        with pytest.raises(ShortReadError):
            scan_image(ImageSource.from_bytes(data))

    def test_truncated_root_directory_is_warned(self, small_boot_sector, readme_entry, caplog):
        data = build_image(small_boot_sector, [readme_entry])[:8704 + 64]
        with caplog.at_level(logging.WARNING):
            scan_image(ImageSource.from_bytes(data), stop_at_end_marker=True)
        assert "extends beyond end of image" in caplog.text

    def test_zero_bytes_per_sector(self, small_boot_sector):
        data = dataclasses.replace(small_boot_sector, bytes_per_sector=0).pack() + bytes(512)
        with pytest.raises(FAT16CorruptionError):
            scan_image(ImageSource.from_bytes(data))

    def test_bad_signature_is_warned_not_fatal(self, small_boot_sector, caplog):
        data = build_image(dataclasses.replace(small_boot_sector, signature=0x0000))
        with caplog.at_level(logging.WARNING):
            scan = scan_image(ImageSource.from_bytes(data))
        assert scan.entries == []
        assert "0xAA55" in caplog.text


class TestFAT16Image:
    def test_load_boot_sector(self, image_file):
        image = FAT16Image(str(image_file))
        assert image.boot_sector.bytes_per_sector == 512
        assert image.root_start == 8704
        assert image.root_entries == 4
        assert image.get_total_capacity() == 40 * 512

    def test_read_root_directory(self, image_file):
        image = FAT16Image(str(image_file))
        names = [e.display_name for _, e in image.read_root_directory()]
        assert names == ["MYDISK", "README.TXT", "DOCS"]

    def test_read_raw_directory_entries(self, image_file):
        image = FAT16Image(str(image_file))
        raw = image.read_raw_directory_entries()
        assert len(raw) == 4
        assert raw[2].is_unused

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageOpenError) as exc_info:
            FAT16Image(str(tmp_path / "missing.img"))
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_truncated_root_directory(self, tmp_path, small_boot_sector, readme_entry):
        img_path = tmp_path / "cut.img"
        img_path.write_bytes(build_image(small_boot_sector, [readme_entry])[:8704 + 64])
        image = FAT16Image(str(img_path))
        assert [e.display_name for _, e in image.read_root_directory(stop_at_end_marker=True)] == ["README.TXT"]
        with pytest.raises(ShortReadError):
            image.read_root_directory()

    def test_image_too_small(self, tmp_path):
        img_path = tmp_path / "tiny.img"
        img_path.write_bytes(b'\x00' * 100)
        with pytest.raises(ShortReadError):
            FAT16Image(str(img_path))


class TestImageSource:
    def test_size_preserves_position(self):
        source = ImageSource.from_bytes(bytes(1000))
        source.seek_absolute(100)
        assert source.size() == 1000
        assert source.tell() == 100

    def test_negative_seek(self):
        with pytest.raises(ValueError):
            ImageSource.from_bytes(bytes(10)).seek_absolute(-1)

    def test_open_directory_fails(self, tmp_path):
        with pytest.raises(ImageOpenError):
            ImageSource.open(str(tmp_path))
