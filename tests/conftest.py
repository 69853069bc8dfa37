import pytest

from fat16_backend.boot_sector import BootSector, compute_root_directory_offset
from fat16_backend.directory import DirectoryEntry
from fat16_backend.fat_utils import DIR_ENTRY_SIZE

# 2013-01-23 12:11:00
README_DATE = 0x4217
README_TIME = 0x6160


def build_image(bs: BootSector, entries=(), extra: int = 0) -> bytes:
    """Lay out a boot sector and root directory slots in an otherwise zeroed image"""
    root_start = compute_root_directory_offset(bs)
    size = max(root_start + bs.root_entries * DIR_ENTRY_SIZE, 512) + extra
    image = bytearray(size)
    image[0:512] = bs.pack()
    for i, entry in enumerate(entries):
        offset = root_start + i * DIR_ENTRY_SIZE
        image[offset:offset + DIR_ENTRY_SIZE] = entry.pack()
    return bytes(image)


@pytest.fixture
def small_boot_sector():
    # Root directory at (1 + 8 * 2) * 512 = 8704
    return BootSector(bytes_per_sector=512, sectors_per_cluster=4, reserved_sectors=1,
                      num_fats=2, sectors_per_fat=8, root_entries=4, total_sectors_16=40)


@pytest.fixture
def readme_entry():
    return DirectoryEntry(name=b'README  ', ext=b'TXT', attributes=0x20,
                          modify_time=README_TIME, modify_date=README_DATE,
                          starting_cluster=2, file_size=1234)


@pytest.fixture
def sample_entries(readme_entry):
    return [
        DirectoryEntry(name=b'MYDISK  ', ext=b'   ', attributes=0x08),
        readme_entry,
        DirectoryEntry(),  # all spaces: unused
        DirectoryEntry(name=b'DOCS    ', ext=b'   ', attributes=0x10, starting_cluster=3),
    ]


@pytest.fixture
def sample_image(small_boot_sector, sample_entries):
    return build_image(small_boot_sector, sample_entries, extra=64)


@pytest.fixture
def image_file(tmp_path, sample_image):
    img_path = tmp_path / "test.img"
    img_path.write_bytes(sample_image)
    return img_path
