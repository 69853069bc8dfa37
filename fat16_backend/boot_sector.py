# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FAT16 Boot Sector

Decoding of the 512-byte boot sector: the BIOS Parameter Block (BPB), the
extended boot record, the opaque boot code and the trailing 0xAA55 signature.
Also derives the on-disk location of the FAT, root directory and data regions.
"""

import struct
import logging
from dataclasses import dataclass

from .errors import FAT16Error
from .fat_utils import (BOOT_SECTOR_SIZE, DIR_ENTRY_SIZE, BOOT_SIGNATURE,
                        EXTENDED_BOOT_SIGNATURE)

logger = logging.getLogger(__name__)

# Microsoft FAT type thresholds (data cluster count)
FAT12_MAX_CLUSTERS = 4085
FAT16_MAX_CLUSTERS = 65525


@dataclass(frozen=True)
class BootSector:
    """Decoded FAT16 boot sector. Byte-array fields are kept verbatim."""

    jump_boot: bytes = b'\xEB\x3C\x90'
    oem_name: bytes = b'MSDOS5.0'
    bytes_per_sector: int = 512
    sectors_per_cluster: int = 4
    reserved_sectors: int = 1
    num_fats: int = 2
    root_entries: int = 512
    total_sectors_16: int = 0
    media_descriptor: int = 0xF8
    sectors_per_fat: int = 0
    sectors_per_track: int = 32
    number_of_heads: int = 64
    hidden_sectors: int = 0
    total_sectors_32: int = 0

    # Extended boot record
    drive_number: int = 0x80
    reserved_ebpb: int = 0
    boot_signature: int = EXTENDED_BOOT_SIGNATURE
    volume_id: int = 0
    volume_label: bytes = b'NO NAME    '
    fs_type: bytes = b'FAT16   '

    boot_code: bytes = bytes(448)
    signature: int = BOOT_SIGNATURE

    @property
    def total_sectors(self) -> int:
        """Sector count, from the 32-bit field when the 16-bit one is zero"""
        if self.total_sectors_16 != 0:
            return self.total_sectors_16
        return self.total_sectors_32

    @property
    def has_valid_signature(self) -> bool:
        return self.signature == BOOT_SIGNATURE

    @property
    def has_extended_bpb(self) -> bool:
        return self.boot_signature == EXTENDED_BOOT_SIGNATURE

    @property
    def oem_name_str(self) -> str:
        return self.oem_name.decode('ascii', errors='ignore').rstrip()

    @property
    def volume_label_str(self) -> str:
        return self.volume_label.decode('ascii', errors='ignore').rstrip()

    @property
    def fs_type_str(self) -> str:
        return self.fs_type.decode('ascii', errors='ignore').rstrip()

    def pack(self) -> bytes:
        """Encode back into the 512-byte on-disk layout"""
        boot_sector = bytearray(BOOT_SECTOR_SIZE)
        boot_sector[0:3] = _fixed(self.jump_boot, 3)
        boot_sector[3:11] = _fixed(self.oem_name, 8)
        boot_sector[11:13] = self.bytes_per_sector.to_bytes(2, 'little')
        boot_sector[13] = self.sectors_per_cluster
        boot_sector[14:16] = self.reserved_sectors.to_bytes(2, 'little')
        boot_sector[16] = self.num_fats
        boot_sector[17:19] = self.root_entries.to_bytes(2, 'little')
        boot_sector[19:21] = self.total_sectors_16.to_bytes(2, 'little')
        boot_sector[21] = self.media_descriptor
        boot_sector[22:24] = self.sectors_per_fat.to_bytes(2, 'little')
        boot_sector[24:26] = self.sectors_per_track.to_bytes(2, 'little')
        boot_sector[26:28] = self.number_of_heads.to_bytes(2, 'little')
        boot_sector[28:32] = self.hidden_sectors.to_bytes(4, 'little')
        boot_sector[32:36] = self.total_sectors_32.to_bytes(4, 'little')

        # Extended BPB
        boot_sector[36] = self.drive_number
        boot_sector[37] = self.reserved_ebpb
        boot_sector[38] = self.boot_signature
        boot_sector[39:43] = self.volume_id.to_bytes(4, 'little')
        boot_sector[43:54] = _fixed(self.volume_label, 11)
        boot_sector[54:62] = _fixed(self.fs_type, 8)

        boot_sector[62:510] = _fixed(self.boot_code, 448)
        boot_sector[510:512] = self.signature.to_bytes(2, 'little')
        return bytes(boot_sector)


def _fixed(value: bytes, length: int) -> bytes:
    if len(value) != length:
        raise ValueError(f"Field must be exactly {length} bytes, got {len(value)}")
    return value


def parse_boot_sector(boot_sector: bytes) -> BootSector:
    """
    Interpret 512 raw bytes as a FAT16 boot sector.

    Multi-byte integers are little-endian and every field sits at its fixed
    BPB offset. No value is validated here.

    Raises:
        FAT16Error: If the buffer is not exactly 512 bytes.
    """
    if len(boot_sector) != BOOT_SECTOR_SIZE:
        raise FAT16Error(f"Boot sector must be {BOOT_SECTOR_SIZE} bytes, got {len(boot_sector)}")

    bs = BootSector(
        jump_boot=bytes(boot_sector[0:3]),
        oem_name=bytes(boot_sector[3:11]),
        bytes_per_sector=struct.unpack('<H', boot_sector[11:13])[0],
        sectors_per_cluster=boot_sector[13],
        reserved_sectors=struct.unpack('<H', boot_sector[14:16])[0],
        num_fats=boot_sector[16],
        root_entries=struct.unpack('<H', boot_sector[17:19])[0],
        total_sectors_16=struct.unpack('<H', boot_sector[19:21])[0],
        media_descriptor=boot_sector[21],
        sectors_per_fat=struct.unpack('<H', boot_sector[22:24])[0],
        sectors_per_track=struct.unpack('<H', boot_sector[24:26])[0],
        number_of_heads=struct.unpack('<H', boot_sector[26:28])[0],
        hidden_sectors=struct.unpack('<I', boot_sector[28:32])[0],
        total_sectors_32=struct.unpack('<I', boot_sector[32:36])[0],
        drive_number=boot_sector[36],
        reserved_ebpb=boot_sector[37],
        boot_signature=boot_sector[38],
        volume_id=struct.unpack('<I', boot_sector[39:43])[0],
        volume_label=bytes(boot_sector[43:54]),
        fs_type=bytes(boot_sector[54:62]),
        boot_code=bytes(boot_sector[62:510]),
        signature=struct.unpack('<H', boot_sector[510:512])[0],
    )
    logger.debug(f"Parsed boot sector: {bs.bytes_per_sector} bytes/sector, "
                 f"{bs.num_fats} FATs of {bs.sectors_per_fat} sectors, {bs.root_entries} root entries")
    return bs


def read_boot_sector(source) -> BootSector:
    """
    Read and decode the boot sector from an ImageSource positioned at offset 0.

    Advances the source by 512 bytes.

    Raises:
        ShortReadError: If the image holds fewer than 512 bytes.
    """
    return parse_boot_sector(source.read_exactly(BOOT_SECTOR_SIZE))


def compute_root_directory_offset(boot_sector: BootSector) -> int:
    """Byte offset of the root directory: (reserved + FAT size * FAT count) * sector size"""
    return (boot_sector.reserved_sectors
            + boot_sector.sectors_per_fat * boot_sector.num_fats) * boot_sector.bytes_per_sector


@dataclass(frozen=True)
class VolumeGeometry:
    """Region layout derived from a boot sector"""

    fat_start: int
    fat_size_bytes: int
    root_start: int
    root_size: int
    data_start: int
    bytes_per_cluster: int
    total_data_sectors: int
    data_clusters: int
    fat_type: str

    @classmethod
    def from_boot_sector(cls, bs: BootSector) -> 'VolumeGeometry':
        fat_start = bs.reserved_sectors * bs.bytes_per_sector
        fat_size_bytes = bs.sectors_per_fat * bs.bytes_per_sector
        root_start = compute_root_directory_offset(bs)
        root_size = bs.root_entries * DIR_ENTRY_SIZE
        data_start = root_start + root_size
        bytes_per_cluster = bs.bytes_per_sector * bs.sectors_per_cluster

        # Calculate number of clusters in the data area
        if bs.bytes_per_sector and bs.sectors_per_cluster:
            non_data_sectors = data_start // bs.bytes_per_sector
            total_data_sectors = max(0, bs.total_sectors - non_data_sectors)
            data_clusters = total_data_sectors // bs.sectors_per_cluster
        else:
            total_data_sectors = 0
            data_clusters = 0

        if bytes_per_cluster == 0:
            fat_type = 'unknown'
        elif data_clusters < FAT12_MAX_CLUSTERS:
            fat_type = 'FAT12'
        elif data_clusters < FAT16_MAX_CLUSTERS:
            fat_type = 'FAT16'
        else:
            fat_type = 'FAT32'

        return cls(
            fat_start=fat_start,
            fat_size_bytes=fat_size_bytes,
            root_start=root_start,
            root_size=root_size,
            data_start=data_start,
            bytes_per_cluster=bytes_per_cluster,
            total_data_sectors=total_data_sectors,
            data_clusters=data_clusters,
            fat_type=fat_type,
        )

    @property
    def root_end(self) -> int:
        return self.data_start
