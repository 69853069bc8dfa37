#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FAT16 Image Handler
Read-only inspection of FAT16 disk images: boot sector and root directory listing
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from .source import ImageSource
from .errors import FAT16CorruptionError
from .boot_sector import BootSector, VolumeGeometry, read_boot_sector, compute_root_directory_offset
from .directory import DirectoryEntry, iter_directory_entries, read_root_directory

logger = logging.getLogger(__name__)


@dataclass
class ImageScan:
    """Result of one pass over an image"""
    boot_sector: BootSector
    geometry: VolumeGeometry
    entries: List[Tuple[int, DirectoryEntry]]


def check_boot_sector(bs: BootSector, geometry: VolumeGeometry, image_size: int):
    """
    Guard the derived root directory offset against the actual image size.

    A region that starts inside the image but runs past its end is only
    warned about; the slot that cannot be read raises ShortReadError.

    Raises:
        FAT16CorruptionError: If the region cannot start inside the image.
    """
    if bs.bytes_per_sector == 0:
        logger.critical("Boot sector reports 0 bytes per sector")
        raise FAT16CorruptionError("Invalid boot sector: bytes per sector is 0")

    if geometry.root_start > image_size:
        logger.critical(f"Root directory offset {geometry.root_start} is beyond end of image ({image_size} bytes)")
        raise FAT16CorruptionError(
            f"Root directory offset {geometry.root_start} is beyond end of image ({image_size} bytes)")

    if geometry.root_end > image_size:
        logger.warning(f"Root directory ({bs.root_entries} entries at offset {geometry.root_start}) "
                       f"extends beyond end of image ({image_size} bytes)")


def warn_on_anomalies(bs: BootSector, geometry: VolumeGeometry):
    """Log structural oddities that do not prevent decoding"""
    if not bs.has_valid_signature:
        logger.warning(f"Non-standard boot sector signature 0x{bs.signature:04X} (expected 0xAA55)")

    if geometry.fat_type != 'FAT16':
        logger.warning(f"Cluster count {geometry.data_clusters} suggests {geometry.fat_type}, not FAT16")

    if bs.has_extended_bpb and not bs.fs_type_str.startswith('FAT16'):
        logger.warning(f"File system type label is '{bs.fs_type_str}'")


def scan_image(source: ImageSource, stop_at_end_marker: bool = False,
               include_deleted: bool = True) -> ImageScan:
    """
    Decode an image in a single pass: boot sector, one seek, root directory slots.

    Args:
        source: An ImageSource positioned at offset 0.
        stop_at_end_marker: Treat a 0x00 first name byte as end-of-directory.
        include_deleted: Report slots marked deleted (0xE5).

    Raises:
        ShortReadError: If the boot sector or a directory slot is truncated.
        FAT16CorruptionError: If the root directory starts beyond the end of the image.
    """
    bs = read_boot_sector(source)
    geometry = VolumeGeometry.from_boot_sector(bs)
    warn_on_anomalies(bs, geometry)
    check_boot_sector(bs, geometry, source.size())

    source.seek_absolute(geometry.root_start)
    entries = read_root_directory(source, bs.root_entries,
                                  stop_at_end_marker=stop_at_end_marker,
                                  include_deleted=include_deleted)
    return ImageScan(boot_sector=bs, geometry=geometry, entries=entries)


class FAT16Image:
    """Handler for FAT16 disk images"""

    def __init__(self, image_path: str):
        self.image_path = image_path
        logger.debug(f"Initializing FAT16Image with {image_path}")
        self.load_boot_sector()

    def load_boot_sector(self):
        """
        Read and parse the boot sector (first 512 bytes).

        Extracts the BIOS Parameter Block (BPB) and Extended BPB fields and
        derives the FAT, root directory and data region locations.

        Raises:
            ImageOpenError: If the image cannot be opened.
            ShortReadError: If the image is smaller than a boot sector.
            FAT16CorruptionError: If the root directory starts beyond the end of the image.
        """
        with ImageSource.open(self.image_path) as source:
            self.boot_sector = read_boot_sector(source)
            self.image_size = source.size()

        self.geometry = VolumeGeometry.from_boot_sector(self.boot_sector)
        warn_on_anomalies(self.boot_sector, self.geometry)
        check_boot_sector(self.boot_sector, self.geometry, self.image_size)

        logger.debug(f"Loaded boot sector: {self.geometry.fat_type}, {self.boot_sector.total_sectors} sectors, "
                     f"root directory at {self.geometry.root_start}")

    @property
    def root_start(self) -> int:
        return compute_root_directory_offset(self.boot_sector)

    @property
    def root_entries(self) -> int:
        return self.boot_sector.root_entries

    @property
    def fat_type(self) -> str:
        return self.geometry.fat_type

    def get_total_capacity(self) -> int:
        """
        Get total disk capacity in bytes.

        Returns:
            Total size calculated as total_sectors * bytes_per_sector.
        """
        return self.boot_sector.total_sectors * self.boot_sector.bytes_per_sector

    def read_root_directory(self, stop_at_end_marker: bool = False,
                            include_deleted: bool = True) -> List[Tuple[int, DirectoryEntry]]:
        """
        Read the root directory entries worth reporting.

        Returns:
            A list of (slot index, DirectoryEntry) tuples.
        """
        with ImageSource.open(self.image_path) as source:
            source.seek_absolute(self.root_start)
            return read_root_directory(source, self.root_entries,
                                       stop_at_end_marker=stop_at_end_marker,
                                       include_deleted=include_deleted)

    def read_raw_directory_entries(self) -> List[DirectoryEntry]:
        """Read every root directory slot, including unused ones"""
        with ImageSource.open(self.image_path) as source:
            source.seek_absolute(self.root_start)
            return [entry for _, entry in iter_directory_entries(source, self.root_entries)]
