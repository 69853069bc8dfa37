#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
fat16reader
Print the boot sector parameters and root directory listing of a FAT16 image
"""

import sys
import argparse
import logging
from typing import List, Optional, Tuple

from fat16_backend.handler import FAT16Image, ImageScan, scan_image
from fat16_backend.source import ImageSource
from fat16_backend.errors import FAT16Error, ImageOpenError
from fat16_backend.boot_sector import BootSector, VolumeGeometry
from fat16_backend.directory import DirectoryEntry
from fat16_backend.fat_utils import ATTRIBUTE_NAMES, DIR_ENTRY_SIZE, describe_attributes, format_fat_timestamp

logger = logging.getLogger("fat16reader")

PROG = 'fat16reader'

# Column widths
PAD_NAME = 23
PAD_VALUE = 10
PAD_COLUMN = 20


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure application-wide logging"""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w'))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def boot_sector_rows(bs: BootSector, geometry: VolumeGeometry, order: str = 'key') -> List[Tuple[str, str]]:
    """Name/value pairs for the boot sector block.

    `order` is 'key' (lexicographic by name) or 'layout' (on-disk field order).
    """
    rows = [
        ('sector size', str(bs.bytes_per_sector)),
        ('sectors per cluster', str(bs.sectors_per_cluster)),
        ('reserved sectors', str(bs.reserved_sectors)),
        ('fats number', str(bs.num_fats)),
        ('root entries', str(bs.root_entries)),
        ('root entries (bytes)', str(bs.root_entries * DIR_ENTRY_SIZE)),
        ('fat size (sectors)', str(bs.sectors_per_fat)),
        ('fat size (bytes)', str(geometry.fat_size_bytes)),
        ('signature', str(bs.boot_signature)),
        ('root directory offset', str(geometry.root_start)),
    ]
    if order == 'key':
        rows.sort(key=lambda row: row[0])
    return rows


def format_boot_sector(bs: BootSector, geometry: VolumeGeometry, order: str = 'key') -> str:
    lines = ["FAT16 image info:"]
    for name, value in boot_sector_rows(bs, geometry, order):
        lines.append(f"{name:>{PAD_NAME}}{value:>{PAD_VALUE}}")
    if not bs.has_valid_signature:
        lines.append(f"warning: boot sector signature is 0x{bs.signature:04X}, expected 0xAA55")
    return '\n'.join(lines)


def format_attributes(attr: int) -> str:
    """Flag name for an exact single-bit match, otherwise the names of all set bits"""
    if attr in ATTRIBUTE_NAMES:
        return ATTRIBUTE_NAMES[attr]
    return ','.join(describe_attributes(attr))


def format_entry(entry: DirectoryEntry) -> str:
    return (f"{entry.display_name:>{PAD_COLUMN}}"
            f"{format_fat_timestamp(entry.modified):>{PAD_COLUMN}}"
            f"{entry.file_size:>{PAD_COLUMN}}"
            f"{format_attributes(entry.attributes):>{PAD_COLUMN}}").rstrip()


def format_directory(entries: List[Tuple[int, DirectoryEntry]]) -> str:
    lines = ["", f"{'NAME':>{PAD_COLUMN}}{'DATE&TIME':>{PAD_COLUMN}}{'SIZE':>{PAD_COLUMN}}{'ATTRS':>{PAD_COLUMN}}"]
    for _, entry in entries:
        lines.append(format_entry(entry))
    return '\n'.join(lines)


def format_report(scan: ImageScan, order: str = 'key') -> str:
    return format_boot_sector(scan.boot_sector, scan.geometry, order) + '\n' + format_directory(scan.entries)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description='Show the boot sector and root directory of a FAT16 disk image.'
    )
    parser.add_argument('image', help='path to the FAT16 image file')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    parser.add_argument('--log-file', metavar='PATH', help='also write the log to PATH')
    parser.add_argument('--stop-at-end', action='store_true',
                        help='stop listing at the first slot whose name starts with 0x00')
    parser.add_argument('--skip-deleted', action='store_true',
                        help='omit slots marked deleted (0xE5)')
    parser.add_argument('--sort', choices=('key', 'layout'), default='key',
                        help='boot sector field order (default: key)')
    parser.add_argument('--gui', action='store_true', help='open the viewer windows instead of printing')
    return parser


def show_gui(image_path: str) -> int:
    from PySide6.QtWidgets import QApplication
    from gui.components import BootSectorViewer, DirectoryViewer

    image = FAT16Image(image_path)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    app.setApplicationName("FAT16Reader")
    app.setOrganizationName("FAT16Reader")
    app.setStyle('Fusion')

    boot_viewer = BootSectorViewer(image)
    dir_viewer = DirectoryViewer(image)
    boot_viewer.show()
    dir_viewer.show()
    return app.exec()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)
    logger.debug(f"Inspecting {args.image}")

    try:
        if args.gui:
            return show_gui(args.image)

        with ImageSource.open(args.image) as source:
            scan = scan_image(source, stop_at_end_marker=args.stop_at_end,
                              include_deleted=not args.skip_deleted)
    except ImageOpenError as e:
        print(f"[{PROG}] cannot open image: {e.cause.strerror or e.cause}", file=sys.stderr)
        return 1
    except FAT16Error as e:
        print(f"[{PROG}] {e}", file=sys.stderr)
        return 1

    print(format_report(scan, args.sort))
    return 0


if __name__ == "__main__":
    sys.exit(main())
