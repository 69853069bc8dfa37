# Copyright (c) 2026 Stephen P Smith
# MIT License

import logging

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QTableWidget, QTableWidgetItem,
    QTabWidget, QHeaderView, QPushButton, QLabel
)
from PySide6.QtCore import Qt, QSettings

from fat16_backend.handler import FAT16Image
from fat16_backend.directory import filter_directory_entries
from fat16_backend.fat_utils import format_fat_timestamp

logger = logging.getLogger(__name__)


def make_field_table(rows) -> QTableWidget:
    """Read-only two column Field/Value table"""
    table = QTableWidget()
    table.setColumnCount(2)
    table.setHorizontalHeaderLabels(['Field', 'Value'])
    table.horizontalHeader().setStretchLastSection(True)
    table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
    table.setAlternatingRowColors(True)

    table.setRowCount(len(rows))
    for i, (field, value) in enumerate(rows):
        table.setItem(i, 0, QTableWidgetItem(field))
        table.setItem(i, 1, QTableWidgetItem(value))

    table.resizeColumnsToContents()
    return table


class RememberGeometryMixin:
    """Restore and save dialog geometry through QSettings"""

    settings_key = ''

    def restore_geometry(self):
        self.settings = QSettings('FAT16Reader', 'Settings')
        geometry = self.settings.value(self.settings_key)
        if geometry:
            self.restoreGeometry(geometry)

    def done(self, result):
        self.settings.setValue(self.settings_key, self.saveGeometry())
        super().done(result)


class BootSectorViewer(RememberGeometryMixin, QDialog):
    """Dialog to view boot sector information"""

    settings_key = 'boot_viewer_geometry'

    def __init__(self, image: FAT16Image, parent=None):
        super().__init__(parent)
        self.image = image
        logger.debug("Opening Boot Sector Viewer")
        self.setup_ui()
        self.restore_geometry()

    def setup_ui(self):
        """Setup the viewer UI"""
        self.setWindowTitle("Boot Sector Information")

        layout = QVBoxLayout(self)
        self.tabs = QTabWidget()

        bs = self.image.boot_sector
        geometry = self.image.geometry

        signature = f'0x{bs.signature:04X}'
        if not bs.has_valid_signature:
            signature += ' (Non-standard)'

        bpb_data = [
            ('OEM Name', bs.oem_name_str),
            ('Bytes per Sector', str(bs.bytes_per_sector)),
            ('Sectors per Cluster', str(bs.sectors_per_cluster)),
            ('Reserved Sectors', str(bs.reserved_sectors)),
            ('Number of FATs', str(bs.num_fats)),
            ('Root Directory Entries', str(bs.root_entries)),
            ('Total Sectors', str(bs.total_sectors)),
            ('Media Descriptor', f'0x{bs.media_descriptor:02X}'),
            ('Sectors per FAT', str(bs.sectors_per_fat)),
            ('Sectors per Track', str(bs.sectors_per_track)),
            ('Number of Heads', str(bs.number_of_heads)),
            ('Hidden Sectors', str(bs.hidden_sectors)),
            ('Signature', signature),
        ]
        self.tabs.addTab(make_field_table(bpb_data), "BIOS Parameter Block")

        # Only show if signature is 0x29 (Extended BPB present)
        if bs.has_extended_bpb:
            ebpb_data = [
                ('Drive Number', f'0x{bs.drive_number:02X}'),
                ('Reserved', f'0x{bs.reserved_ebpb:02X}'),
                ('Boot Signature', f'0x{bs.boot_signature:02X} (Valid)'),
                ('Volume ID', f'0x{bs.volume_id:08X}'),
                ('Volume Label', bs.volume_label_str),
                ('File System Type', bs.fs_type_str),
            ]
            self.tabs.addTab(make_field_table(ebpb_data), "Extended BPB")

        total_bytes = self.image.get_total_capacity()
        vol_geom_data = [
            ('Detected File System Type', geometry.fat_type),
            ('FAT Start Offset', f'{geometry.fat_start:,} bytes'),
            ('Root Directory Start', f'{geometry.root_start:,} bytes'),
            ('Root Directory Size', f'{geometry.root_size:,} bytes'),
            ('Data Area Start', f'{geometry.data_start:,} bytes'),
            ('Bytes per Cluster', str(geometry.bytes_per_cluster)),
            ('Total Data Sectors', str(geometry.total_data_sectors)),
            ('Total Capacity', f'{total_bytes:,} bytes ({total_bytes / 1024 / 1024:.2f} MB)'),
        ]
        self.tabs.addTab(make_field_table(vol_geom_data), "Volume Geometry")

        layout.addWidget(self.tabs)

        # Close button in a horizontal layout (right-aligned)
        button_layout = QHBoxLayout()
        button_layout.addStretch()
        close_btn = QPushButton("Close")
        close_btn.setFixedWidth(100)
        close_btn.clicked.connect(self.accept)
        button_layout.addWidget(close_btn)
        layout.addLayout(button_layout)

        self.adjustSize()
        self.setMinimumSize(380, 470)


class DirectoryViewer(RememberGeometryMixin, QDialog):
    """Dialog to view root directory entries with raw slot tooltips"""

    settings_key = 'directory_viewer_geometry'

    def __init__(self, image: FAT16Image, parent=None):
        super().__init__(parent)
        self.image = image
        self.raw_entries = []
        logger.debug("Opening Directory Viewer")
        self.setup_ui()
        self.restore_geometry()

    def format_raw_entry_tooltip(self, index: int) -> str:
        """Hex dump of the 32-byte slot, 16 bytes per line"""
        if index >= len(self.raw_entries):
            return "Invalid entry index"

        raw = self.raw_entries[index].pack()
        lines = [f"Slot #{index}"]
        for start in range(0, len(raw), 16):
            lines.append(f"{start:02X}: " + ' '.join(f"{b:02X}" for b in raw[start:start + 16]))
        return '\n'.join(lines)

    def setup_ui(self):
        """Setup the viewer UI"""
        self.setWindowTitle("Root Directory")

        layout = QVBoxLayout(self)

        self.raw_entries = self.image.read_raw_directory_entries()
        entries = filter_directory_entries(enumerate(self.raw_entries))

        info_label = QLabel(
            f"Total entries: {len(entries)} of {self.image.root_entries} slots | "
            f"Root directory at offset {self.image.root_start:,} | Each entry is 32 bytes"
        )
        info_label.setStyleSheet("QLabel { font-weight: bold; padding: 5px; }")
        layout.addWidget(info_label)

        self.table = QTableWidget()
        self.table.setColumnCount(12)
        self.table.setHorizontalHeaderLabels([
            'Index',
            'Name',
            'Size (bytes)',
            'Last Modified',
            'Attributes',
            'Cluster',
            'Read-Only',
            'Hidden',
            'System',
            'Label',
            'Directory',
            'Archive'
        ])

        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.setAlternatingRowColors(True)

        self.table.setRowCount(len(entries))
        for row, (index, entry) in enumerate(entries):
            tooltip = self.format_raw_entry_tooltip(index)

            size_item = QTableWidgetItem(f"{entry.file_size:,}")
            size_item.setData(Qt.ItemDataRole.UserRole, entry.file_size)

            cells = [
                QTableWidgetItem(str(index)),
                QTableWidgetItem(entry.display_name),
                size_item,
                QTableWidgetItem(format_fat_timestamp(entry.modified)),
                QTableWidgetItem(f"0x{entry.attributes:02X}"),
                QTableWidgetItem(str(entry.starting_cluster)),
            ]
            for flag in (entry.is_read_only, entry.is_hidden, entry.is_system,
                         entry.is_volume_label, entry.is_dir, entry.is_archive):
                cells.append(QTableWidgetItem('Yes' if flag else 'No'))

            for col, item in enumerate(cells):
                item.setToolTip(tooltip)
                self.table.setItem(row, col, item)

        header = self.table.horizontalHeader()
        for col in range(self.table.columnCount()):
            header.setSectionResizeMode(col, QHeaderView.ResizeMode.ResizeToContents)

        layout.addWidget(self.table)

        # Close button in a horizontal layout (right-aligned)
        button_layout = QHBoxLayout()
        button_layout.addStretch()
        close_btn = QPushButton("Close")
        close_btn.setFixedWidth(100)
        close_btn.clicked.connect(self.accept)
        button_layout.addWidget(close_btn)
        layout.addLayout(button_layout)

        self.adjustSize()
        self.setMinimumSize(1000, 500)
