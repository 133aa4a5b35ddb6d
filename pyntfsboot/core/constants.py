# pyntfsboot/core/constants.py
from __future__ import annotations

# Sector geometry
SECTOR_SIZE = 512
CLUSTER_SIZE = 8  # sectors per cluster assumed when computing MFT addresses

# MBR layout
PARTITION_TABLE_OFFSET = 446
PARTITION_TABLE_SIZE = 64
PARTITION_ENTRY_SIZE = 16
PARTITION_SLOTS = 4
BOOT_SIGNATURE_OFFSET = 510
BOOT_SIGNATURE = b"\x55\xAA"

# Partition entry fields
ENTRY_BOOT_INDICATOR = 0
ENTRY_TYPE = 4
ENTRY_STARTING_SECTOR = 8
ENTRY_SECTOR_COUNT = 12

# Partition types
PART_TYPE_EMPTY = 0x00
PART_TYPE_NTFS = 0x07
PART_TYPE_GPT_PROTECTIVE = 0xEE

PART_TYPE_NAMES = {
    0x00: "Empty",
    0x01: "FAT12",
    0x04: "FAT16 <32MB",
    0x05: "Extended",
    0x06: "FAT16",
    0x07: "NTFS/exFAT",
    0x0B: "FAT32 CHS",
    0x0C: "FAT32 LBA",
    0x0E: "FAT16 LBA",
    0x0F: "Extended LBA",
    0x17: "Hidden NTFS",
    0x27: "Windows RE",
    0x42: "Dynamic disk",
    0x82: "Linux swap",
    0x83: "Linux",
    0x8E: "Linux LVM",
    0xEE: "GPT protective",
    0xEF: "EFI System",
}

# NTFS VBR layout
NTFS_SIGNATURE_OFFSET = 3
NTFS_SIGNATURE = b"NTFS    "
NTFS_BYTES_PER_SECTOR_OFFSET = 0x0B
NTFS_SECTORS_PER_CLUSTER_OFFSET = 0x0D
NTFS_TOTAL_SECTORS_OFFSET = 0x28
NTFS_VBR_MFT_OFFSET = 0x30
NTFS_VBR_MFTMIRR_OFFSET = 0x38
NTFS_CLUSTERS_PER_MFT_RECORD_OFFSET = 0x40
NTFS_CLUSTERS_PER_INDEX_BUFFER_OFFSET = 0x44
NTFS_SERIAL_NUMBER_OFFSET = 0x48

# Process exit codes
SUCCESS = 0
ARGUMENT_EXPECTED = 1
OPEN_ERROR = 2
READ_ERROR = 3
LSEEK_ERROR = 4
GPT_FORMATTED = 5
INVALID_MBR = 6
