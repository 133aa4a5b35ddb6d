"""Builders for synthetic MBR / NTFS boot sectors and small disk images used by the tests."""

from __future__ import annotations
import struct
from typing import Dict, Iterable, Optional, Tuple

SECTOR = 512


def make_entry(ptype: int, start: int, count: int = 0, boot: int = 0x00) -> bytes:
    raw = bytearray(16)
    raw[0] = boot
    raw[4] = ptype
    struct.pack_into('<II', raw, 8, start, count)
    return bytes(raw)


def make_mbr(entries: Iterable[Optional[bytes]] = (), signature: bytes = b"\x55\xAA") -> bytes:
    buf = bytearray(SECTOR)
    buf[0:3] = b"\xEB\x63\x90"
    for i, e in enumerate(entries):
        if e is not None:
            buf[446 + 16 * i:462 + 16 * i] = e
    buf[510:512] = signature
    return bytes(buf)


def make_ntfs_vbr(mft_lcn: int = 4, mftmirr_lcn: int = 0x1869C0, *,
                  oem: bytes = b"NTFS    ", signature: bytes = b"\x55\xAA",
                  bytes_per_sector: int = 512, sectors_per_cluster: int = 8,
                  total_sectors: int = 0x186A000, clusters_per_mft_record: int = -10,
                  serial: int = 0x1122334455667788) -> bytes:
    buf = bytearray(SECTOR)
    buf[0:3] = b"\xEB\x52\x90"
    buf[3:11] = oem
    struct.pack_into('<H', buf, 0x0B, bytes_per_sector)
    buf[0x0D] = sectors_per_cluster & 0xFF
    struct.pack_into('<Q', buf, 0x28, total_sectors)
    struct.pack_into('<Q', buf, 0x30, mft_lcn)
    struct.pack_into('<Q', buf, 0x38, mftmirr_lcn)
    struct.pack_into('<b', buf, 0x40, clusters_per_mft_record)
    struct.pack_into('<b', buf, 0x44, 1)
    struct.pack_into('<Q', buf, 0x48, serial)
    buf[510:512] = signature
    return bytes(buf)


class MemoryDisk:
    """Sparse in-memory byte source: unset sectors read back as zeros."""

    def __init__(self, sectors: Dict[int, bytes], total_sectors: int = 1 << 20) -> None:
        self._sectors = dict(sectors)
        self.size = total_sectors * SECTOR
        self.reads: list = []
        self.closed = False

    def read(self, offset: int, size: int) -> bytes:
        self.reads.append((offset, size))
        lba, rem = divmod(offset, SECTOR)
        assert rem == 0 and size == SECTOR
        return self._sectors.get(lba, bytes(SECTOR))

    def close(self) -> None:
        self.closed = True


def ntfs_disk() -> Tuple[MemoryDisk, Dict[int, bytes]]:
    """One bootable NTFS partition at sector 2048 and a Linux partition at 4096."""
    sectors = {
        0: make_mbr([make_entry(0x07, 2048, 2048, boot=0x80), make_entry(0x83, 4096, 4096)]),
        2048: make_ntfs_vbr(mft_lcn=4, mftmirr_lcn=0x1869C0),
        4096: b"\xEB\x3C\x90" + bytes(509),
    }
    return MemoryDisk(sectors), sectors


def write_image(path: str, sectors: Dict[int, bytes]) -> None:
    last = max(sectors)
    with open(path, 'wb') as f:
        f.truncate((last + 1) * SECTOR)
        for lba, raw in sectors.items():
            f.seek(lba * SECTOR)
            f.write(raw)
