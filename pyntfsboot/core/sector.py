# pyntfsboot/core/sector.py
from __future__ import annotations
from typing import Union

from .constants import SECTOR_SIZE
from .errors import SizeMismatch


def read_le(buf: bytes, offset: int, size: int) -> int:
    """Decode an unsigned little-endian integer of `size` bytes at `offset`."""
    if offset < 0 or offset + size > len(buf):
        raise SizeMismatch(f"{size}-byte field at offset {offset}", offset + size, len(buf))
    return int.from_bytes(buf[offset:offset + size], 'little', signed=False)


class SectorBuffer:
    """Exactly one 512-byte sector, copied at construction and never mutated."""

    __slots__ = ('_data',)

    def __init__(self, data: Union[bytes, bytearray, memoryview, 'SectorBuffer']) -> None:
        raw = bytes(data)
        if len(raw) != SECTOR_SIZE:
            raise SizeMismatch("sector", SECTOR_SIZE, len(raw))
        self._data = raw

    def __getitem__(self, idx):
        return self._data[idx]

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return self._data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SectorBuffer):
            return self._data == other._data
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        return f"SectorBuffer({self._data[:8].hex()}...{self._data[-2:].hex()})"

    def read_le(self, offset: int, size: int) -> int:
        return read_le(self._data, offset, size)
