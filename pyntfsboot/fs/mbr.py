# pyntfsboot/fs/mbr.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..core.constants import (
    BOOT_SIGNATURE, BOOT_SIGNATURE_OFFSET, ENTRY_BOOT_INDICATOR,
    ENTRY_SECTOR_COUNT, ENTRY_STARTING_SECTOR, ENTRY_TYPE,
    PARTITION_ENTRY_SIZE, PARTITION_SLOTS, PARTITION_TABLE_OFFSET,
    PARTITION_TABLE_SIZE, PART_TYPE_EMPTY, PART_TYPE_GPT_PROTECTIVE,
    PART_TYPE_NAMES, PART_TYPE_NTFS, SECTOR_SIZE,
)
from ..core.errors import DecodeError, DecodeFailure, InvalidMbrSignature, SizeMismatch
from ..core.sector import SectorBuffer, read_le

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartitionEntry:
    boot_indicator: bool
    partition_type: int
    starting_sector: int
    slot: int = 0
    sector_count: int = 0

    @property
    def is_ntfs(self) -> bool:
        return self.partition_type == PART_TYPE_NTFS

    @property
    def is_gpt_protective(self) -> bool:
        return self.partition_type == PART_TYPE_GPT_PROTECTIVE

    @property
    def type_name(self) -> str:
        return PART_TYPE_NAMES.get(self.partition_type, "Unknown")

    def vbr_offset(self, sector_size: int = SECTOR_SIZE) -> int:
        return self.starting_sector * sector_size


def parse_partition_entry(raw: bytes, slot: int = 0) -> Optional[PartitionEntry]:
    """Decode one 16-byte partition table slot; None when the slot is empty.

    Only a zero type byte marks an empty slot. Any nonzero boot indicator
    counts as bootable, not just 0x80.
    """
    if len(raw) != PARTITION_ENTRY_SIZE:
        raise SizeMismatch("partition entry", PARTITION_ENTRY_SIZE, len(raw))
    ptype = raw[ENTRY_TYPE]
    if ptype == PART_TYPE_EMPTY:
        return None
    return PartitionEntry(
        boot_indicator=raw[ENTRY_BOOT_INDICATOR] != 0,
        partition_type=ptype,
        starting_sector=read_le(raw, ENTRY_STARTING_SECTOR, 4),
        slot=slot,
        sector_count=read_le(raw, ENTRY_SECTOR_COUNT, 4),
    )


def decode_partition_entry(raw: bytes, slot: int = 0) -> Union[PartitionEntry, None, DecodeFailure]:
    try:
        return parse_partition_entry(bytes(raw), slot)
    except DecodeError as e:
        return DecodeFailure(e)


def has_boot_signature(sector: SectorBuffer) -> bool:
    return sector[BOOT_SIGNATURE_OFFSET:BOOT_SIGNATURE_OFFSET + 2] == BOOT_SIGNATURE


def check_boot_signature(sector: SectorBuffer) -> None:
    if not has_boot_signature(sector):
        raise InvalidMbrSignature(sector[BOOT_SIGNATURE_OFFSET:BOOT_SIGNATURE_OFFSET + 2])


@dataclass(frozen=True)
class MasterBootRecord:
    sector: SectorBuffer
    entries: Tuple[PartitionEntry, ...]

    @property
    def partition_table(self) -> bytes:
        return self.sector[PARTITION_TABLE_OFFSET:PARTITION_TABLE_OFFSET + PARTITION_TABLE_SIZE]

    @property
    def is_gpt_protective(self) -> bool:
        # only slot 0 decides; a 0xEE type elsewhere is just listed
        return bool(self.entries) and self.entries[0].slot == 0 and self.entries[0].is_gpt_protective

    @property
    def ntfs_entries(self) -> Tuple[PartitionEntry, ...]:
        return tuple(e for e in self.entries if e.is_ntfs)


def parse_mbr(sector) -> MasterBootRecord:
    if not isinstance(sector, SectorBuffer):
        sector = SectorBuffer(sector)
    check_boot_signature(sector)
    entries = []
    for slot in range(PARTITION_SLOTS):
        start = PARTITION_TABLE_OFFSET + slot * PARTITION_ENTRY_SIZE
        entry = parse_partition_entry(sector[start:start + PARTITION_ENTRY_SIZE], slot)
        if entry is None:
            log.debug("slot %d empty", slot)
            continue
        log.debug("slot %d: type=0x%02X start=%d", slot, entry.partition_type, entry.starting_sector)
        entries.append(entry)
    return MasterBootRecord(sector=sector, entries=tuple(entries))


@dataclass(frozen=True)
class PartitionTable:
    entries: Tuple[PartitionEntry, ...]
    mbr: Optional[MasterBootRecord] = None

    @property
    def ntfs_entries(self) -> Tuple[PartitionEntry, ...]:
        return tuple(e for e in self.entries if e.is_ntfs)


@dataclass(frozen=True)
class GptProtective:
    """Valid MBR whose first slot hands partitioning over to a GPT."""
    entry: PartitionEntry
    mbr: Optional[MasterBootRecord] = None


PartitionTableResult = Union[PartitionTable, GptProtective, DecodeFailure]


def decode_mbr(data) -> PartitionTableResult:
    try:
        mbr = parse_mbr(data)
    except DecodeError as e:
        log.debug("MBR rejected: %s", e)
        return DecodeFailure(e)
    if mbr.is_gpt_protective:
        return GptProtective(entry=mbr.entries[0], mbr=mbr)
    return PartitionTable(entries=mbr.entries, mbr=mbr)
