# pyntfsboot/scan/locate.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from ..core.constants import CLUSTER_SIZE, SECTOR_SIZE
from ..core.errors import DecodeFailure
from ..fs.mbr import GptProtective, PartitionEntry, PartitionTable, decode_mbr
from ..fs.ntfs.boot import NtfsBootSector, decode_ntfs_vbr

log = logging.getLogger(__name__)


@dataclass
class PartitionReport:
    entry: PartitionEntry
    vbr: Optional[NtfsBootSector] = None
    failure: Optional[DecodeFailure] = None
    mft_address: Optional[int] = None
    mftmirr_address: Optional[int] = None

    @property
    def valid(self) -> bool:
        return self.vbr is not None

    def as_dict(self) -> dict:
        d = {
            'slot': self.entry.slot,
            'bootable': self.entry.boot_indicator,
            'type': self.entry.partition_type,
            'starting_sector': self.entry.starting_sector,
            'valid_vbr': self.valid,
        }
        if self.vbr is not None:
            d['mft_lcn'] = self.vbr.mft_lcn
            d['mftmirr_lcn'] = self.vbr.mftmirr_lcn
            d['mft_address'] = self.mft_address
            d['mftmirr_address'] = self.mftmirr_address
        if self.failure is not None:
            d['error'] = self.failure.kind
        return d


@dataclass
class DiskReport:
    table: PartitionTable
    partitions: List[PartitionReport] = field(default_factory=list)

    @property
    def entries(self) -> Tuple[PartitionEntry, ...]:
        return self.table.entries


LocateResult = Union[DiskReport, GptProtective, DecodeFailure]


def read_sector(dev, lba: int, sector_size: int = SECTOR_SIZE) -> bytes:
    return dev.read(lba * sector_size, sector_size)


def inspect_partition(dev, entry: PartitionEntry, cluster_size: int = CLUSTER_SIZE,
                      use_bpb_geometry: bool = False) -> PartitionReport:
    """Read and decode the VBR of one NTFS partition entry."""
    raw = dev.read(entry.vbr_offset(SECTOR_SIZE), SECTOR_SIZE)
    result = decode_ntfs_vbr(raw)
    if isinstance(result, DecodeFailure):
        log.warning("slot %d: invalid VBR at sector %d (%s)", entry.slot, entry.starting_sector, result.message)
        return PartitionReport(entry=entry, failure=result)
    if use_bpb_geometry and result.bytes_per_sector and result.sectors_per_cluster:
        spc, bps = result.sectors_per_cluster, result.bytes_per_sector
    else:
        spc, bps = cluster_size, SECTOR_SIZE
    return PartitionReport(
        entry=entry,
        vbr=result,
        mft_address=result.mft_address(spc, bps),
        mftmirr_address=result.mftmirr_address(spc, bps),
    )


def locate_mft(dev, cluster_size: int = CLUSTER_SIZE, use_bpb_geometry: bool = False) -> LocateResult:
    """MBR -> NTFS entries -> VBRs -> $MFT / $MFTMirr byte addresses.

    Stops at a GPT protective MBR or an invalid MBR and returns that value.
    Device errors are not caught here.
    """
    table = decode_mbr(read_sector(dev, 0))
    if not isinstance(table, PartitionTable):
        return table
    report = DiskReport(table=table)
    for entry in table.ntfs_entries:
        report.partitions.append(inspect_partition(dev, entry, cluster_size, use_bpb_geometry))
    log.debug("%d NTFS partitions, %d with a valid VBR",
              len(report.partitions), sum(1 for p in report.partitions if p.valid))
    return report


def read_vbr_sectors(dev, entries: Iterable[PartitionEntry]) -> Iterator[Tuple[PartitionEntry, bytes]]:
    for entry in entries:
        yield entry, dev.read(entry.vbr_offset(SECTOR_SIZE), SECTOR_SIZE)
