# pyntfsboot/fs/ntfs/boot.py
from __future__ import annotations
import logging
import struct
from dataclasses import dataclass
from typing import Union

from ...core.constants import (
    CLUSTER_SIZE, NTFS_BYTES_PER_SECTOR_OFFSET,
    NTFS_CLUSTERS_PER_INDEX_BUFFER_OFFSET, NTFS_CLUSTERS_PER_MFT_RECORD_OFFSET,
    NTFS_SECTORS_PER_CLUSTER_OFFSET, NTFS_SERIAL_NUMBER_OFFSET, NTFS_SIGNATURE,
    NTFS_SIGNATURE_OFFSET, NTFS_TOTAL_SECTORS_OFFSET, NTFS_VBR_MFT_OFFSET,
    NTFS_VBR_MFTMIRR_OFFSET, SECTOR_SIZE,
)
from ...core.errors import DecodeError, DecodeFailure, NotNtfs
from ...core.sector import SectorBuffer, read_le
from ..mbr import check_boot_signature
from .address import byte_address

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NtfsBootSector:
    sector: SectorBuffer
    oem_id: bytes
    bytes_per_sector: int
    sectors_per_cluster: int
    mft_lcn: int
    mftmirr_lcn: int
    clusters_per_mft_record: int  # signed: negative means 2^|c| bytes
    clusters_per_index_buffer: int
    total_sectors: int
    serial_number: int

    @property
    def cluster_size(self) -> int:
        return self.bytes_per_sector * self.sectors_per_cluster

    @property
    def mft_record_size(self) -> int:
        c = self.clusters_per_mft_record
        if c < 0:
            return 1 << (-c)
        return c * self.cluster_size

    def mft_address(self, cluster_size_sectors: int = CLUSTER_SIZE, sector_size: int = SECTOR_SIZE) -> int:
        return byte_address(self.mft_lcn, cluster_size_sectors, sector_size)

    def mftmirr_address(self, cluster_size_sectors: int = CLUSTER_SIZE, sector_size: int = SECTOR_SIZE) -> int:
        return byte_address(self.mftmirr_lcn, cluster_size_sectors, sector_size)


def _sectors_per_cluster(raw: int) -> int:
    # above 0x80 the byte is a negative shift count (large-cluster volumes)
    if raw > 0x80:
        return 1 << (256 - raw)
    return raw


def has_ntfs_signature(sector: SectorBuffer) -> bool:
    return sector[NTFS_SIGNATURE_OFFSET:NTFS_SIGNATURE_OFFSET + len(NTFS_SIGNATURE)] == NTFS_SIGNATURE


def parse_ntfs_vbr(sector) -> NtfsBootSector:
    """Validate an NTFS volume boot record and decode its BPB.

    The 0x55AA trailer is checked before the "NTFS    " OEM id, so a sector
    without the trailer is never looked at further.
    """
    if not isinstance(sector, SectorBuffer):
        sector = SectorBuffer(sector)
    check_boot_signature(sector)
    if not has_ntfs_signature(sector):
        raise NotNtfs(sector[NTFS_SIGNATURE_OFFSET:NTFS_SIGNATURE_OFFSET + len(NTFS_SIGNATURE)])

    raw = bytes(sector)
    return NtfsBootSector(
        sector=sector,
        oem_id=raw[NTFS_SIGNATURE_OFFSET:NTFS_SIGNATURE_OFFSET + len(NTFS_SIGNATURE)],
        bytes_per_sector=read_le(raw, NTFS_BYTES_PER_SECTOR_OFFSET, 2),
        sectors_per_cluster=_sectors_per_cluster(raw[NTFS_SECTORS_PER_CLUSTER_OFFSET]),
        mft_lcn=read_le(raw, NTFS_VBR_MFT_OFFSET, 8),
        mftmirr_lcn=read_le(raw, NTFS_VBR_MFTMIRR_OFFSET, 8),
        clusters_per_mft_record=struct.unpack_from('<b', raw, NTFS_CLUSTERS_PER_MFT_RECORD_OFFSET)[0],
        clusters_per_index_buffer=struct.unpack_from('<b', raw, NTFS_CLUSTERS_PER_INDEX_BUFFER_OFFSET)[0],
        total_sectors=read_le(raw, NTFS_TOTAL_SECTORS_OFFSET, 8),
        serial_number=read_le(raw, NTFS_SERIAL_NUMBER_OFFSET, 8),
    )


NtfsBootSectorResult = Union[NtfsBootSector, DecodeFailure]


def decode_ntfs_vbr(data) -> NtfsBootSectorResult:
    try:
        return parse_ntfs_vbr(data)
    except DecodeError as e:
        log.debug("VBR rejected: %s", e)
        return DecodeFailure(e)
