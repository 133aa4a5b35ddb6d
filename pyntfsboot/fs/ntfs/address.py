# pyntfsboot/fs/ntfs/address.py
from __future__ import annotations

from ...core.constants import CLUSTER_SIZE, SECTOR_SIZE

U64_MAX = (1 << 64) - 1


def byte_address(lcn: int, cluster_size_sectors: int = CLUSTER_SIZE, sector_size: int = SECTOR_SIZE) -> int:
    """Byte offset of cluster `lcn` from the start of its volume.

    Not range checked: a result above U64_MAX only comes from an implausible LCN
    and callers that care can compare against U64_MAX themselves.
    """
    return lcn * cluster_size_sectors * sector_size
