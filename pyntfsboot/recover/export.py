# pyntfsboot/recover/export.py
from __future__ import annotations
import logging
import os
from typing import List, Tuple

from ..core.constants import SECTOR_SIZE
from ..core.errors import DecodeFailure
from ..fs.mbr import GptProtective, decode_mbr
from ..scan.locate import read_sector, read_vbr_sectors

log = logging.getLogger(__name__)


class ExportRefused(RuntimeError):
    def __init__(self, message: str, gpt: bool = False) -> None:
        super().__init__(message)
        self.gpt = gpt


def export_sectors(dev, out_dir: str) -> List[str]:
    """Write the MBR and the first sector of each present partition to `out_dir`."""
    mbr_raw = read_sector(dev, 0)
    table = decode_mbr(mbr_raw)
    if isinstance(table, DecodeFailure):
        raise ExportRefused(f"Sector 0 is not an MBR: {table.message}")
    if isinstance(table, GptProtective):
        raise ExportRefused("This disk is in GPT format, which is unsupported.", gpt=True)

    # read everything before the first write
    files: List[Tuple[str, bytes]] = [('mbr.bin', mbr_raw)]
    for entry, raw in read_vbr_sectors(dev, table.entries):
        log.debug("slot %d: %d bytes from sector %d", entry.slot, SECTOR_SIZE, entry.starting_sector)
        files.append((f'vbr_slot{entry.slot}.bin', raw))

    os.makedirs(out_dir, exist_ok=True)
    written: List[str] = []
    for name, raw in files:
        path = os.path.join(out_dir, name)
        with open(path, 'wb') as f:
            f.write(raw)
        written.append(path)
    return written
