from __future__ import annotations
import argparse, json
import logging
import sys

from .core.constants import (
    ARGUMENT_EXPECTED, CLUSTER_SIZE, GPT_FORMATTED, INVALID_MBR, LSEEK_ERROR,
    OPEN_ERROR, PARTITION_SLOTS, PARTITION_TABLE_OFFSET, PARTITION_TABLE_SIZE,
    READ_ERROR, SUCCESS,
)
from .core.device import DeviceError, DeviceOpenError, DeviceSeekError, open_device
from .core.errors import DecodeFailure
from .core.sector import SectorBuffer
from .fs.mbr import GptProtective, decode_mbr
from .fs.ntfs.boot import has_ntfs_signature
from .recover.export import ExportRefused, export_sectors
from .scan.hexdump import hexdump
from .scan.locate import locate_mft, read_sector, read_vbr_sectors

log = logging.getLogger('pyntfsboot')

RULE = "==============================================="


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(ARGUMENT_EXPECTED, f"{self.prog}: error: {message}\n")


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def _print_entries(entries) -> None:
    for e in entries:
        boot = "bootable" if e.boot_indicator else "not bootable"
        print(f"Partition {e.slot + 1}: type 0x{e.partition_type:02X} ({e.type_name}), "
              f"{boot}, starting sector {e.starting_sector}, {e.sector_count} sectors")


def _gpt_message() -> None:
    print("This disk is in GPT format, which is unsupported.")


def cmd_mbr(dev, args) -> int:
    raw = read_sector(dev, 0)
    print("Master boot record:")
    print(hexdump(raw))
    print(f"\n{RULE}\n")
    print("Partition table:")
    print(hexdump(raw[PARTITION_TABLE_OFFSET:PARTITION_TABLE_OFFSET + PARTITION_TABLE_SIZE], base=PARTITION_TABLE_OFFSET))
    print(f"\n{RULE}\n")

    table = decode_mbr(raw)
    if isinstance(table, DecodeFailure):
        print(f"Not a valid MBR: {table.message}")
        return INVALID_MBR
    if isinstance(table, GptProtective):
        _print_entries(table.mbr.entries)
        _gpt_message()
        return GPT_FORMATTED
    _print_entries(table.entries)
    return SUCCESS


def cmd_vbr(dev, args) -> int:
    table = decode_mbr(read_sector(dev, 0))
    if isinstance(table, DecodeFailure):
        print(f"Not a valid MBR: {table.message}")
        return INVALID_MBR
    if isinstance(table, GptProtective):
        _gpt_message()
        return GPT_FORMATTED

    vbrs = {e.slot: raw for e, raw in read_vbr_sectors(dev, table.entries)}
    for slot in range(PARTITION_SLOTS):
        print(f"VBR of partition {slot + 1}:")
        raw = vbrs.get(slot)
        if raw is None:
            print("Partition does not exist\n")
            continue
        print(hexdump(raw))
        if has_ntfs_signature(SectorBuffer(raw)):
            print('Bytes 3-11 are "NTFS    " -- this partition is in NTFS format')
        print()
    return SUCCESS


def cmd_mft(dev, args) -> int:
    result = locate_mft(dev, cluster_size=args.cluster_size, use_bpb_geometry=args.bpb)
    if isinstance(result, DecodeFailure):
        print(f"Not a valid MBR: {result.message}")
        return INVALID_MBR
    if isinstance(result, GptProtective):
        _gpt_message()
        return GPT_FORMATTED

    if args.json:
        print(json.dumps([p.as_dict() for p in result.partitions], indent=2))
        return SUCCESS

    for e in result.entries:
        kind = "NTFS entry" if e.is_ntfs else "Non-NTFS entry"
        print(f"Partition {e.slot + 1}: {kind}")
    print(f"\n{len(result.partitions)} NTFS partitions on opened device\n")
    for p in result.partitions:
        if not p.valid:
            print(f"Partition {p.entry.slot + 1}: invalid VBR ({p.failure.message})")
            continue
        print(f"Partition {p.entry.slot + 1}: valid VBR")
        print(f"$MFT address: 0x{p.mft_address:X}")
        print(f"$MFTMirr address: 0x{p.mftmirr_address:X}")
        print()
    return SUCCESS


def cmd_export(dev, args) -> int:
    try:
        paths = export_sectors(dev, args.out)
    except ExportRefused as e:
        print(str(e))
        return GPT_FORMATTED if e.gpt else INVALID_MBR
    for p in paths:
        print(f"Exported {p}")
    return SUCCESS


def build_parser() -> argparse.ArgumentParser:
    ap = _ArgumentParser(prog='pyntfsboot', description='Locate $MFT and $MFTMirr from the MBR and NTFS boot sectors')
    ap.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    sub = ap.add_subparsers(dest='cmd', required=True, parser_class=_ArgumentParser)

    s1 = sub.add_parser('mbr', help='Dump the MBR and its partition table')
    s1.add_argument('device')
    s1.set_defaults(func=cmd_mbr)

    s2 = sub.add_parser('vbr', help='Dump the first sector of every partition')
    s2.add_argument('device')
    s2.set_defaults(func=cmd_vbr)

    s3 = sub.add_parser('mft', help='Print $MFT and $MFTMirr addresses of NTFS partitions')
    s3.add_argument('device')
    geo = s3.add_mutually_exclusive_group()
    geo.add_argument('--cluster-size', type=_positive_int, default=CLUSTER_SIZE, help='sectors per cluster (default %(default)s)')
    geo.add_argument('--bpb', action='store_true', help='take the cluster geometry from each VBR instead')
    s3.add_argument('--json', action='store_true')
    s3.set_defaults(func=cmd_mft)

    s4 = sub.add_parser('export', help='Save the MBR and partition boot sectors as .bin files')
    s4.add_argument('device')
    s4.add_argument('--out', required=True)
    s4.set_defaults(func=cmd_export)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    log.debug("%s on %s", args.cmd, args.device)

    try:
        dev = open_device(args.device)
    except DeviceOpenError as e:
        print(f"open: {e}", file=sys.stderr)
        return OPEN_ERROR
    print(f"{args.device} opened successfully\n")

    try:
        return args.func(dev, args)
    except DeviceSeekError as e:
        print(f"lseek: {e}", file=sys.stderr)
        return LSEEK_ERROR
    except DeviceError as e:
        print(f"read: {e}", file=sys.stderr)
        return READ_ERROR
    finally:
        dev.close()


if __name__ == '__main__':
    sys.exit(main())
