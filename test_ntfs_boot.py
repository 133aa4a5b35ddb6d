"""Tests for NTFS boot sector decoding and MFT address computation"""

import pytest

from disk_images import make_ntfs_vbr
from pyntfsboot.core.errors import DecodeFailure, InvalidMbrSignature, NotNtfs
from pyntfsboot.fs.ntfs.address import U64_MAX, byte_address
from pyntfsboot.fs.ntfs.boot import NtfsBootSector, decode_ntfs_vbr, parse_ntfs_vbr


def test_valid_vbr_fields():
    vbr = parse_ntfs_vbr(make_ntfs_vbr(mft_lcn=4, mftmirr_lcn=0x1869C0))
    assert vbr.mft_lcn == 4
    assert vbr.mftmirr_lcn == 0x1869C0
    assert vbr.oem_id == b"NTFS    "
    assert vbr.bytes_per_sector == 512
    assert vbr.sectors_per_cluster == 8
    assert vbr.cluster_size == 4096
    assert vbr.total_sectors == 0x186A000
    assert vbr.clusters_per_mft_record == -10
    assert vbr.mft_record_size == 1024
    assert vbr.serial_number == 0x1122334455667788


def test_lcn_full_width():
    vbr = parse_ntfs_vbr(make_ntfs_vbr(mft_lcn=0x0102030405060708, mftmirr_lcn=0x38))
    assert vbr.mft_lcn == 0x0102030405060708
    assert vbr.mftmirr_lcn == 0x38


def test_missing_trailer_checked_before_oem():
    res = decode_ntfs_vbr(make_ntfs_vbr(oem=b"ntfs    ", signature=b"\x00\x00"))
    assert isinstance(res, DecodeFailure)
    assert isinstance(res.error, InvalidMbrSignature)


BAD_OEMS = [
    b"ntfs    ",
    b"NTFS\x00\x00\x00\x00",
    b"NTFS   \x00",
    b"MSDOS5.0",
    b"EXFAT   ",
    b"NTFT    ",
]


@pytest.mark.parametrize("oem", BAD_OEMS)
def test_oem_mismatch_is_not_ntfs(oem):
    res = decode_ntfs_vbr(make_ntfs_vbr(oem=oem))
    assert isinstance(res, DecodeFailure)
    assert res.kind == "not_ntfs"
    with pytest.raises(NotNtfs):
        parse_ntfs_vbr(make_ntfs_vbr(oem=oem))


def test_every_signature_byte_matters():
    good = bytearray(make_ntfs_vbr())
    for i in range(3, 11):
        bad = bytearray(good)
        bad[i] ^= 0x20
        assert isinstance(decode_ntfs_vbr(bytes(bad)), DecodeFailure)
    assert isinstance(decode_ntfs_vbr(bytes(good)), NtfsBootSector)


def test_vbr_wrong_length():
    res = decode_ntfs_vbr(make_ntfs_vbr() + b"\x00")
    assert isinstance(res, DecodeFailure)
    assert res.kind == "size_mismatch"


def test_large_cluster_encoding():
    # 0xF4 -> 2^12 sectors per cluster
    vbr = parse_ntfs_vbr(make_ntfs_vbr(sectors_per_cluster=0xF4))
    assert vbr.sectors_per_cluster == 4096
    vbr = parse_ntfs_vbr(make_ntfs_vbr(sectors_per_cluster=0x80))
    assert vbr.sectors_per_cluster == 128


def test_byte_address():
    assert byte_address(0x100, 8, 512) == 0x100000 == 1048576
    assert byte_address(4) == 16384
    assert byte_address(0) == 0
    assert byte_address(1, 1, 4096) == 4096


def test_byte_address_is_not_range_checked():
    assert byte_address(1 << 60) > U64_MAX


def test_vbr_addresses():
    vbr = parse_ntfs_vbr(make_ntfs_vbr(mft_lcn=4, mftmirr_lcn=0x1869C0))
    assert vbr.mft_address() == 0x4000
    assert vbr.mftmirr_address() == 0x1869C0 * 4096
    assert vbr.mft_address(cluster_size_sectors=1) == 2048


def main():
    print("=== NTFS Boot Sector Tests ===")
    for name, fn in sorted(globals().items()):
        if not (name.startswith("test_") and callable(fn)):
            continue
        if name == "test_oem_mismatch_is_not_ntfs":
            for oem in BAD_OEMS:
                fn(oem)
        else:
            fn()
        print(f"  ✓ {name}")
    print("✅ NTFS boot sector tests passed!")


if __name__ == "__main__":
    main()
