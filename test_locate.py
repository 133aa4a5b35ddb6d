"""Tests for the MBR -> VBR -> $MFT pipeline, device reader, hex dump and sector export"""

import os
import pathlib
import tempfile

import pytest

from disk_images import MemoryDisk, make_entry, make_mbr, make_ntfs_vbr, ntfs_disk, write_image
from pyntfsboot.core.device import BlockDevice, DeviceOpenError, DeviceSeekError
from pyntfsboot.core.errors import DecodeFailure
from pyntfsboot.fs.mbr import GptProtective
from pyntfsboot.recover.export import ExportRefused, export_sectors
from pyntfsboot.scan.hexdump import hexdump
from pyntfsboot.scan.locate import DiskReport, locate_mft


def test_end_to_end_single_ntfs_partition():
    dev, _ = ntfs_disk()
    report = locate_mft(dev)
    assert isinstance(report, DiskReport)
    assert len(report.entries) == 2
    assert len(report.partitions) == 1
    p = report.partitions[0]
    assert p.valid
    assert p.entry.starting_sector == 2048
    assert p.vbr.mft_lcn == 4
    assert p.mft_address == 16384
    assert p.mftmirr_address == 0x1869C0 * 8 * 512
    # MBR + one VBR, the Linux partition is never read
    assert dev.reads == [(0, 512), (2048 * 512, 512)]


def test_invalid_vbr_is_reported_not_raised():
    dev = MemoryDisk({
        0: make_mbr([make_entry(0x07, 63), make_entry(0x07, 2048)]),
        63: make_ntfs_vbr(oem=b"MSDOS5.0"),
        2048: make_ntfs_vbr(mft_lcn=0xC0000),
    })
    report = locate_mft(dev)
    bad, good = report.partitions
    assert not bad.valid
    assert bad.failure.kind == "not_ntfs"
    assert bad.mft_address is None
    assert good.valid
    assert good.mft_address == 0xC0000 * 4096
    assert bad.as_dict()["error"] == "not_ntfs"
    assert good.as_dict()["mft_address"] == 0xC0000 * 4096


def test_vbr_without_trailer():
    dev = MemoryDisk({0: make_mbr([make_entry(0x07, 2048)])})
    report = locate_mft(dev)
    assert report.partitions[0].failure.kind == "invalid_mbr_signature"


def test_gpt_disk_stops_after_mbr():
    dev = MemoryDisk({0: make_mbr([make_entry(0xEE, 1, 0xFFFFFFFF)])})
    assert isinstance(locate_mft(dev), GptProtective)
    assert dev.reads == [(0, 512)]


def test_blank_disk():
    assert isinstance(locate_mft(MemoryDisk({})), DecodeFailure)


def test_cluster_size_override_and_bpb_geometry():
    dev = MemoryDisk({
        0: make_mbr([make_entry(0x07, 2048)]),
        2048: make_ntfs_vbr(mft_lcn=0x100, sectors_per_cluster=16),
    })
    assert locate_mft(dev).partitions[0].mft_address == 0x100000
    assert locate_mft(dev, cluster_size=1).partitions[0].mft_address == 0x100 * 512
    assert locate_mft(dev, use_bpb_geometry=True).partitions[0].mft_address == 0x100 * 16 * 512


def test_block_device_image(tmp_path):
    _, sectors = ntfs_disk()
    img = tmp_path / "disk.img"
    write_image(str(img), sectors)
    with BlockDevice(str(img)) as dev:
        assert dev.size == 4097 * 512
        report = locate_mft(dev)
        assert report.partitions[0].mft_address == 0x4000
        with pytest.raises(DeviceSeekError):
            dev.read(4097 * 512, 512)


def test_block_device_truncated_image(tmp_path):
    _, sectors = ntfs_disk()
    img = tmp_path / "short.img"
    write_image(str(img), {0: sectors[0]})
    with BlockDevice(str(img)) as dev:
        with pytest.raises(DeviceSeekError):
            locate_mft(dev)


def test_block_device_missing(tmp_path):
    with pytest.raises(DeviceOpenError):
        BlockDevice(str(tmp_path / "nope.img"))


def test_block_device_never_writable(tmp_path):
    _, sectors = ntfs_disk()
    img = tmp_path / "ro.img"
    write_image(str(img), sectors)
    with BlockDevice(str(img)) as dev:
        assert not dev._f.writable()
    with pytest.raises(TypeError):
        BlockDevice(str(img), readonly=False)


def test_hexdump_layout():
    out = hexdump(bytes(range(32)), base=0x1BE, ascii=False).splitlines()
    assert out[0] == "000001BE: " + " ".join(f"{b:02X}" for b in range(16))
    assert out[1].startswith("000001CE: 10 11")
    line = hexdump(b"NTFS    " + bytes(8)).splitlines()[0]
    assert line.endswith("|NTFS    ........|")
    assert len(hexdump(bytes(512)).splitlines()) == 32


def test_export_sectors(tmp_path):
    dev, sectors = ntfs_disk()
    paths = export_sectors(dev, str(tmp_path / "out"))
    names = [os.path.basename(p) for p in paths]
    assert names == ["mbr.bin", "vbr_slot0.bin", "vbr_slot1.bin"]
    with open(paths[0], 'rb') as f:
        assert f.read() == sectors[0]
    with open(paths[1], 'rb') as f:
        assert f.read() == sectors[2048]


def test_export_refuses_gpt(tmp_path):
    dev = MemoryDisk({0: make_mbr([make_entry(0xEE, 1)])})
    with pytest.raises(ExportRefused) as exc:
        export_sectors(dev, str(tmp_path))
    assert exc.value.gpt
    with pytest.raises(ExportRefused) as exc:
        export_sectors(MemoryDisk({}), str(tmp_path))
    assert not exc.value.gpt


def test_export_failed_read_writes_nothing(tmp_path):
    _, sectors = ntfs_disk()
    img = tmp_path / "short.img"
    write_image(str(img), {0: sectors[0]})
    out_dir = tmp_path / "out"
    with BlockDevice(str(img)) as dev:
        with pytest.raises(DeviceSeekError):
            export_sectors(dev, str(out_dir))
    assert not out_dir.exists()


def main():
    print("=== Locate Tests ===")
    for name, fn in sorted(globals().items()):
        if not (name.startswith("test_") and callable(fn)):
            continue
        if "tmp_path" in fn.__code__.co_varnames[:fn.__code__.co_argcount]:
            with tempfile.TemporaryDirectory() as d:
                fn(pathlib.Path(d))
        else:
            fn()
        print(f"  ✓ {name}")
    print("✅ Locate tests passed!")


if __name__ == "__main__":
    main()
