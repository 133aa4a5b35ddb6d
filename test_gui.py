"""Tests for the GUI back end: drive listing and the locate worker (no window is shown)"""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QCoreApplication

from disk_images import make_entry, make_mbr, ntfs_disk, write_image
from pyntfsboot.gui_app import DriveInfo, LocateWorker, list_drives


@pytest.fixture(scope="module")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


def _run(worker):
    rows, status = [], []
    worker.found.connect(lambda row: rows.append(row))
    worker.status.connect(lambda text: status.append(text))
    worker.run()  # synchronous, in this thread
    return rows, status


def test_list_drives_returns_drive_infos():
    drives = list_drives()
    assert isinstance(drives, list)
    assert all(isinstance(d, DriveInfo) for d in drives)


def test_worker_rows(qapp, tmp_path):
    _, sectors = ntfs_disk()
    img = tmp_path / "disk.img"
    write_image(str(img), sectors)
    rows, status = _run(LocateWorker(str(img)))
    assert len(rows) == 2
    assert rows[0]["vbr"] == "valid"
    assert rows[0]["mft"] == "0x4000"
    assert rows[1]["vbr"] == ""
    assert status[-1].startswith("1 NTFS partitions")


def test_worker_gpt(qapp, tmp_path):
    img = tmp_path / "gpt.img"
    write_image(str(img), {0: make_mbr([make_entry(0xEE, 1)])})
    rows, status = _run(LocateWorker(str(img)))
    assert rows == []
    assert "GPT" in status[-1]


def test_worker_open_failure(qapp, tmp_path):
    rows, status = _run(LocateWorker(str(tmp_path / "missing.img")))
    assert rows == []
    assert status[-1].startswith("Open failed")


def main():
    # capsys / tmp_path fixtures need the pytest runner
    sys.exit(pytest.main([__file__, "-q"]))


if __name__ == "__main__":
    main()
