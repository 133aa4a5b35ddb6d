# gui_app.py
# pyntfsboot GUI: pick a disk (or image) -> list partitions with $MFT / $MFTMirr addresses
# Requirements: PySide6 (+ pywin32 on Windows); raw disks need Administrator / root.

from __future__ import annotations
import glob
import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Optional

from PySide6.QtCore import Qt, QThread, Signal, Slot
from PySide6.QtWidgets import (
    QApplication, QFileDialog, QHBoxLayout, QLabel, QListWidget, QListWidgetItem,
    QMainWindow, QMessageBox, QProgressBar, QPushButton, QStackedWidget,
    QTreeWidget, QTreeWidgetItem, QVBoxLayout, QWidget
)

from .core.constants import CLUSTER_SIZE
from .core.device import DeviceError, open_device
from .core.errors import DecodeFailure
from .fs.mbr import GptProtective
from .scan.locate import locate_mft

log = logging.getLogger(__name__)

MAX_PHYSICAL_DRIVES = 16


@dataclass
class DriveInfo:
    path: str
    label: str
    size: int  # 0 when unknown


def _list_windows_drives() -> List[DriveInfo]:
    from .core.device_windows import DeviceWindows, physical_drive_path
    out: List[DriveInfo] = []
    for i in range(MAX_PHYSICAL_DRIVES):
        path = physical_drive_path(i)
        try:
            dev = DeviceWindows(path)
        except DeviceError:
            continue
        dev.close()
        out.append(DriveInfo(path=path, label=f"Disk {i}", size=0))
    return out


def _list_posix_drives() -> List[DriveInfo]:
    out: List[DriveInfo] = []
    for pattern in ("/dev/sd[a-z]", "/dev/vd[a-z]", "/dev/nvme[0-9]n[0-9]"):
        for path in sorted(glob.glob(pattern)):
            name = os.path.basename(path)
            size = 0
            try:
                with open(f"/sys/block/{name}/size") as f:
                    size = int(f.read().strip()) * 512
            except (OSError, ValueError):
                pass
            out.append(DriveInfo(path=path, label=name, size=size))
    return out


def list_drives() -> List[DriveInfo]:
    if sys.platform == "win32":
        return _list_windows_drives()
    return _list_posix_drives()


# ------------------------ Locate thread ------------------------
class LocateWorker(QThread):
    found = Signal(dict)          # one row per partition
    status = Signal(str)
    finished_locate = Signal()

    def __init__(self, device_path: str, cluster_size: int = CLUSTER_SIZE):
        super().__init__()
        self.device_path = device_path
        self.cluster_size = cluster_size

    def run(self):
        try:
            self.status.emit(f"Opening {self.device_path} ...")
            try:
                dev = open_device(self.device_path)
            except DeviceError as e:
                log.warning("open %s failed: %s", self.device_path, e)
                self.status.emit(f"Open failed: {e}")
                return
            try:
                result = locate_mft(dev, cluster_size=self.cluster_size)
            except DeviceError as e:
                log.warning("read from %s failed: %s", self.device_path, e)
                self.status.emit(f"Read failed: {e}")
                return
            finally:
                dev.close()

            if isinstance(result, DecodeFailure):
                self.status.emit(f"Not a valid MBR: {result.message}")
                return
            if isinstance(result, GptProtective):
                self.status.emit("This disk is in GPT format, which is unsupported.")
                return

            reports = {p.entry.slot: p for p in result.partitions}
            for e in result.entries:
                row = {
                    "slot": e.slot + 1,
                    "boot": "yes" if e.boot_indicator else "",
                    "type": f"0x{e.partition_type:02X} {e.type_name}",
                    "start": e.starting_sector,
                    "vbr": "",
                    "mft": "",
                    "mftmirr": "",
                }
                p = reports.get(e.slot)
                if p is not None and p.valid:
                    row.update(vbr="valid", mft=f"0x{p.mft_address:X}", mftmirr=f"0x{p.mftmirr_address:X}")
                elif p is not None:
                    row["vbr"] = f"invalid ({p.failure.kind})"
                self.found.emit(row)
            self.status.emit(f"{len(result.partitions)} NTFS partitions on {self.device_path}")
        finally:
            self.finished_locate.emit()


# ------------------------ UI ------------------------
class DrivePickerPage(QWidget):
    drive_chosen = Signal(DriveInfo)

    def __init__(self):
        super().__init__()
        lay = QVBoxLayout(self)
        self.title = QLabel("Select a disk to locate its NTFS $MFT")
        self.title.setStyleSheet("font-size:18px; font-weight:600;")
        lay.addWidget(self.title)

        self.listw = QListWidget()
        self.listw.setStyleSheet("QListWidget{font-size:14px}")
        lay.addWidget(self.listw)

        row = QHBoxLayout()
        self.refresh_btn = QPushButton("Refresh drives")
        self.refresh_btn.clicked.connect(self.populate)
        self.image_btn = QPushButton("Open image…")
        self.image_btn.clicked.connect(self._open_image)
        row.addWidget(self.refresh_btn)
        row.addWidget(self.image_btn)
        row.addStretch(1)
        lay.addLayout(row)

        self.populate()
        self.listw.itemDoubleClicked.connect(self._on_double)

    def populate(self):
        self.listw.clear()
        drives = list_drives()

        if not drives:
            item = QListWidgetItem("No accessible disks found. Run as Administrator/root or open an image.")
            item.setFlags(item.flags() & ~Qt.ItemIsEnabled)
            self.listw.addItem(item)
            return

        for d in drives:
            size = f"{d.size / (1024**3):.2f} GB" if d.size else "size unknown"
            item = QListWidgetItem(f"{d.label}  ({d.path})  —  {size}")
            item.setData(Qt.UserRole, d)
            self.listw.addItem(item)

    def _open_image(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open disk image", "", "Disk images (*.img *.dd *.raw *.bin);;All files (*)")
        if path:
            self.drive_chosen.emit(DriveInfo(path=path, label=os.path.basename(path), size=os.path.getsize(path)))

    def _on_double(self, item: QListWidgetItem):
        d: DriveInfo = item.data(Qt.UserRole)
        self.drive_chosen.emit(d)


class ResultPage(QWidget):
    back = Signal()

    COLUMNS = ["Partition", "Boot", "Type", "Start sector", "VBR", "$MFT address", "$MFTMirr address"]
    KEYS = ["slot", "boot", "type", "start", "vbr", "mft", "mftmirr"]

    def __init__(self):
        super().__init__()
        outer = QVBoxLayout(self)
        top = QHBoxLayout()
        self.info = QLabel("Disk: -")
        self.back_btn = QPushButton("← Back")
        self.back_btn.clicked.connect(self._on_back)
        top.addWidget(self.back_btn)
        top.addWidget(self.info)
        top.addStretch(1)
        outer.addLayout(top)

        self.progress = QProgressBar()
        self.progress.setRange(0, 1)
        outer.addWidget(self.progress)
        self.status = QLabel("…")
        outer.addWidget(self.status)

        self.tree = QTreeWidget()
        self.tree.setHeaderLabels(self.COLUMNS)
        self.tree.setColumnWidth(2, 180)
        outer.addWidget(self.tree)

        row = QHBoxLayout()
        self.start_btn = QPushButton("Locate")
        self.start_btn.clicked.connect(self._start)
        row.addWidget(self.start_btn)
        row.addStretch(1)
        outer.addLayout(row)

        self.worker: Optional[LocateWorker] = None
        self.device_path: Optional[str] = None

    def _on_back(self):
        if self.worker and self.worker.isRunning():
            QMessageBox.information(self, "Busy", "Wait for the current read to finish.")
            return
        self.back.emit()

    def set_drive(self, d: DriveInfo):
        self.device_path = d.path
        self.info.setText(f"{d.label}  |  Device: {d.path}")
        self.tree.clear()
        self._start()

    @Slot()
    def _start(self):
        if not self.device_path:
            QMessageBox.warning(self, "No disk", "Please pick a disk first")
            return
        if self.worker and self.worker.isRunning():
            return
        self.tree.clear()
        self.progress.setRange(0, 0)
        self.start_btn.setEnabled(False)
        self.worker = LocateWorker(self.device_path)
        self.worker.found.connect(self._on_found)
        self.worker.status.connect(self.status.setText)
        self.worker.finished_locate.connect(self._on_finished)
        self.worker.start()

    @Slot(dict)
    def _on_found(self, row: dict):
        node = QTreeWidgetItem()
        for col, key in enumerate(self.KEYS):
            node.setText(col, str(row.get(key, "")))
        if row.get("vbr", "").startswith("invalid"):
            node.setForeground(4, Qt.red)
        self.tree.addTopLevelItem(node)

    @Slot()
    def _on_finished(self):
        self.progress.setRange(0, 1)
        self.start_btn.setEnabled(True)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("pyntfsboot – NTFS boot sector locator")
        self.resize(1000, 500)

        self.stack = QStackedWidget()
        self.setCentralWidget(self.stack)

        self.page_pick = DrivePickerPage()
        self.page_result = ResultPage()

        self.stack.addWidget(self.page_pick)
        self.stack.addWidget(self.page_result)
        self.stack.setCurrentWidget(self.page_pick)

        self.page_pick.drive_chosen.connect(self._on_drive)
        self.page_result.back.connect(lambda: self.stack.setCurrentWidget(self.page_pick))

    @Slot(DriveInfo)
    def _on_drive(self, d: DriveInfo):
        self.stack.setCurrentWidget(self.page_result)
        self.page_result.set_drive(d)


def main():
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    app = QApplication(sys.argv)
    w = MainWindow()
    w.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
