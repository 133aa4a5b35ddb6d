# pyntfsboot/core/device_windows.py
from __future__ import annotations
import logging

import pywintypes
import win32api
import win32con
import win32file
import win32security

from .device import DeviceOpenError, DeviceReadError, DeviceSeekError

log = logging.getLogger(__name__)


def _enable_privileges(names):
    hProc = win32api.GetCurrentProcess()
    hTok = win32security.OpenProcessToken(
        hProc, win32con.TOKEN_ADJUST_PRIVILEGES | win32con.TOKEN_QUERY
    )
    privs = []
    for n in names:
        try:
            luid = win32security.LookupPrivilegeValue(None, n)
            privs.append((luid, win32con.SE_PRIVILEGE_ENABLED))
        except pywintypes.error as e:
            log.debug("privilege %s unavailable: %s", n, e)
    if privs:
        win32security.AdjustTokenPrivileges(hTok, False, privs)


def physical_drive_path(index: int) -> str:
    return "\\\\.\\PhysicalDrive{}".format(index)


def normalize_device_path(path: str) -> str:
    # "C:" -> \\.\C:   "PhysicalDrive0" -> \\.\PhysicalDrive0
    if len(path) == 2 and path[1] == ':':
        return "\\\\.\\" + path
    if path.lower().startswith("physicaldrive"):
        return "\\\\.\\" + path
    return path


class DeviceWindows:
    """Raw disk handle (\\\\.\\PhysicalDriveN or a volume) read through pywin32.

    Reads must stay sector aligned; the MBR decoding path only ever asks for
    whole 512-byte sectors.
    """

    def __init__(self, path: str) -> None:
        _enable_privileges([
            win32security.SE_BACKUP_NAME,
            win32security.SE_RESTORE_NAME,
            win32security.SE_MANAGE_VOLUME_NAME
        ])
        device_path = normalize_device_path(path)

        access = win32con.GENERIC_READ
        share = (win32con.FILE_SHARE_READ |
                 win32con.FILE_SHARE_WRITE |
                 win32con.FILE_SHARE_DELETE)

        try:
            self.handle = win32file.CreateFile(
                device_path,
                access,
                share,
                None,
                win32con.OPEN_EXISTING,
                win32con.FILE_ATTRIBUTE_NORMAL,
                None
            )
        except pywintypes.error as e:
            raise DeviceOpenError(f"Failed to open device {device_path}: {e}") from e
        self.path = device_path
        log.debug("opened %s", device_path)

    def read(self, offset: int, size: int) -> bytes:
        try:
            win32file.SetFilePointer(self.handle, offset, win32con.FILE_BEGIN)
        except pywintypes.error as e:
            raise DeviceSeekError(f"SetFilePointer to {offset} failed: {e}") from e
        try:
            hr, data = win32file.ReadFile(self.handle, size)
        except pywintypes.error as e:
            raise DeviceReadError(f"ReadFile at off={offset} failed: {e}") from e
        if hr not in (0, None):
            raise DeviceReadError(f"ReadFile failed hr={hr}")
        if len(data) != size:
            raise DeviceReadError(f"Short read at off={offset}, want={size}, got={len(data)}")
        return bytes(data)

    def close(self) -> None:
        if self.handle is not None:
            self.handle.Close()
            self.handle = None

    def __enter__(self) -> 'DeviceWindows':
        return self

    def __exit__(self, *exc) -> None:
        self.close()
