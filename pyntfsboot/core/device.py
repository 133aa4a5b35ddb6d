# pyntfsboot/core/device.py
from __future__ import annotations
import logging
import os
from typing import BinaryIO

log = logging.getLogger(__name__)


class DeviceError(IOError):
    pass


class DeviceOpenError(DeviceError):
    pass


class DeviceReadError(DeviceError):
    pass


class DeviceSeekError(DeviceError):
    pass


class BlockDevice:
    """Disk image or block device (/dev/sdX) opened read-only."""

    def __init__(self, path: str) -> None:
        try:
            # buffering=0 so every read hits the device at the requested offset
            self._f: BinaryIO = open(path, 'rb', buffering=0)
        except OSError as e:
            raise DeviceOpenError(f"Failed to open {path}: {e}") from e
        self.path = path
        # getsize() reports 0 for block devices, seeking to the end does not
        try:
            self._size = self._f.seek(0, os.SEEK_END)
        except OSError as e:
            self._f.close()
            raise DeviceOpenError(f"Cannot determine size of {path}: {e}") from e
        log.debug("opened %s (%d bytes)", path, self._size)

    @property
    def size(self) -> int:
        return self._size

    def read(self, offset: int, size: int) -> bytes:
        if offset < 0 or offset + size > self._size:
            raise DeviceSeekError(f"Read out of bounds: off={offset} size={size} total={self._size}")
        try:
            self._f.seek(offset)
        except OSError as e:
            raise DeviceSeekError(f"Seek to {offset} failed: {e}") from e
        try:
            data = self._f.read(size)
        except OSError as e:
            raise DeviceReadError(f"Read at off={offset} failed: {e}") from e
        if len(data) != size:
            raise DeviceReadError(f"Short read at off={offset} want={size} got={len(data)}")
        return data

    def close(self) -> None:
        self._f.close()

    def __enter__(self) -> 'BlockDevice':
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def is_windows_device_path(path: str) -> bool:
    return path.startswith("\\\\.\\") or (len(path) == 2 and path[1] == ':')


def open_device(path: str):
    """Open `path` with the reader that fits it: pywin32 for \\\\.\\ paths, plain file otherwise."""
    if is_windows_device_path(path):
        from .device_windows import DeviceWindows
        return DeviceWindows(path)
    return BlockDevice(path)
