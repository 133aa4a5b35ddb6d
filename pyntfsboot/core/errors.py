# pyntfsboot/core/errors.py
from __future__ import annotations
from dataclasses import dataclass


class DecodeError(ValueError):
    """Base class for structures that fail validation while decoding."""
    kind = "decode_error"


class SizeMismatch(DecodeError):
    kind = "size_mismatch"

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(f"Expected {expected} bytes for {what}, got {actual}")
        self.what = what
        self.expected = expected
        self.actual = actual


class InvalidMbrSignature(DecodeError):
    kind = "invalid_mbr_signature"

    def __init__(self, found: bytes) -> None:
        super().__init__(f"Sector ending must be 0x55AA, got 0x{found.hex().upper()}")
        self.found = found


class NotNtfs(DecodeError):
    kind = "not_ntfs"

    def __init__(self, found: bytes) -> None:
        super().__init__(f'Bytes 3-10 are not "NTFS    ": {found!r}')
        self.found = found


@dataclass(frozen=True)
class DecodeFailure:
    """Result value standing in for a structure that did not validate."""
    error: DecodeError

    @property
    def kind(self) -> str:
        return self.error.kind

    @property
    def message(self) -> str:
        return str(self.error)
