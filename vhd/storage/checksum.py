"""CRC32C checksums (the Castagnoli polynomial Cloud Storage reports) and byte inversion."""

import base64
from pathlib import Path
from typing import BinaryIO

import google_crc32c

BLOCK_SIZE = 1024 * 1024

_INVERT = bytes(255 - i for i in range(256))


def negate(data: bytes) -> bytes:
    """Invert every bit of ``data``. Applying it twice gives the input back."""
    return data.translate(_INVERT)


def crc32c(data: bytes) -> int:
    return google_crc32c.value(data)


def crc32c_file(path: Path) -> int:
    """CRC32C of a whole file, read in blocks."""
    checksum = google_crc32c.Checksum()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(BLOCK_SIZE), b""):
            checksum.update(block)
    return int.from_bytes(checksum.digest(), "big")


def decode_crc32c(value: str) -> int:
    """Decode the base64 big-endian form used in Cloud Storage object metadata."""
    return int.from_bytes(base64.b64decode(value), "big")


def format_crc32c(value: int) -> str:
    return f"{value:08x}"


class ChecksumWriter:
    """File wrapper that checksums everything written through it."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._checksum = google_crc32c.Checksum()
        self.size = 0

    def write(self, data: bytes) -> int:
        written = self._stream.write(data)
        self._checksum.update(data)
        self.size += len(data)
        return written

    @property
    def value(self) -> int:
        return int.from_bytes(self._checksum.digest(), "big")
