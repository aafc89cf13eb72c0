"""Bounds-checked little-endian reader over an in-memory file image."""

from __future__ import annotations

import struct
from dataclasses import dataclass

import numpy as np

from ..core.errors import RatFormatError


@dataclass
class BinaryReader:
    data: bytes
    ofs: int = 0

    def __len__(self) -> int:
        return len(self.data)

    def tell(self) -> int:
        return self.ofs

    def seek(self, ofs: int) -> None:
        if ofs < 0 or ofs > len(self.data):
            raise RatFormatError(f"Seek to {ofs} outside file of {len(self.data)} bytes")
        self.ofs = ofs

    def read(self, n: int) -> bytes:
        b = self.data[self.ofs : self.ofs + n]
        if len(b) != n:
            raise RatFormatError(f"Unexpected EOF at {self.ofs}, need {n} bytes")
        self.ofs += n
        return b

    def u32(self) -> int:
        return struct.unpack("<I", self.read(4))[0]

    def f32(self) -> float:
        return struct.unpack("<f", self.read(4))[0]

    def array(self, dtype: str, count: int) -> np.ndarray:
        """Read `count` items of a little-endian numpy dtype into a native array."""
        item = np.dtype(dtype)
        if count == 0:
            return np.zeros(0, dtype=item.newbyteorder("="))
        raw = self.read(item.itemsize * count)
        return np.frombuffer(raw, dtype=item, count=count).astype(item.newbyteorder("="))
