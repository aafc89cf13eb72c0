import struct
import array
from contextlib import contextmanager

import numpy as np


class BinaryWriter:
    """Struct-based little-endian writer for RAT files. Fields are packed, never padded."""

    def __init__(self):
        self._buffer = array.array('B')

    def write_uint(self, v: int) -> None:
        self._buffer.extend(struct.pack('<I', v))

    def write_float(self, v: float) -> None:
        self._buffer.extend(struct.pack('<f', v))

    def write_bytes(self, data: bytes) -> None:
        self._buffer.extend(data)

    def write_zeros(self, count: int) -> None:
        self._buffer.extend(bytes(count))

    def write_array(self, values, dtype: str) -> None:
        """Write a numpy-compatible array as contiguous little-endian `dtype` items."""
        self._buffer.extend(np.ascontiguousarray(values, dtype=dtype).tobytes())

    def getvalue(self) -> bytes:
        return self._buffer.tobytes()

    def save(self, filepath: str) -> None:
        with open(filepath, 'wb', buffering=1024 * 1024) as f:
            self._buffer.tofile(f)

    @property
    def size(self) -> int:
        return len(self._buffer)


@contextmanager
def binary_file(filepath: str):
    """Context manager that yields a BinaryWriter and saves on exit."""
    writer = BinaryWriter()
    yield writer
    writer.save(filepath)
