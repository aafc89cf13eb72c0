"""MSB-first bit packing into 32-bit words.

Fields of 1..32 bits are appended back to back with no alignment; a field that
does not fit in the rest of the current word is split across the boundary.
The final partial word is zero-padded on flush.
"""

from __future__ import annotations

from typing import Iterable, List

import numpy as np

from ..core.errors import RatFormatError

WORD_BITS = 32
_WORD_MASK = 0xFFFFFFFF


def _mask(bits: int) -> int:
    return (1 << bits) - 1


def sign_extend(value: int, bits: int) -> int:
    """Interpret the low `bits` bits of value as two's complement."""
    if bits == 0:
        return 0
    value &= _mask(bits)
    sign_bit = 1 << (bits - 1)
    return value - (1 << bits) if value & sign_bit else value


def to_field(value: int, bits: int) -> int:
    """Two's-complement bit pattern of a signed value truncated to `bits`."""
    return value & _mask(bits)


class BitWriter:
    """Appends bit fields to a growing list of 32-bit words."""

    def __init__(self):
        self._words: List[int] = []
        self._current = 0
        self._used = 0

    def write(self, value: int, bits: int) -> None:
        if bits < 1 or bits > WORD_BITS:
            raise ValueError(f"Bit width must be between 1 and 32, got {bits}")
        value &= _mask(bits)
        remaining = WORD_BITS - self._used

        if bits < remaining:
            self._current |= value << (remaining - bits)
            self._used += bits
            return

        # Fill the current word, carry the low bits into the next one
        self._current |= value >> (bits - remaining)
        self._words.append(self._current)
        bits -= remaining
        self._used = bits
        self._current = (value << (WORD_BITS - bits)) & _WORD_MASK if bits else 0

    def write_signed(self, value: int, bits: int) -> None:
        self.write(to_field(value, bits), bits)

    def flush(self) -> None:
        if self._used > 0:
            self._words.append(self._current)
        self._current = 0
        self._used = 0

    @property
    def bit_length(self) -> int:
        return len(self._words) * WORD_BITS + self._used

    def to_array(self) -> np.ndarray:
        """Words written so far (call flush() first to include a partial word)."""
        return np.array(self._words, dtype=np.uint32)


class BitReader:
    """Reads bit fields back from a sequence of 32-bit words in writer order."""

    def __init__(self, words: Iterable[int]):
        if isinstance(words, np.ndarray):
            self._words = [int(w) for w in words.tolist()]
        else:
            self._words = [int(w) & _WORD_MASK for w in words]
        self._pos = 0
        self._total = len(self._words) * WORD_BITS

    def tell(self) -> int:
        return self._pos

    def seek(self, bit_offset: int) -> None:
        if bit_offset < 0 or bit_offset > self._total:
            raise RatFormatError(f"Bit offset {bit_offset} outside stream of {self._total} bits")
        self._pos = bit_offset

    def read(self, bits: int) -> int:
        if bits == 0:
            return 0
        if bits < 0 or bits > WORD_BITS:
            raise ValueError(f"Bit width must be between 0 and 32, got {bits}")
        if self._pos + bits > self._total:
            raise RatFormatError(
                f"Read of {bits} bits at bit {self._pos} runs past end of stream ({self._total} bits)"
            )

        index = self._pos >> 5
        offset = self._pos & 31
        window = self._words[index] << WORD_BITS
        if index + 1 < len(self._words):
            window |= self._words[index + 1]

        self._pos += bits
        return (window >> (2 * WORD_BITS - offset - bits)) & _mask(bits)

    def read_signed(self, bits: int) -> int:
        return sign_extend(self.read(bits), bits)
