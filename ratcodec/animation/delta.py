"""Per-vertex variable-width delta encoding of quantized frames.

Every vertex gets one signed bit width per axis for the whole animation.
Frame f (f >= 1) stores, for each vertex in order, the x, y and z deltas
relative to frame f-1, each truncated to that vertex's width.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.errors import RatConfigError
from ..core.logging import ExportLogger
from ..data.rat_format import MAX_BIT_WIDTH, MIN_BIT_WIDTH, QUANT_LEVELS
from ..formats.bitstream import BitWriter

_AXES = "xyz"


def bits_for_delta(max_abs: np.ndarray) -> np.ndarray:
    """Smallest b >= 1 with 2^(b-1) - 1 >= max_abs, element-wise (may exceed 8)."""
    max_abs = np.asarray(max_abs, dtype=np.int32)
    widths = np.ones(max_abs.shape, dtype=np.uint8)
    for b in range(2, 10):
        widths[max_abs > (1 << (b - 2)) - 1] = b
    return widths


def signed_limit(widths: np.ndarray) -> np.ndarray:
    """Largest magnitude representable symmetrically in each width: 2^(w-1) - 1."""
    return (np.left_shift(1, np.asarray(widths, dtype=np.int32) - 1) - 1).astype(np.int32)


@dataclass
class EncodedDeltas:
    widths: np.ndarray           # (V, 3) uint8, 1..8
    deltas: np.ndarray           # (F-1, V, 3) int16, the values actually stored
    final_positions: np.ndarray  # (V, 3) position reached by replaying `deltas`
    clamped: int = 0             # bounded mode: deltas clamped to their width
    wrapped: int = 0             # natural mode: deltas stored modulo 256


class DeltaEncoder:
    """
    Chooses bit widths and the stored deltas for a (F, V, 3) uint8 frame array.

    Natural mode (max_bits=None) is lossless relative to the quantized frames.
    Bounded mode caps every width at max_bits and diffuses the clamped error
    into later frames through a per-vertex/axis carry accumulator.
    """

    def __init__(self, max_bits: Optional[int] = None, log: Optional[ExportLogger] = None):
        if max_bits is not None and not (MIN_BIT_WIDTH <= max_bits <= MAX_BIT_WIDTH):
            raise RatConfigError(
                f"max_bits_per_axis must be between {MIN_BIT_WIDTH} and {MAX_BIT_WIDTH}, got {max_bits}"
            )
        self.max_bits = max_bits
        self.log = log or ExportLogger()

    def natural_widths(self, quantized: np.ndarray) -> np.ndarray:
        """Per-vertex/axis width from the largest frame-to-frame delta (unclamped, 1..9)."""
        frame_count, vertex_count = quantized.shape[:2]
        if frame_count < 2:
            return np.full((vertex_count, 3), MIN_BIT_WIDTH, dtype=np.uint8)
        deltas = np.diff(quantized.astype(np.int16), axis=0)
        return bits_for_delta(np.abs(deltas).max(axis=0))

    def encode(self, quantized: np.ndarray) -> EncodedDeltas:
        if self.max_bits is None:
            return self._encode_natural(quantized)
        return self._encode_bounded(quantized, self.max_bits)

    def _encode_natural(self, quantized: np.ndarray) -> EncodedDeltas:
        natural = self.natural_widths(quantized)
        widths = np.minimum(natural, MAX_BIT_WIDTH).astype(np.uint8)

        deltas = np.diff(quantized.astype(np.int16), axis=0)
        # Positions wrap at 8 bits on decode, so any delta is exact modulo 256
        wrapped = int(np.count_nonzero(np.abs(deltas) > 127))
        if wrapped:
            deltas = ((deltas + 128) % 256 - 128).astype(np.int16)
            self.log.warning(f"{wrapped} deltas exceed 8 bits and are stored with 8-bit wraparound")

        return EncodedDeltas(
            widths=widths,
            deltas=deltas,
            final_positions=quantized[-1].astype(np.float64),
            wrapped=wrapped,
        )

    def _encode_bounded(self, quantized: np.ndarray, cap: int) -> EncodedDeltas:
        natural = self.natural_widths(quantized)
        widths = np.minimum(natural, cap).astype(np.uint8)
        limit = signed_limit(widths)

        frame_count, vertex_count = quantized.shape[:2]
        deltas = np.zeros((max(frame_count - 1, 0), vertex_count, 3), dtype=np.int16)

        actual = quantized[0].astype(np.float64)
        carry = np.zeros((vertex_count, 3), dtype=np.float64)
        clamped_per_axis = np.zeros(3, dtype=np.int64)

        for f in range(1, frame_count):
            target = quantized[f].astype(np.float64)
            intended = (target - actual) + carry
            rounded = np.rint(intended)
            encoded = np.clip(rounded, -limit, limit)
            clamped_per_axis += np.count_nonzero(encoded != rounded, axis=0)
            # Never step outside the quantized range; the decoder would wrap
            encoded = np.clip(encoded, -actual, QUANT_LEVELS - actual)
            # Carried into the next frame so clamped motion is not lost
            carry = intended - encoded
            actual += encoded
            deltas[f - 1] = encoded.astype(np.int16)

        clamped = int(clamped_per_axis.sum())
        if clamped:
            detail = ", ".join(f"{_AXES[a]}={int(clamped_per_axis[a])}" for a in range(3))
            self.log.warning(f"Bit cap {cap} clamped {clamped} deltas ({detail}); error carried forward")

        return EncodedDeltas(
            widths=widths,
            deltas=deltas,
            final_positions=actual,
            clamped=clamped,
        )


def pack_deltas(deltas: np.ndarray, widths: np.ndarray) -> np.ndarray:
    """Pack (F-1, V, 3) signed deltas into the MSB-first uint32 delta stream."""
    if deltas.shape[0] == 0:
        return np.zeros(0, dtype=np.uint32)

    field_widths = [int(w) for w in widths.reshape(-1).tolist()]
    writer = BitWriter()
    for frame in deltas:
        for value, bits in zip(frame.reshape(-1).tolist(), field_widths):
            writer.write_signed(value, bits)
    writer.flush()
    return writer.to_array()
