from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np


def _empty(shape, dtype) -> np.ndarray:
    return np.zeros(shape, dtype=dtype)


@dataclass
class AnimationContainer:
    """One compressed vertex animation, as stored in a single RAT file."""
    vertex_count: int = 0
    frame_count: int = 0
    index_count: int = 0
    bounds_min: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bounds_max: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    uvs: np.ndarray = field(default_factory=lambda: _empty((0, 2), np.float32))
    colors: np.ndarray = field(default_factory=lambda: _empty((0, 4), np.float32))
    indices: np.ndarray = field(default_factory=lambda: _empty((0,), np.uint16))
    first_frame: np.ndarray = field(default_factory=lambda: _empty((0, 3), np.uint8))
    bit_widths_x: np.ndarray = field(default_factory=lambda: _empty((0,), np.uint8))
    bit_widths_y: np.ndarray = field(default_factory=lambda: _empty((0,), np.uint8))
    bit_widths_z: np.ndarray = field(default_factory=lambda: _empty((0,), np.uint8))
    delta_stream: np.ndarray = field(default_factory=lambda: _empty((0,), np.uint32))
    texture_filename: str = ""

    # Every quantized frame, kept by the compressor for verification; never serialized
    quantized_frames: Optional[np.ndarray] = field(default=None, repr=False, compare=False)

    @property
    def bit_widths(self) -> np.ndarray:
        """(V, 3) per-vertex widths in x, y, z order."""
        return np.stack([self.bit_widths_x, self.bit_widths_y, self.bit_widths_z], axis=1)

    @property
    def bits_per_frame(self) -> int:
        return int(self.bit_widths_x.sum(dtype=np.int64)
                   + self.bit_widths_y.sum(dtype=np.int64)
                   + self.bit_widths_z.sum(dtype=np.int64))

    @property
    def ranges(self) -> np.ndarray:
        return np.asarray(self.bounds_max, dtype=np.float64) - np.asarray(self.bounds_min, dtype=np.float64)

    @property
    def is_v2(self) -> bool:
        return bool(self.texture_filename)


@dataclass
class DecoderState:
    """Replay position of one loaded animation; mutated in place by the decoder."""
    current_positions: np.ndarray  # (V, 3) uint8
    current_frame: int = 0
    initialized: bool = False
