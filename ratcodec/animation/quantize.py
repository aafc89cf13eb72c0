"""8-bit per-axis quantization of vertex positions against an animation bounding box."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from ..core.errors import RatConfigError
from ..core.logging import ExportLogger
from ..data.rat_format import QUANT_LEVELS

Bounds = Tuple[Tuple[float, float, float], Tuple[float, float, float]]

_AXES = "xyz"


def as_frame_array(frames) -> np.ndarray:
    """Stack per-frame vertex arrays into a (F, V, 3) float64 array."""
    if frames is None or len(frames) == 0:
        raise RatConfigError("No frames to compress")
    try:
        arr = np.asarray(frames, dtype=np.float64)
    except ValueError as e:
        raise RatConfigError(f"Frames must all have the same vertex count: {e}") from e
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise RatConfigError(f"Frames must have shape (frames, vertices, 3), got {arr.shape}")
    if arr.shape[1] == 0:
        raise RatConfigError("Frames contain zero vertices")
    if not np.all(np.isfinite(arr)):
        raise RatConfigError("Frames contain NaN or infinite positions")
    return arr


def compute_bounds(frames: np.ndarray) -> Bounds:
    """Component-wise min/max over every vertex of every frame."""
    flat = frames.reshape(-1, 3)
    lo = flat.min(axis=0)
    hi = flat.max(axis=0)
    return (tuple(float(x) for x in lo), tuple(float(x) for x in hi))


def quant_ranges(bounds_min: Sequence[float], bounds_max: Sequence[float],
                 log: Optional[ExportLogger] = None) -> np.ndarray:
    """Per-axis range with flat axes substituted by 1 to avoid dividing by zero."""
    lo = np.asarray(bounds_min, dtype=np.float64)
    hi = np.asarray(bounds_max, dtype=np.float64)
    if np.any(hi < lo):
        raise RatConfigError(f"Invalid bounds: max {tuple(hi)} < min {tuple(lo)}")

    rng = hi - lo
    for axis in range(3):
        if rng[axis] == 0:
            rng[axis] = 1.0
            if log:
                log.warning(f"Flat bounding box on {_AXES[axis]} axis; quantizing with unit range")
    return rng


class Quantizer:
    """Maps float positions to [0, 255] per axis using one bounding box for the whole animation."""

    def __init__(self, bounds_min: Sequence[float], bounds_max: Sequence[float],
                 log: Optional[ExportLogger] = None):
        self.bounds_min = tuple(float(x) for x in bounds_min)
        self.bounds_max = tuple(float(x) for x in bounds_max)
        self._min = np.asarray(self.bounds_min, dtype=np.float64)
        self._range = quant_ranges(self.bounds_min, self.bounds_max, log)

    @classmethod
    def from_frames(cls, frames: np.ndarray, bounds: Optional[Bounds] = None,
                    log: Optional[ExportLogger] = None) -> Quantizer:
        if bounds is None:
            bounds = compute_bounds(frames)
        elif log:
            data_min, data_max = compute_bounds(frames)
            if np.any(np.asarray(data_min) < np.asarray(bounds[0])) or \
                    np.any(np.asarray(data_max) > np.asarray(bounds[1])):
                log.warning("Vertices fall outside the supplied bounds and will be clamped")
        return cls(bounds[0], bounds[1], log)

    def quantize(self, positions: np.ndarray) -> np.ndarray:
        """q = round(255 * (value - min) / range), clamped to [0, 255]."""
        scaled = QUANT_LEVELS * (np.asarray(positions, dtype=np.float64) - self._min) / self._range
        return np.clip(np.rint(scaled), 0, QUANT_LEVELS).astype(np.uint8)

    def dequantize(self, quantized: np.ndarray) -> np.ndarray:
        return dequantize(quantized, self.bounds_min, self.bounds_max)


def dequantize(quantized: np.ndarray, bounds_min: Sequence[float],
               bounds_max: Sequence[float]) -> np.ndarray:
    """value = min + (q / 255) * (max - min), as float32 positions."""
    lo = np.asarray(bounds_min, dtype=np.float64)
    rng = np.asarray(bounds_max, dtype=np.float64) - lo
    q = np.asarray(quantized, dtype=np.float64)
    return (lo + (q / QUANT_LEVELS) * rng).astype(np.float32)
