"""Source-space conversions applied to captured frames before compression."""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np

from ..core.errors import RatConfigError
from ..core.types import FrameTransform


def _axis_rotation(axis: str, degrees: float) -> np.ndarray:
    a = math.radians(degrees)
    c, s = math.cos(a), math.sin(a)
    if axis == 'X':
        return np.array([[1, 0, 0], [0, c, -s], [0, s, c]], dtype=np.float64)
    if axis == 'Y':
        return np.array([[c, 0, s], [0, 1, 0], [-s, 0, c]], dtype=np.float64)
    return np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]], dtype=np.float64)


def euler_matrix(rotation: Sequence[float]) -> np.ndarray:
    """Rotation matrix for Euler degrees applied Z first, then X, then Y."""
    rx, ry, rz = rotation
    return _axis_rotation('Y', ry) @ _axis_rotation('X', rx) @ _axis_rotation('Z', rz)


def bake_transforms(frames: np.ndarray, transforms: List[FrameTransform]) -> np.ndarray:
    """Apply each frame's translate-rotate-scale transform to its vertices."""
    if len(transforms) != len(frames):
        raise RatConfigError(
            f"Got {len(transforms)} transforms for {len(frames)} frames; counts must match"
        )

    baked = np.empty_like(frames, dtype=np.float64)
    for f, t in enumerate(transforms):
        scaled = frames[f] * np.asarray(t.scale, dtype=np.float64)
        baked[f] = scaled @ euler_matrix(t.rotation).T + np.asarray(t.position, dtype=np.float64)
    return baked


def flip_z(frames: np.ndarray, indices: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Mirror positions across the XY plane and invert triangle winding to match.

    Returns new (frames, indices); the inputs are not modified.
    """
    flipped = np.array(frames, dtype=np.float64, copy=True)
    flipped[..., 2] = -flipped[..., 2]

    indices = np.asarray(indices).reshape(-1)
    if len(indices) % 3 != 0:
        raise RatConfigError(f"Cannot rewind {len(indices)} indices; mesh must be triangulated")
    tris = indices.reshape(-1, 3)
    rewound = tris[:, [0, 2, 1]].reshape(-1)
    return flipped, rewound
