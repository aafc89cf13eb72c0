from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass
class ExportSettings:
    """All export settings. Passed explicitly into compress/write calls."""

    # Splitting
    max_file_size_kb: int = 64

    # Delta encoding: None = natural widths, 1..8 = bounded mode
    max_bits_per_axis: Optional[int] = None

    # Non-empty selects the RAT2 layout
    texture_filename: str = ""

    # Source conversion
    flip_z: bool = False

    # Files
    overwrite: bool = True
    validate_output: bool = False


@dataclass
class MeshTopology:
    """Static mesh data shared by every frame of an animation."""
    indices: np.ndarray                 # (I,) triangle list
    uvs: Optional[np.ndarray] = None    # (V, 2), defaults to (0, 0)
    colors: Optional[np.ndarray] = None  # (V, 4) RGBA 0..1, defaults to white


@dataclass
class FrameTransform:
    """Object transform for one captured frame, baked into the vertices."""
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Tuple[float, float, float] = (0.0, 0.0, 0.0)  # Euler degrees
    scale: Tuple[float, float, float] = (1.0, 1.0, 1.0)
