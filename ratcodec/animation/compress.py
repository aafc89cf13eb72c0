"""Compress raw per-frame vertex positions into an AnimationContainer."""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ..core.errors import RatConfigError
from ..core.logging import ExportLogger
from ..core.types import MeshTopology
from ..data.container import AnimationContainer
from ..data.rat_format import MAX_VERTICES
from .delta import DeltaEncoder, pack_deltas
from .quantize import Bounds, Quantizer, as_frame_array


def _static_attribute(values, vertex_count: int, width: int, default: Tuple[float, ...],
                      name: str, log: ExportLogger) -> np.ndarray:
    if values is None:
        log.info(f"No {name} supplied, using {default}")
        return np.tile(np.asarray(default, dtype=np.float32), (vertex_count, 1))
    arr = np.asarray(values, dtype=np.float32)
    if arr.shape != (vertex_count, width):
        raise RatConfigError(f"Expected {name} of shape ({vertex_count}, {width}), got {arr.shape}")
    return arr


def validate_topology(topology: MeshTopology, vertex_count: int) -> np.ndarray:
    """
    Check a triangle list against the RAT limits and return it as uint16.

    Positions are referenced through 16-bit indices, so a mesh may have at most
    65535 vertices; the list must be triangulated and every index in range.
    """
    if vertex_count == 0:
        raise RatConfigError("Mesh has no vertices")
    if vertex_count > MAX_VERTICES:
        raise RatConfigError(
            f"Mesh has {vertex_count} vertices, but RAT supports at most {MAX_VERTICES} (16-bit indices)"
        )

    indices = np.asarray(topology.indices if topology.indices is not None else [], dtype=np.int64)
    if indices.ndim != 1:
        indices = indices.reshape(-1)
    if len(indices) % 3 != 0:
        raise RatConfigError(
            f"Triangle index count ({len(indices)}) is not divisible by 3; mesh must be triangulated"
        )
    if len(indices) and (indices.min() < 0 or indices.max() >= vertex_count):
        bad = int(indices[(indices < 0) | (indices >= vertex_count)][0])
        raise RatConfigError(f"Triangle index {bad} out of range for {vertex_count} vertices")
    return indices.astype(np.uint16)


def compress(
    frames,
    topology: MeshTopology,
    bounds: Optional[Bounds] = None,
    max_bits_per_axis: Optional[int] = None,
    texture_filename: str = "",
    log: Optional[ExportLogger] = None,
) -> AnimationContainer:
    """
    Compress a vertex animation.

    Steps:
    1. Validate frames and topology (fails before anything is produced)
    2. Compute bounds from all frames unless supplied, quantize to 8 bits per axis
    3. Pick per-vertex bit widths and deltas (natural or bounded mode)
    4. Pack deltas for frames 1..N-1 into the 32-bit word stream
    """
    log = log or ExportLogger()
    data = as_frame_array(frames)
    frame_count, vertex_count = data.shape[:2]

    indices = validate_topology(topology, vertex_count)
    uvs = _static_attribute(topology.uvs, vertex_count, 2, (0.0, 0.0), "UVs", log)
    colors = _static_attribute(topology.colors, vertex_count, 4, (1.0, 1.0, 1.0, 1.0), "colors", log)
    encoder = DeltaEncoder(max_bits_per_axis, log)

    quantizer = Quantizer.from_frames(data, bounds, log)
    log.info(f"Compression bounds: min {quantizer.bounds_min} max {quantizer.bounds_max}")
    quantized = quantizer.quantize(data)

    encoded = encoder.encode(quantized)
    delta_stream = pack_deltas(encoded.deltas, encoded.widths)

    anim = AnimationContainer(
        vertex_count=vertex_count,
        frame_count=frame_count,
        index_count=len(indices),
        bounds_min=quantizer.bounds_min,
        bounds_max=quantizer.bounds_max,
        uvs=uvs,
        colors=colors,
        indices=indices,
        first_frame=quantized[0].copy(),
        bit_widths_x=encoded.widths[:, 0].copy(),
        bit_widths_y=encoded.widths[:, 1].copy(),
        bit_widths_z=encoded.widths[:, 2].copy(),
        delta_stream=delta_stream,
        texture_filename=texture_filename or "",
        quantized_frames=quantized,
    )

    mode = "natural" if max_bits_per_axis is None else f"capped at {max_bits_per_axis} bits"
    log.info(f"Compressed {vertex_count} vertices x {frame_count} frames ({mode}): "
             f"{anim.bits_per_frame} bits/frame, {len(delta_stream)} delta words, "
             f"mean width {float(encoded.widths.mean()):.2f}")
    return anim
