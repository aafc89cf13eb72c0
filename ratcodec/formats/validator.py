"""Structural and playback checks for written RAT files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from ..animation.decode import Decoder
from ..core.errors import RatError
from ..core.logging import ExportLogger
from ..data.rat_format import DELTA_WORD_SIZE
from .binary_reader import BinaryReader
from .rat_reader import parse_header, parse_rat

# Bounds sanity thresholds, in scene units
LARGE_BOUNDS = 1000.0
SMALL_BOUNDS = 0.001


@dataclass
class ValidationResult:
    path: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def report(self, log: ExportLogger) -> None:
        name = os.path.basename(self.path)
        for msg in self.errors:
            log.error(f"{name}: {msg}")
        for msg in self.warnings:
            log.warning(f"{name}: {msg}")
        if self.is_valid and not self.warnings:
            log.info(f"{name}: valid")


def validate_rat_file(path: str, log: Optional[ExportLogger] = None) -> ValidationResult:
    """
    Check a RAT file for consistency and try to play it.

    Checks: magic and header completeness, counts, bounds, that every section
    fits in the file, delta stream presence versus frame count, bit widths,
    then a full parse and decode of the first and last frame.
    """
    result = ValidationResult(path=path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        result.errors.append(f"File read error: {e}")
        _finish(result, log)
        return result

    try:
        h = parse_header(BinaryReader(data))
    except RatError as e:
        result.errors.append(str(e))
        _finish(result, log)
        return result

    size = len(data)
    v = h.vertex_count

    if v == 0:
        result.errors.append("No vertices in animation")
    if h.frame_count == 0:
        result.errors.append("No frames in animation")
    if h.index_count == 0:
        result.warnings.append("No triangle indices (point cloud only)")
    elif h.index_count % 3 != 0:
        result.errors.append(f"Index count {h.index_count} is not a multiple of 3")

    if any(hi < lo for lo, hi in zip(h.bounds_min, h.bounds_max)):
        result.errors.append("Invalid bounds (max < min)")
    else:
        extent = max(hi - lo for lo, hi in zip(h.bounds_min, h.bounds_max))
        if extent > LARGE_BOUNDS:
            result.warnings.append(f"Very large bounds: {extent:.1f} units")
        elif extent < SMALL_BOUNDS:
            result.warnings.append(f"Very small bounds: {extent:.6f} units")

    sections = [
        ("UV data", h.uv_offset, v * 8),
        ("Color data", h.color_offset, v * 16),
        ("Index data", h.indices_offset, h.index_count * 2),
        ("Bit widths data", h.bit_widths_offset, v * 3),
        ("First frame data", h.first_frame_offset, v * 3),
    ]
    if h.version == 2:
        sections.append(("Texture filename", h.texture_filename_offset, h.texture_filename_length))
    for name, offset, length in sections:
        if offset + length > size:
            result.errors.append(f"{name} extends beyond file")

    delta_bytes = size - h.delta_offset
    if delta_bytes < 0:
        result.errors.append("Delta stream offset beyond file end")
    elif delta_bytes % DELTA_WORD_SIZE:
        result.errors.append(f"Delta stream of {delta_bytes} bytes is not word aligned")
    elif delta_bytes == 0 and h.frame_count > 1:
        result.errors.append("No delta stream data")
    elif delta_bytes > 0 and h.frame_count <= 1:
        result.warnings.append("Delta stream present but only single frame")

    if result.errors:
        _finish(result, log)
        return result

    try:
        anim = parse_rat(data)
        widths = anim.bit_widths
        if v and int(widths.min()) < 1:
            result.warnings.append("Zero bit widths present (decoded as no motion)")

        available_bits = len(anim.delta_stream) * 32
        needed_bits = max(anim.frame_count - 1, 0) * anim.bits_per_frame
        if needed_bits > available_bits:
            result.warnings.append(
                f"Delta stream holds {available_bits} bits but {anim.frame_count} frames need {needed_bits}; "
                f"later frames are not decodable"
            )
            last = available_bits // anim.bits_per_frame if anim.bits_per_frame else 0
        else:
            last = max(anim.frame_count - 1, 0)

        decoder = Decoder(anim)
        decoder.decompress_to(0)
        decoder.decompress_to(last)
    except RatError as e:
        result.errors.append(f"Decompression test failed: {e}")

    _finish(result, log)
    return result


def _finish(result: ValidationResult, log: Optional[ExportLogger]) -> None:
    if log is not None:
        result.report(log)
