"""RAT file constants and section layout."""

from __future__ import annotations

from dataclasses import dataclass

# --- File magic numbers (little-endian "RAT1" / "RAT2") ---
RAT1_MAGIC = 0x31544152
RAT2_MAGIC = 0x32544152

# --- Header sizes (packed, no padding) ---
# magic, vertex/frame/index counts, 5 offsets, 6 bound floats, 4 reserved bytes
RAT1_HEADER_SIZE = 9 * 4 + 6 * 4 + 4   # 64
# RAT1 + texture filename offset/length, 8 reserved bytes
RAT2_HEADER_SIZE = 11 * 4 + 6 * 4 + 8  # 76
RAT1_RESERVED = 4
RAT2_RESERVED = 8

# --- Bytes per vertex / index in each section ---
UV_SIZE = 8            # 2 x float32
COLOR_SIZE = 16        # 4 x float32
INDEX_SIZE = 2         # uint16
BIT_WIDTHS_SIZE = 3    # 3 parallel uint8 arrays
FIRST_FRAME_SIZE = 3   # 3 x uint8
DELTA_WORD_SIZE = 4    # uint32

# --- Limits ---
MAX_VERTICES = 65535
MIN_BIT_WIDTH = 1
MAX_BIT_WIDTH = 8
QUANT_LEVELS = 255


@dataclass(frozen=True)
class RatLayout:
    """Byte offsets of every section, computed additively from section sizes."""
    magic: int
    header_size: int
    uv_offset: int
    color_offset: int
    indices_offset: int
    bit_widths_offset: int
    first_frame_offset: int
    texture_filename_offset: int
    texture_filename_length: int
    delta_offset: int

    @property
    def static_size(self) -> int:
        """Bytes before the delta stream; identical for every chunk of an animation."""
        return self.delta_offset

    def file_size(self, delta_words: int) -> int:
        return self.delta_offset + delta_words * DELTA_WORD_SIZE


def compute_layout(vertex_count: int, index_count: int, texture_filename: str = "") -> RatLayout:
    """
    Lay out a RAT file.

    RAT1: header, UVs, colors, indices, bit widths (x, y, z), first frame, deltas.
    RAT2: same, with the UTF-8 texture filename between first frame and deltas.
    """
    name_bytes = texture_filename.encode("utf-8") if texture_filename else b""
    if name_bytes:
        magic, header_size = RAT2_MAGIC, RAT2_HEADER_SIZE
    else:
        magic, header_size = RAT1_MAGIC, RAT1_HEADER_SIZE

    uv_offset = header_size
    color_offset = uv_offset + vertex_count * UV_SIZE
    indices_offset = color_offset + vertex_count * COLOR_SIZE
    bit_widths_offset = indices_offset + index_count * INDEX_SIZE
    first_frame_offset = bit_widths_offset + vertex_count * BIT_WIDTHS_SIZE
    texture_filename_offset = first_frame_offset + vertex_count * FIRST_FRAME_SIZE
    delta_offset = texture_filename_offset + len(name_bytes)

    return RatLayout(
        magic=magic,
        header_size=header_size,
        uv_offset=uv_offset,
        color_offset=color_offset,
        indices_offset=indices_offset,
        bit_widths_offset=bit_widths_offset,
        first_frame_offset=first_frame_offset,
        texture_filename_offset=texture_filename_offset,
        texture_filename_length=len(name_bytes),
        delta_offset=delta_offset,
    )
