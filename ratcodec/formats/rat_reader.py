"""Read RAT1 / RAT2 vertex animation files.

The header is parsed field by field, then every section is read from the
offset the header declares. Any mismatch between declared and available
bytes is a RatFormatError; nothing is recovered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.errors import RatFormatError
from ..core.logging import ExportLogger
from ..data.container import AnimationContainer
from ..data.rat_format import (
    DELTA_WORD_SIZE,
    MAX_BIT_WIDTH,
    RAT1_MAGIC,
    RAT1_RESERVED,
    RAT2_MAGIC,
    RAT2_RESERVED,
)
from .binary_reader import BinaryReader


@dataclass
class RatHeader:
    """Parsed header fields."""
    magic: int
    vertex_count: int
    frame_count: int
    index_count: int
    uv_offset: int
    color_offset: int
    indices_offset: int
    delta_offset: int
    bit_widths_offset: int
    texture_filename_offset: int
    texture_filename_length: int
    bounds_min: tuple
    bounds_max: tuple

    @property
    def version(self) -> int:
        return 2 if self.magic == RAT2_MAGIC else 1

    @property
    def first_frame_offset(self) -> int:
        return self.bit_widths_offset + self.vertex_count * 3


def parse_header(b: BinaryReader) -> RatHeader:
    magic = b.u32()
    if magic not in (RAT1_MAGIC, RAT2_MAGIC):
        raise RatFormatError(
            f"Not a RAT file (magic 0x{magic:08X}, expected 0x{RAT1_MAGIC:08X} or 0x{RAT2_MAGIC:08X})"
        )

    vertex_count = b.u32()
    frame_count = b.u32()
    index_count = b.u32()
    uv_offset = b.u32()
    color_offset = b.u32()
    indices_offset = b.u32()
    delta_offset = b.u32()
    bit_widths_offset = b.u32()

    texture_filename_offset = 0
    texture_filename_length = 0
    if magic == RAT2_MAGIC:
        texture_filename_offset = b.u32()
        texture_filename_length = b.u32()

    bounds_min = (b.f32(), b.f32(), b.f32())
    bounds_max = (b.f32(), b.f32(), b.f32())
    b.read(RAT2_RESERVED if magic == RAT2_MAGIC else RAT1_RESERVED)

    return RatHeader(
        magic=magic,
        vertex_count=vertex_count,
        frame_count=frame_count,
        index_count=index_count,
        uv_offset=uv_offset,
        color_offset=color_offset,
        indices_offset=indices_offset,
        delta_offset=delta_offset,
        bit_widths_offset=bit_widths_offset,
        texture_filename_offset=texture_filename_offset,
        texture_filename_length=texture_filename_length,
        bounds_min=bounds_min,
        bounds_max=bounds_max,
    )


def parse_rat(data: bytes) -> AnimationContainer:
    """Parse a complete RAT file image."""
    b = BinaryReader(data)
    h = parse_header(b)
    v = h.vertex_count

    b.seek(h.uv_offset)
    uvs = b.array('<f4', v * 2).reshape(v, 2)
    b.seek(h.color_offset)
    colors = b.array('<f4', v * 4).reshape(v, 4)
    b.seek(h.indices_offset)
    indices = b.array('<u2', h.index_count)

    b.seek(h.bit_widths_offset)
    bit_widths_x = b.array('u1', v)
    bit_widths_y = b.array('u1', v)
    bit_widths_z = b.array('u1', v)
    first_frame = b.array('u1', v * 3).reshape(v, 3)

    for axis, widths in zip("xyz", (bit_widths_x, bit_widths_y, bit_widths_z)):
        if v and int(widths.max()) > MAX_BIT_WIDTH:
            raise RatFormatError(f"Bit width {int(widths.max())} on axis {axis} exceeds {MAX_BIT_WIDTH}")

    texture_filename = ""
    if h.version == 2:
        b.seek(h.texture_filename_offset)
        try:
            texture_filename = b.read(h.texture_filename_length).decode("utf-8")
        except UnicodeDecodeError as e:
            raise RatFormatError(f"Texture filename is not valid UTF-8: {e}") from e

    b.seek(h.delta_offset)
    delta_bytes = len(data) - h.delta_offset
    if delta_bytes % DELTA_WORD_SIZE:
        raise RatFormatError(
            f"Delta stream of {delta_bytes} bytes is not a whole number of 32-bit words"
        )
    delta_stream = b.array('<u4', delta_bytes // DELTA_WORD_SIZE)

    return AnimationContainer(
        vertex_count=v,
        frame_count=h.frame_count,
        index_count=h.index_count,
        bounds_min=h.bounds_min,
        bounds_max=h.bounds_max,
        uvs=uvs,
        colors=colors,
        indices=indices,
        first_frame=first_frame,
        bit_widths_x=bit_widths_x,
        bit_widths_y=bit_widths_y,
        bit_widths_z=bit_widths_z,
        delta_stream=delta_stream,
        texture_filename=texture_filename,
    )


def read_header(path: str) -> RatHeader:
    with open(path, "rb") as f:
        data = f.read()
    return parse_header(BinaryReader(data))


def read_rat(path: str, log: Optional[ExportLogger] = None) -> AnimationContainer:
    """Read a RAT1 or RAT2 file, dispatching on its magic."""
    with open(path, "rb") as f:
        data = f.read()

    anim = parse_rat(data)
    if log is not None:
        log.info(f"Read {path}: {anim.vertex_count} vertices, {anim.frame_count} frames, "
                 f"{len(anim.delta_stream)} delta words")
    return anim
