"""Write RAT1 / RAT2 vertex animation files."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..core.errors import RatConfigError
from ..core.logging import ExportLogger
from ..data.rat_format import (
    RAT1_RESERVED,
    RAT2_MAGIC,
    RAT2_RESERVED,
    RatLayout,
    compute_layout,
)
from .binary_writer import BinaryWriter, binary_file

if TYPE_CHECKING:
    from ..data.container import AnimationContainer


def layout_for(anim: AnimationContainer) -> RatLayout:
    return compute_layout(anim.vertex_count, anim.index_count, anim.texture_filename)


def _check_shapes(anim: AnimationContainer) -> None:
    v = anim.vertex_count
    expected = {
        "uvs": (anim.uvs.shape, (v, 2)),
        "colors": (anim.colors.shape, (v, 4)),
        "indices": (anim.indices.shape, (anim.index_count,)),
        "first_frame": (anim.first_frame.shape, (v, 3)),
        "bit_widths_x": (anim.bit_widths_x.shape, (v,)),
        "bit_widths_y": (anim.bit_widths_y.shape, (v,)),
        "bit_widths_z": (anim.bit_widths_z.shape, (v,)),
    }
    for name, (actual, wanted) in expected.items():
        if tuple(actual) != wanted:
            raise RatConfigError(f"Section '{name}' has shape {tuple(actual)}, expected {wanted}")


def _write_body(w: BinaryWriter, anim: AnimationContainer, layout: RatLayout) -> None:
    """
    Emit header and sections in file order.

    Header (RAT1):
      uint magic, vertex_count, frame_count, index_count
      uint uv_offset, color_offset, indices_offset, delta_offset, bit_widths_offset
      float min_x, min_y, min_z, max_x, max_y, max_z
      byte reserved[4]
    RAT2 inserts texture_filename_offset/length before the bounds and has reserved[8].
    """
    v2 = layout.magic == RAT2_MAGIC

    w.write_uint(layout.magic)
    w.write_uint(anim.vertex_count)
    w.write_uint(anim.frame_count)
    w.write_uint(anim.index_count)
    w.write_uint(layout.uv_offset)
    w.write_uint(layout.color_offset)
    w.write_uint(layout.indices_offset)
    w.write_uint(layout.delta_offset)
    w.write_uint(layout.bit_widths_offset)
    if v2:
        w.write_uint(layout.texture_filename_offset)
        w.write_uint(layout.texture_filename_length)
    for value in anim.bounds_min:
        w.write_float(value)
    for value in anim.bounds_max:
        w.write_float(value)
    w.write_zeros(RAT2_RESERVED if v2 else RAT1_RESERVED)

    # Sections
    w.write_array(anim.uvs, '<f4')
    w.write_array(anim.colors, '<f4')
    w.write_array(anim.indices, '<u2')
    w.write_array(anim.bit_widths_x, 'u1')
    w.write_array(anim.bit_widths_y, 'u1')
    w.write_array(anim.bit_widths_z, 'u1')
    w.write_array(anim.first_frame, 'u1')
    if v2:
        w.write_bytes(anim.texture_filename.encode("utf-8"))
    w.write_array(anim.delta_stream, '<u4')


def serialize_rat(anim: AnimationContainer) -> bytes:
    """Return the complete file image of an animation."""
    _check_shapes(anim)
    layout = layout_for(anim)
    w = BinaryWriter()
    _write_body(w, anim, layout)
    return w.getvalue()


def write_rat(anim: AnimationContainer, filepath: str, log: Optional[ExportLogger] = None) -> int:
    """
    Write one AnimationContainer to a single RAT file.

    RAT2 is selected iff the animation carries a texture filename.
    Returns the number of bytes written.
    """
    log = log or ExportLogger()
    _check_shapes(anim)
    layout = layout_for(anim)

    with binary_file(filepath) as w:
        _write_body(w, anim, layout)
        size = w.size

    version = "RAT2" if anim.is_v2 else "RAT1"
    log.info(f"Written {version}: {filepath} ({size} bytes, {anim.frame_count} frames, "
             f"{len(anim.delta_stream)} delta words)")
    return size
