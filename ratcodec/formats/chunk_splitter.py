"""Split one animation across several size-bounded RAT files."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, List, Optional

from ..core.errors import RatConfigError
from ..core.logging import ExportLogger
from ..data.rat_format import DELTA_WORD_SIZE
from .rat_writer import layout_for, write_rat

if TYPE_CHECKING:
    from ..data.container import AnimationContainer

KB = 1024


@dataclass
class Chunk:
    """One planned output file."""
    filename: str
    anim: AnimationContainer
    start_word: int
    word_count: int


def base_name(path: str) -> str:
    """Strip a trailing .rat so 'walk.rat' and 'walk' name the same file set."""
    root, ext = os.path.splitext(path)
    return root if ext.lower() == ".rat" else path


def chunk_filename(base: str, index: int, count: int) -> str:
    if count == 1:
        return f"{base}.rat"
    return f"{base}_part{index + 1:02d}of{count:02d}.rat"


def plan_chunks(
    anim: AnimationContainer,
    base_path: str,
    max_file_size_kb: int = 64,
    log: Optional[ExportLogger] = None,
) -> List[Chunk]:
    """
    Partition the delta stream into files of at most max_file_size_kb each.

    Every file repeats the static sections (header, UVs, colors, indices,
    bit widths, first frame, texture name); the remaining budget is filled
    with a contiguous run of delta words. Nothing is written to disk.
    """
    log = log or ExportLogger()
    base = base_name(base_path)
    max_size = max_file_size_kb * KB
    layout = layout_for(anim)
    static_size = layout.static_size

    if static_size > max_size:
        raise RatConfigError(
            f"Static RAT data ({static_size} bytes) exceeds maximum file size ({max_size} bytes): "
            f"header {layout.header_size}, UVs {layout.color_offset - layout.uv_offset}, "
            f"colors {layout.indices_offset - layout.color_offset}, "
            f"indices {layout.bit_widths_offset - layout.indices_offset}, "
            f"bit widths {layout.first_frame_offset - layout.bit_widths_offset}, "
            f"first frame {layout.texture_filename_offset - layout.first_frame_offset}, "
            f"texture name {layout.texture_filename_length}"
        )

    total_words = len(anim.delta_stream)
    if anim.frame_count <= 1 or total_words == 0:
        return [Chunk(chunk_filename(base, 0, 1), anim, 0, total_words)]

    words_per_file = (max_size - static_size) // DELTA_WORD_SIZE
    if words_per_file == 0:
        raise RatConfigError(
            f"No room for delta data within {max_file_size_kb}KB: static data uses {static_size} bytes"
        )

    count = math.ceil(total_words / words_per_file)
    if count == 1:
        return [Chunk(chunk_filename(base, 0, 1), anim, 0, total_words)]

    chunks: List[Chunk] = []
    for index in range(count):
        start = index * words_per_file
        run = anim.delta_stream[start:start + words_per_file].copy()
        part = replace(
            anim,
            frame_count=math.ceil(len(run) / anim.vertex_count),
            delta_stream=run,
            quantized_frames=None,
        )
        chunks.append(Chunk(chunk_filename(base, index, count), part, start, len(run)))

    log.info(f"Splitting {total_words} delta words into {count} files "
             f"({words_per_file} words per file, {static_size} static bytes each)")
    return chunks


def write_rat_files(
    anim: AnimationContainer,
    base_path: str,
    max_file_size_kb: int = 64,
    overwrite: bool = True,
    log: Optional[ExportLogger] = None,
) -> List[str]:
    """
    Write an animation as one or more independent RAT files.

    Returns the written paths in part order. Configuration errors are raised
    before the first file is created.
    """
    log = log or ExportLogger()
    chunks = plan_chunks(anim, base_path, max_file_size_kb, log)

    if not overwrite:
        existing = [c.filename for c in chunks if os.path.exists(c.filename)]
        if existing:
            raise RatConfigError(f"Refusing to overwrite existing files: {', '.join(existing)}")

    directory = os.path.dirname(base_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    written: List[str] = []
    for chunk in chunks:
        write_rat(chunk.anim, chunk.filename, log)
        written.append(chunk.filename)
    return written
