"""One-call export: raw frames in, RAT file set on disk."""

from __future__ import annotations

from typing import List, Optional

from .animation.compress import compress
from .animation.quantize import Bounds, as_frame_array
from .animation.transform import bake_transforms, flip_z
from .core.errors import RatError
from .core.logging import ExportLogger
from .core.types import ExportSettings, FrameTransform, MeshTopology
from .data.container import AnimationContainer
from .formats.chunk_splitter import write_rat_files
from .formats.validator import validate_rat_file


def export_animation(
    base_path: str,
    frames,
    topology: MeshTopology,
    settings: Optional[ExportSettings] = None,
    transforms: Optional[List[FrameTransform]] = None,
    log: Optional[ExportLogger] = None,
    bounds: Optional[Bounds] = None,
) -> List[str]:
    """
    Compress a captured vertex animation and write it as one or more RAT files.

    Pipeline: bake per-frame transforms, optional Z flip, compress, split and
    write, then optionally re-read and validate every file. Errors are logged
    and re-raised; nothing is written if compression or planning fails.
    """
    settings = settings or ExportSettings()
    log = log or ExportLogger()

    try:
        data = as_frame_array(frames)
        if transforms is not None:
            data = bake_transforms(data, transforms)

        if settings.flip_z:
            data, indices = flip_z(data, topology.indices)
            topology = MeshTopology(indices=indices, uvs=topology.uvs, colors=topology.colors)

        anim = compress(
            data,
            topology,
            bounds=bounds,
            max_bits_per_axis=settings.max_bits_per_axis,
            texture_filename=settings.texture_filename,
            log=log,
        )
        written = write_rat_files(
            anim,
            base_path,
            max_file_size_kb=settings.max_file_size_kb,
            overwrite=settings.overwrite,
            log=log,
        )
    except RatError as e:
        log.error(f"Export of {base_path} failed: {e}")
        raise

    if settings.validate_output:
        for path in written:
            validate_rat_file(path, log)

    log.info(f"Exported {len(written)} file(s), {log.warning_count} warnings")
    return written


def write_animation(
    anim: AnimationContainer,
    base_path: str,
    settings: Optional[ExportSettings] = None,
    log: Optional[ExportLogger] = None,
) -> List[str]:
    """Write an already compressed animation using the split and overwrite settings."""
    settings = settings or ExportSettings()
    written = write_rat_files(
        anim,
        base_path,
        max_file_size_kb=settings.max_file_size_kb,
        overwrite=settings.overwrite,
        log=log,
    )
    if settings.validate_output:
        for path in written:
            validate_rat_file(path, log)
    return written
