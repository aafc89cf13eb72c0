"""RAT vertex animation codec: quantize, delta-compress, split and replay mesh animations."""

__version__ = "1.0.0"

from .animation.compress import compress, validate_topology
from .animation.decode import Decoder, decode_frame, decode_quantized_frames
from .animation.quantize import Quantizer, compute_bounds
from .animation.transform import bake_transforms, flip_z
from .core.errors import RatConfigError, RatError, RatFormatError
from .core.logging import ExportLogger
from .core.types import ExportSettings, FrameTransform, MeshTopology
from .data.container import AnimationContainer, DecoderState
from .export import export_animation, write_animation
from .formats.chunk_splitter import plan_chunks, write_rat_files
from .formats.rat_reader import read_header, read_rat
from .formats.rat_writer import serialize_rat, write_rat
from .formats.validator import ValidationResult, validate_rat_file

write = write_animation
read = read_rat

__all__ = [
    "AnimationContainer",
    "Decoder",
    "DecoderState",
    "ExportLogger",
    "ExportSettings",
    "FrameTransform",
    "MeshTopology",
    "Quantizer",
    "RatConfigError",
    "RatError",
    "RatFormatError",
    "ValidationResult",
    "bake_transforms",
    "compress",
    "compute_bounds",
    "decode_frame",
    "decode_quantized_frames",
    "export_animation",
    "flip_z",
    "plan_chunks",
    "read",
    "read_header",
    "read_rat",
    "serialize_rat",
    "validate_rat_file",
    "validate_topology",
    "write",
    "write_animation",
    "write_rat",
    "write_rat_files",
]
