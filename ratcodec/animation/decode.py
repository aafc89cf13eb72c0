"""Forward-replay decompression of RAT delta streams.

Only frame 0 is stored in full. Frame K is materialized by applying the
deltas of frames 1..K in order; seeking backwards restarts from frame 0.
Positions live in 8-bit quantized space and wrap modulo 256 when a delta is
applied, matching the byte arithmetic of the playback engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ..core.errors import RatError
from ..data.container import DecoderState
from ..formats.bitstream import BitReader, sign_extend
from .quantize import dequantize

if TYPE_CHECKING:
    from ..data.container import AnimationContainer


class Decoder:
    """Replays one animation; owns its DecoderState exclusively."""

    def __init__(self, anim: AnimationContainer):
        self.anim = anim
        self.state = DecoderState(current_positions=anim.first_frame.copy())
        self._reader = BitReader(anim.delta_stream)
        self._widths = [int(w) for w in anim.bit_widths.reshape(-1).tolist()]
        # Widths are constant across frames, so frame f's data starts at (f - 1) * bits_per_frame
        self._bits_per_frame = sum(self._widths)

    @property
    def current_frame(self) -> int:
        return self.state.current_frame

    @property
    def last_frame(self) -> int:
        return max(self.anim.frame_count - 1, 0)

    def frame_bit_offset(self, frame: int) -> int:
        """Bit offset of the first delta of `frame` (frame >= 1)."""
        return (frame - 1) * self._bits_per_frame

    def reset(self) -> None:
        self.state.current_positions[:] = self.anim.first_frame
        self.state.current_frame = 0
        self.state.initialized = True

    def decompress_to(self, target_frame: int) -> np.ndarray:
        """Advance (or restart and advance) to target_frame; returns quantized (V, 3) positions."""
        target_frame = min(max(int(target_frame), 0), self.last_frame)
        state = self.state

        if state.initialized and target_frame == state.current_frame:
            return state.current_positions
        if not state.initialized or target_frame < state.current_frame:
            self.reset()

        try:
            self._reader.seek(self.frame_bit_offset(state.current_frame + 1))
            for _ in range(state.current_frame + 1, target_frame + 1):
                self._apply_frame()
        except RatError:
            # Positions may be part-way between frames; restart from frame 0
            self.reset()
            raise
        state.current_frame = target_frame
        return state.current_positions

    def _apply_frame(self) -> None:
        read = self._reader.read
        deltas = np.fromiter(
            (sign_extend(read(bits), bits) for bits in self._widths),
            dtype=np.int16,
            count=len(self._widths),
        ).reshape(-1, 3)
        positions = self.state.current_positions
        positions[:] = ((positions.astype(np.int16) + deltas) & 0xFF).astype(np.uint8)

    def positions(self) -> np.ndarray:
        """Current frame dequantized to float positions."""
        return dequantize(self.state.current_positions, self.anim.bounds_min, self.anim.bounds_max)


def decode_frame(anim: AnimationContainer, frame_index: int) -> np.ndarray:
    """Float (V, 3) positions of one frame, replayed from frame 0."""
    decoder = Decoder(anim)
    decoder.decompress_to(frame_index)
    return decoder.positions()


def decode_quantized_frames(anim: AnimationContainer) -> np.ndarray:
    """Every frame in quantized space, (F, V, 3) uint8."""
    decoder = Decoder(anim)
    frames = [decoder.decompress_to(0).copy()]
    for f in range(1, anim.frame_count):
        frames.append(decoder.decompress_to(f).copy())
    return np.stack(frames)
