import numpy as np
import pytest

from ratcodec.animation.compress import compress
from ratcodec.animation.decode import Decoder, decode_quantized_frames
from ratcodec.animation.delta import DeltaEncoder, bits_for_delta, pack_deltas
from ratcodec.core.errors import RatConfigError
from ratcodec.core.logging import ExportLogger
from ratcodec.core.types import MeshTopology
from ratcodec.formats.bitstream import BitReader

# Bounds that make quantization the identity on integer positions 0..255
IDENTITY_BOUNDS = ((0.0, 0.0, 0.0), (255.0, 255.0, 255.0))


def _one_vertex(track_x):
    """(F, 1, 3) uint8 frames moving only along x."""
    q = np.zeros((len(track_x), 1, 3), dtype=np.uint8)
    q[:, 0, 0] = track_x
    q[:, 0, 1] = 40
    q[:, 0, 2] = 200
    return q


@pytest.mark.parametrize("max_abs,expected", [
    (0, 1), (1, 2), (2, 3), (3, 3), (4, 4), (7, 4), (8, 5), (63, 7), (64, 8), (127, 8), (128, 9), (255, 9),
])
def test_bits_for_delta(max_abs, expected):
    assert int(bits_for_delta(np.array([max_abs]))[0]) == expected


def test_two_vertex_example():
    frames = [
        [[0, 0, 0], [10, 10, 10]],
        [[0, 0, 0], [12, 12, 12]],
        [[0, 0, 0], [14, 14, 14]],
    ]
    topo = MeshTopology(indices=np.zeros(0, dtype=np.uint16))
    anim = compress(frames, topo, bounds=IDENTITY_BOUNDS)

    assert anim.first_frame.tolist() == [[0, 0, 0], [10, 10, 10]]
    assert anim.bit_widths[0].tolist() == [1, 1, 1]
    # max delta 2 needs 2^(b-1) - 1 >= 2
    assert anim.bit_widths[1].tolist() == [3, 3, 3]
    assert anim.bits_per_frame == 12

    decoder = Decoder(anim)
    assert decoder.decompress_to(2).tolist() == [[0, 0, 0], [14, 14, 14]]
    assert np.allclose(decoder.positions(), [[0, 0, 0], [14, 14, 14]])


def test_natural_mode_is_lossless(frames, topology):
    anim = compress(frames, topology)
    assert np.array_equal(decode_quantized_frames(anim), anim.quantized_frames)


def test_natural_mode_wraps_deltas_over_eight_bits():
    log = ExportLogger()
    track = [0, 255, 0, 200, 10]
    encoded = DeltaEncoder(log=log).encode(_one_vertex(track))

    assert encoded.widths[0].tolist() == [8, 1, 1]
    assert encoded.deltas[:, 0, 0].tolist() == [-1, 1, -56, 66]
    assert encoded.wrapped == 4
    assert any("wraparound" in w for w in log.warnings)

    # Replaying with byte arithmetic lands on every original position
    pos = track[0]
    for d, expected in zip(encoded.deltas[:, 0, 0].tolist(), track[1:]):
        pos = (pos + d) & 0xFF
        assert pos == expected


def test_bounded_mode_clamps_and_carries():
    encoded = DeltaEncoder(max_bits=2).encode(_one_vertex([0, 3, 3]))
    assert encoded.widths[0].tolist() == [2, 1, 1]
    assert encoded.deltas[:, 0, 0].tolist() == [1, 1]
    assert encoded.final_positions[0, 0] == 2
    assert encoded.clamped == 2


def test_bounded_mode_error_stays_bounded_on_long_hold():
    # One large jump, then the target holds still for a long time
    track = [0] + [10] * 400
    encoded = DeltaEncoder(max_bits=2).encode(_one_vertex(track))

    positions = np.cumsum(encoded.deltas[:, 0, 0].astype(np.int64)) + track[0]
    errors = np.abs(positions - np.asarray(track[1:]))
    assert errors.max() <= 10
    assert np.all(np.abs(encoded.deltas) <= 1)
    assert abs(encoded.final_positions[0, 0] - 10) <= 1


def test_bounded_mode_never_leaves_quantized_range():
    track = [250, 0, 255, 0, 255, 3, 250, 128] * 10
    encoded = DeltaEncoder(max_bits=3).encode(_one_vertex(track))
    positions = np.cumsum(encoded.deltas[:, 0, 0].astype(np.int64)) + track[0]
    assert positions.min() >= 0
    assert positions.max() <= 255


def test_bounded_width_one_stores_no_motion():
    """A 1-bit cap clamps every delta to +-0, so the vertex holds its first frame."""
    encoded = DeltaEncoder(max_bits=1).encode(_one_vertex([0, 50, 100]))
    assert encoded.widths.max() == 1
    assert not encoded.deltas.any()


def test_bounded_mode_round_trips_through_bitstream(frames, topology):
    anim = compress(frames, topology, max_bits_per_axis=3)
    assert anim.bit_widths.max() <= 3
    decoded = decode_quantized_frames(anim)
    assert decoded.shape == anim.quantized_frames.shape


def test_bounded_without_clamping_is_lossless():
    track = [10, 11, 12, 11, 10, 10]
    q = _one_vertex(track)
    natural = DeltaEncoder().encode(q)
    bounded = DeltaEncoder(max_bits=8).encode(q)
    assert np.array_equal(natural.deltas, bounded.deltas)
    assert bounded.clamped == 0


@pytest.mark.parametrize("cap", [0, 9, -1])
def test_cap_outside_range_rejected(cap):
    with pytest.raises(RatConfigError):
        DeltaEncoder(max_bits=cap)


def test_pack_deltas_layout():
    widths = np.array([[2, 3, 1]], dtype=np.uint8)
    deltas = np.array([[[-1, 3, 0]], [[1, -4, -1]]], dtype=np.int16)
    stream = pack_deltas(deltas, widths)
    assert len(stream) == 1

    r = BitReader(stream)
    assert [r.read_signed(b) for b in (2, 3, 1, 2, 3, 1)] == [-1, 3, 0, 1, -4, -1]


def test_single_frame_has_empty_stream():
    anim = compress([[[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]]], MeshTopology(indices=np.zeros(0, dtype=np.uint16)))
    assert len(anim.delta_stream) == 0
    assert anim.bit_widths.tolist() == [[1, 1, 1], [1, 1, 1]]
