import numpy as np
import pytest

from ratcodec.animation.compress import compress, validate_topology
from ratcodec.core.errors import RatConfigError
from ratcodec.core.logging import ExportLogger
from ratcodec.core.types import MeshTopology

from conftest import quad_topology


def test_container_fields(frames, topology):
    anim = compress(frames, topology, texture_filename="quad.png")
    assert anim.vertex_count == 4
    assert anim.frame_count == 12
    assert anim.index_count == 6
    assert anim.indices.dtype == np.uint16
    assert anim.first_frame.shape == (4, 3)
    assert anim.is_v2
    assert np.array_equal(anim.uvs, topology.uvs)
    assert np.all(np.asarray(anim.bounds_min) <= frames.reshape(-1, 3).min(axis=0))
    assert np.all(np.asarray(anim.bounds_max) >= frames.reshape(-1, 3).max(axis=0))


def test_missing_uvs_and_colors_get_defaults(frames):
    log = ExportLogger()
    anim = compress(frames, quad_topology(uvs=False, colors=False), log=log)
    assert not anim.uvs.any()
    assert np.all(anim.colors == 1.0)
    assert any("No UVs" in msg for _, msg in log.messages)


def test_frames_accept_list_of_arrays(frames, topology):
    anim = compress(list(frames), topology)
    assert anim.frame_count == len(frames)


def test_wrong_uv_count_rejected(frames):
    topo = MeshTopology(indices=[0, 1, 2], uvs=np.zeros((3, 2)))
    with pytest.raises(RatConfigError, match="UVs"):
        compress(frames, topo)


def test_index_out_of_range_rejected():
    with pytest.raises(RatConfigError, match="out of range"):
        validate_topology(MeshTopology(indices=[0, 1, 4]), 4)


def test_negative_index_rejected():
    with pytest.raises(RatConfigError):
        validate_topology(MeshTopology(indices=[0, -1, 2]), 4)


def test_untriangulated_indices_rejected():
    with pytest.raises(RatConfigError, match="divisible by 3"):
        validate_topology(MeshTopology(indices=[0, 1, 2, 3]), 4)


def test_too_many_vertices_rejected():
    with pytest.raises(RatConfigError, match="65535"):
        validate_topology(MeshTopology(indices=[]), 65536)


def test_max_vertex_count_accepted():
    indices = validate_topology(MeshTopology(indices=[0, 65534, 1]), 65535)
    assert indices.tolist() == [0, 65534, 1]


def test_zero_vertices_rejected():
    with pytest.raises(RatConfigError):
        validate_topology(MeshTopology(indices=[]), 0)


def test_index_array_may_be_triangle_rows(frames):
    topo = MeshTopology(indices=np.array([[0, 1, 2], [2, 1, 3]]))
    anim = compress(frames, topo)
    assert anim.indices.tolist() == [0, 1, 2, 2, 1, 3]


def test_bad_cap_fails_before_encoding(frames, topology):
    with pytest.raises(RatConfigError, match="max_bits_per_axis"):
        compress(frames, topology, max_bits_per_axis=12)


def test_explicit_bounds_are_stored(frames, topology):
    bounds = ((-2.0, -2.0, -2.0), (3.0, 3.0, 3.0))
    anim = compress(frames, topology, bounds=bounds)
    assert anim.bounds_min == bounds[0]
    assert anim.bounds_max == bounds[1]
