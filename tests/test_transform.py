import numpy as np
import pytest

from ratcodec.animation.transform import bake_transforms, euler_matrix, flip_z
from ratcodec.core.errors import RatConfigError
from ratcodec.core.types import FrameTransform


def test_identity_transform():
    frames = np.arange(12, dtype=np.float64).reshape(2, 2, 3)
    baked = bake_transforms(frames, [FrameTransform(), FrameTransform()])
    assert np.allclose(baked, frames)


def test_scale_rotate_translate_order():
    frames = np.array([[[1.0, 0.0, 0.0]]])
    t = FrameTransform(position=(0.0, 0.0, 5.0), rotation=(0.0, 0.0, 90.0), scale=(2.0, 1.0, 1.0))
    assert np.allclose(bake_transforms(frames, [t]), [[[0.0, 2.0, 5.0]]])


def test_euler_applies_z_before_x():
    # Z first: x -> y, then X: y -> z
    assert np.allclose(euler_matrix((90.0, 0.0, 90.0)) @ [1.0, 0.0, 0.0], [0.0, 0.0, 1.0])


def test_euler_y_rotation():
    assert np.allclose(euler_matrix((0.0, 90.0, 0.0)) @ [1.0, 0.0, 0.0], [0.0, 0.0, -1.0])


def test_transform_count_must_match_frames():
    with pytest.raises(RatConfigError, match="counts must match"):
        bake_transforms(np.zeros((3, 1, 3)), [FrameTransform()])


def test_flip_z_mirrors_and_rewinds():
    frames = np.array([[[1.0, 2.0, 3.0], [4.0, 5.0, -6.0], [0.0, 0.0, 0.0]]])
    indices = np.array([0, 1, 2], dtype=np.uint16)
    flipped, rewound = flip_z(frames, indices)

    assert flipped[0].tolist() == [[1.0, 2.0, -3.0], [4.0, 5.0, 6.0], [0.0, 0.0, 0.0]]
    assert rewound.tolist() == [0, 2, 1]
    assert frames[0, 0, 2] == 3.0
    assert indices.tolist() == [0, 1, 2]


def test_flip_z_needs_triangles():
    with pytest.raises(RatConfigError):
        flip_z(np.zeros((1, 2, 3)), [0, 1])
