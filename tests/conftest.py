import numpy as np
import pytest

from ratcodec.core.types import MeshTopology


def quad_topology(uvs=True, colors=True):
    return MeshTopology(
        indices=np.array([0, 1, 2, 2, 1, 3], dtype=np.uint16),
        uvs=np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]], dtype=np.float32) if uvs else None,
        colors=np.full((4, 4), 0.5, dtype=np.float32) if colors else None,
    )


def wave_frames(frame_count=12, seed=3):
    """A unit quad whose corners drift on small random walks."""
    rng = np.random.default_rng(seed)
    base = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.5]])
    steps = rng.normal(scale=0.02, size=(frame_count, 4, 3))
    steps[0] = 0.0
    return base + np.cumsum(steps, axis=0)


def blinking_frames(frame_count):
    """Every vertex jumps between the two corners of the unit cube each frame."""
    frames = np.zeros((frame_count, 4, 3))
    frames[1::2] = 1.0
    return frames


@pytest.fixture
def topology():
    return quad_topology()


@pytest.fixture
def frames():
    return wave_frames()
