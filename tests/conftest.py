import math

import pytest

from repcore.landmarks import KEYPOINT_NAMES, NAME_TO_IDX


def _place_joint(frame, joints, deg, origin):
    """Put p1/vertex/p3 so the angle at the vertex is deg (both conventions)."""
    p1, vertex, p3 = joints
    ox, oy = origin
    rad = math.radians(deg)
    frame[vertex] = {"x": ox, "y": oy, "visibility": 0.99}
    frame[p1] = {"x": ox + 1.0, "y": oy, "visibility": 0.99}
    frame[p3] = {"x": ox + math.cos(rad), "y": oy + math.sin(rad), "visibility": 0.99}


@pytest.fixture
def make_frame():
    """
    Build a 33-landmark frame with the given joint angles.

    Usage: make_frame({(11, 13, 15): 60.0, (12, 14, 16): 60.0})
    """
    def _make(angles, length=len(KEYPOINT_NAMES)):
        frame = [{"x": 0.0, "y": 0.0, "visibility": 0.99} for _ in range(length)]
        for n, (joints, deg) in enumerate(angles.items()):
            _place_joint(frame, joints, deg, origin=(10.0 * (n + 1), 5.0 * (n + 1)))
        return frame
    return _make


@pytest.fixture
def idx():
    return NAME_TO_IDX
