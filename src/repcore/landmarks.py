"""
Landmark topology and coercion of estimator output into Landmark tuples.
"""
import math
from collections.abc import Mapping
from typing import NamedTuple, Optional

import numpy as np

# MediaPipe Pose keypoint order
KEYPOINT_NAMES = [
    "nose", "left_eye_inner", "left_eye", "left_eye_outer",
    "right_eye_inner", "right_eye", "right_eye_outer",
    "left_ear", "right_ear", "mouth_left", "mouth_right",
    "left_shoulder", "right_shoulder", "left_elbow", "right_elbow",
    "left_wrist", "right_wrist", "left_pinky", "right_pinky",
    "left_index", "right_index", "left_thumb", "right_thumb",
    "left_hip", "right_hip", "left_knee", "right_knee",
    "left_ankle", "right_ankle", "left_heel", "right_heel",
    "left_foot_index", "right_foot_index"
]

NAME_TO_IDX = {name: i for i, name in enumerate(KEYPOINT_NAMES)}


class Landmark(NamedTuple):
    """One estimated keypoint. z and visibility are optional."""
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None


def _number(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def read_landmark(raw):
    """
    Coerce one estimator landmark into a Landmark.

    Accepts a Landmark, a mapping with "x"/"y" (and optional "z",
    "visibility") keys, a sequence or numpy row (x, y[, z[, visibility]]),
    or any object exposing x/y attributes, like MediaPipe's
    NormalizedLandmark.

    Returns:
        Landmark, or None if x or y cannot be read
    """
    if isinstance(raw, Landmark):
        return raw

    if isinstance(raw, Mapping):
        fields = [raw.get("x"), raw.get("y"), raw.get("z"), raw.get("visibility")]
    elif isinstance(raw, (list, tuple, np.ndarray)):
        fields = list(raw[:4]) + [None] * (4 - len(raw[:4]))
    elif hasattr(raw, "x") and hasattr(raw, "y"):
        fields = [raw.x, raw.y, getattr(raw, "z", None), getattr(raw, "visibility", None)]
    else:
        return None

    x, y, z, visibility = (_number(f) for f in fields)
    if x is None or y is None:
        return None
    return Landmark(x, y, z, visibility)


def get_keypoint(frame, idx):
    """
    Get a landmark from a frame by index or name.

    Args:
        frame: Ordered landmark sequence
        idx: Integer index or keypoint name (e.g., "left_shoulder")

    Returns:
        Landmark, or None if the frame is too short or the entry unreadable
    """
    if isinstance(idx, str):
        idx = NAME_TO_IDX[idx]
    if frame is None:
        return None
    try:
        raw = frame[idx]
    except (IndexError, KeyError, TypeError):
        return None
    return read_landmark(raw)


def is_visible(landmark, min_visibility=0.5):
    """A landmark without a visibility score counts as visible."""
    return landmark.visibility is None or landmark.visibility >= min_visibility
