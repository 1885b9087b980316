"""
Geometric calculation utilities for joint angles and completion percentages.
"""
import math

import numpy as np


def _as_point(p):
    return np.array([float(p[0]), float(p[1])], dtype=float)


def _rays(a, b, c):
    """Rays BA and BC, or (None, None) if either is zero-length or non-finite."""
    b = _as_point(b)
    ba = _as_point(a) - b
    bc = _as_point(c) - b
    if not (np.all(np.isfinite(ba)) and np.all(np.isfinite(bc))):
        return None, None
    if not (np.any(ba) and np.any(bc)):
        return None, None
    return ba, bc


def angle(a, b, c):
    """
    Calculate the angle ABC (at point b) in degrees.

    Args:
        a, b, c: Points as array-like (x, y) coordinates

    Returns:
        Angle in degrees (0-180). 0.0 if either ray has zero length or a
        coordinate is NaN/inf, so the result is never NaN.
    """
    ba, bc = _rays(a, b, c)
    if ba is None:
        return 0.0

    cosv = float(np.dot(ba, bc) / (np.linalg.norm(ba) * np.linalg.norm(bc)))
    return float(np.degrees(np.arccos(np.clip(cosv, -1.0, 1.0))))


def directional_angle(a, b, c):
    """
    Calculate the signed rotation from ray BA to ray BC in degrees.

    Unlike angle(), the result keeps the rotational direction, so over- and
    under-extension of a joint land on different sides of 180.

    Args:
        a, b, c: Points as array-like (x, y) coordinates

    Returns:
        Angle in degrees, normalized into [0, 360). 0.0 if either ray has
        zero length or a coordinate is NaN/inf.
    """
    ba, bc = _rays(a, b, c)
    if ba is None:
        return 0.0

    deg = math.degrees(math.atan2(bc[1], bc[0]) - math.atan2(ba[1], ba[0]))
    if deg < 0:
        deg += 360.0
    if deg >= 360.0:  # -1e-15 + 360 rounds up
        deg = 0.0

    return deg


def interpolate(value, in_range, out_range):
    """
    Map value from in_range onto out_range, clamping to in_range first.

    Args:
        value: Input value (e.g. a joint angle)
        in_range: (in_min, in_max) calibration range
        out_range: (out_min, out_max) target range; may be descending

    Returns:
        Rescaled value. out_min if the input range is empty.
    """
    in_min, in_max = float(in_range[0]), float(in_range[1])
    out_min, out_max = float(out_range[0]), float(out_range[1])

    if in_max == in_min:
        return out_min

    clamped = float(np.clip(value, min(in_min, in_max), max(in_min, in_max)))
    return out_min + (clamped - in_min) / (in_max - in_min) * (out_max - out_min)


def to_percentage(value):
    """Round half-up and clamp into an integer percentage (0-100)."""
    if not math.isfinite(value):
        return 0
    return max(0, min(100, int(math.floor(value + 0.5))))
