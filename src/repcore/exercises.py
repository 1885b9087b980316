"""
Per-exercise calibration: which joints to track and how angles map to percentages.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from repcore.landmarks import NAME_TO_IDX

MIN_VISIBILITY = 0.5


class Exercise(str, Enum):
    PUSHUP = "pushup"
    CURL = "curl"
    SQUAT = "squat"

    @classmethod
    def parse(cls, tag):
        """Resolve an Exercise or its tag string; unknown tags raise ValueError."""
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            choices = ", ".join(e.value for e in cls)
            raise ValueError(f"Unknown exercise type: {tag!r} (expected one of {choices})") from None


class AngleConvention(str, Enum):
    MAGNITUDE = "magnitude"      # geometry.angle, 0-180
    DIRECTIONAL = "directional"  # geometry.directional_angle, 0-360


class TransitionPolicy(str, Enum):
    ALL_LIMBS = "all_limbs"          # every tracked limb must reach the boundary
    PRIMARY_LIMB = "primary_limb"    # only the first tracked limb decides


@dataclass(frozen=True)
class LimbConfig:
    """
    One tracked limb.

    Attributes:
        name: Label used in snapshots and logs ("left", "right", ...)
        joints: (p1, vertex, p3) landmark indices
        angle_range: Calibrated (in_min, in_max) angle range in degrees
        percentage_range: Percentages that in_min and in_max map to
    """
    name: str
    joints: Tuple[int, int, int]
    angle_range: Tuple[float, float]
    percentage_range: Tuple[float, float] = (0.0, 100.0)


@dataclass(frozen=True)
class ExerciseConfig:
    exercise: Exercise
    limbs: Tuple[LimbConfig, ...]
    convention: AngleConvention = AngleConvention.MAGNITUDE
    policy: TransitionPolicy = TransitionPolicy.ALL_LIMBS
    min_visibility: float = MIN_VISIBILITY

    @property
    def required_landmarks(self):
        """Sorted landmark indices any limb depends on."""
        return tuple(sorted({i for limb in self.limbs for i in limb.joints}))

    @property
    def min_frame_length(self):
        return max(self.required_landmarks) + 1

    @property
    def deciding_limbs(self):
        if self.policy is TransitionPolicy.PRIMARY_LIMB:
            return self.limbs[:1]
        return self.limbs


def _joints(*names):
    return tuple(NAME_TO_IDX[n] for n in names)


# 80 deg elbow = bottom (100%), 175 deg = arms locked out (0%)
PUSHUP = ExerciseConfig(
    exercise=Exercise.PUSHUP,
    limbs=(
        LimbConfig("left", _joints("left_shoulder", "left_elbow", "left_wrist"),
                   angle_range=(80.0, 175.0), percentage_range=(100.0, 0.0)),
        LimbConfig("right", _joints("right_shoulder", "right_elbow", "right_wrist"),
                   angle_range=(80.0, 175.0), percentage_range=(100.0, 0.0)),
    ),
)

# Directional angle measured wrist -> elbow -> shoulder on the right arm
CURL = ExerciseConfig(
    exercise=Exercise.CURL,
    limbs=(
        LimbConfig("right", _joints("right_wrist", "right_elbow", "right_shoulder"),
                   angle_range=(22.0, 170.0), percentage_range=(0.0, 100.0)),
    ),
    convention=AngleConvention.DIRECTIONAL,
    policy=TransitionPolicy.PRIMARY_LIMB,
)

# 100 deg knee = bottom (100%), 170 deg = standing (0%)
SQUAT = ExerciseConfig(
    exercise=Exercise.SQUAT,
    limbs=(
        LimbConfig("left", _joints("left_hip", "left_knee", "left_ankle"),
                   angle_range=(100.0, 170.0), percentage_range=(100.0, 0.0)),
        LimbConfig("right", _joints("right_hip", "right_knee", "right_ankle"),
                   angle_range=(100.0, 170.0), percentage_range=(100.0, 0.0)),
    ),
)

EXERCISE_CONFIGS = {
    Exercise.PUSHUP: PUSHUP,
    Exercise.CURL: CURL,
    Exercise.SQUAT: SQUAT,
}


def config_for(exercise):
    return EXERCISE_CONFIGS[Exercise.parse(exercise)]
