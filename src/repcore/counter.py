"""
Repetition counter with hysteresis state machine logic.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

from repcore.exercises import AngleConvention
from repcore.geometry import angle, directional_angle, interpolate, to_percentage
from repcore.landmarks import get_keypoint, is_visible

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class ExerciseState:
    """
    Per-session counter state.

    Attributes:
        count: Half-rep resolution count (0.5 per boundary crossing)
        stage: Phase the athlete is in since the last crossing
        percentages: Completion percentage per tracked limb (0-100)
        angles: Last measured joint angle per tracked limb (degrees)
    """
    count: float = 0.0
    stage: Stage = Stage.UP
    percentages: Tuple[int, ...] = ()
    angles: Tuple[float, ...] = ()

    @property
    def direction(self):
        """Binary phase flag: 0 while going up, 1 while going down."""
        return 0 if self.stage is Stage.UP else 1


class RepCounter:
    """
    State machine for counting repetitions from per-frame landmarks.

    Tracks "up" and "down" stages. Half a rep is counted when:
    1. All deciding limbs reach 100% while the stage is "up" (stage -> "down")
    2. All deciding limbs reach 0% while the stage is "down" (stage -> "up")

    Staying on a boundary for several frames does not count again because
    the stage has already flipped. update() never mutates its input state.
    """

    def __init__(self, config):
        """
        Initialize counter.

        Args:
            config: ExerciseConfig describing tracked limbs and calibration
        """
        self.config = config
        if config.convention is AngleConvention.DIRECTIONAL:
            self._measure = directional_angle
        else:
            self._measure = angle

    def init(self):
        """Zeroed state for a new session."""
        n = len(self.config.limbs)
        return ExerciseState(percentages=(0,) * n, angles=(0.0,) * n)

    def _read_joints(self, frame):
        """Required landmarks by index, or None if the frame can't be trusted."""
        if frame is None:
            return None
        try:
            if len(frame) < self.config.min_frame_length:
                return None
        except TypeError:
            return None

        points = {}
        for idx in self.config.required_landmarks:
            lm = get_keypoint(frame, idx)
            if lm is None or not is_visible(lm, self.config.min_visibility):
                return None
            points[idx] = lm
        return points

    def measure(self, frame):
        """
        Compute (angles, percentages) for every tracked limb.

        Returns:
            Tuple of per-limb angle and percentage tuples, or None if the
            frame is missing, too short or has a low-confidence landmark
        """
        points = self._read_joints(frame)
        if points is None:
            return None

        angles = []
        percentages = []
        for limb in self.config.limbs:
            p1, vertex, p3 = (points[i] for i in limb.joints)
            deg = self._measure(p1, vertex, p3)
            angles.append(deg)
            percentages.append(to_percentage(interpolate(deg, limb.angle_range, limb.percentage_range)))
        return tuple(angles), tuple(percentages)

    def update(self, frame, state):
        """
        Advance the state machine by one frame.

        Args:
            frame: Ordered landmark sequence, or None when no pose was found
            state: ExerciseState before this frame

        Returns:
            New ExerciseState; the very same object if the frame was gated
        """
        measured = self.measure(frame)
        if measured is None:
            logger.debug("%s: frame gated, state unchanged", self.config.exercise.value)
            return state

        angles, percentages = measured
        deciding = percentages[:len(self.config.deciding_limbs)]

        count = state.count
        stage = state.stage
        if all(p == 100 for p in deciding):
            if stage is Stage.UP:
                stage = Stage.DOWN
                count += 0.5
        elif all(p == 0 for p in deciding):
            if stage is Stage.DOWN:
                stage = Stage.UP
                count += 0.5

        if stage is not state.stage:
            logger.debug("%s: stage %s -> %s, count %.1f",
                         self.config.exercise.value, state.stage.value, stage.value, count)

        return replace(state, count=count, stage=stage, percentages=percentages, angles=angles)
