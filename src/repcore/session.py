"""
Exercise session: dispatches frames to the right counter and exposes a uniform read model.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from repcore.counter import RepCounter
from repcore.exercises import Exercise, config_for
from repcore.geometry import interpolate, to_percentage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepSnapshot:
    """What the UI sees after every frame."""
    rep_count: int
    stage: str
    percentage: int
    left_percentage: Optional[int] = None
    right_percentage: Optional[int] = None

    def as_dict(self):
        out = {
            "repCount": self.rep_count,
            "stage": self.stage,
            "percentage": self.percentage,
        }
        if self.left_percentage is not None:
            out["leftPercentage"] = self.left_percentage
        if self.right_percentage is not None:
            out["rightPercentage"] = self.right_percentage
        return out


@dataclass(frozen=True)
class WorkoutSummary:
    """Final result handed to whatever stores workouts."""
    exercise: Exercise
    reps: int
    completed_at: datetime

    def as_record(self):
        return {
            "exercise": self.exercise.value,
            "reps": self.reps,
            "created_at": self.completed_at.isoformat(),
        }


def _make_counter(exercise, config):
    if config is not None and config.exercise is not exercise:
        raise ValueError(f"Config is for {config.exercise.value}, session is for {exercise.value}")
    return RepCounter(config or config_for(exercise))


class ExerciseSession:
    """
    One counting session for a single exercise.

    Call update() once per acquired frame, from a single thread. The
    exercise tag is validated here, once; per-frame input problems never
    raise.
    """

    def __init__(self, exercise, config=None, on_rep=None):
        """
        Args:
            exercise: Exercise or its tag ("pushup", "curl", "squat")
            config: ExerciseConfig overriding the built-in calibration
            on_rep: Optional callback(snapshot) fired when a full rep completes
        """
        self.exercise = Exercise.parse(exercise)
        self.counter = _make_counter(self.exercise, config)
        self.on_rep = on_rep
        self.state = self.counter.init()

    def update(self, frame):
        """Feed one frame (or None) and return the new snapshot."""
        before = math.floor(self.state.count)
        self.state = self.counter.update(frame, self.state)
        snap = self.snapshot()

        if snap.rep_count > before:
            logger.info("%s rep %d completed", self.exercise.value, snap.rep_count)
            if self.on_rep is not None:
                self.on_rep(snap)
        return snap

    def snapshot(self):
        state = self.state
        percentages = state.percentages
        by_side = {}
        if len(percentages) > 1:
            by_side = {limb.name: p for limb, p in zip(self.counter.config.limbs, percentages)}
        left = by_side.get("left")
        right = by_side.get("right")

        return RepSnapshot(
            rep_count=math.floor(state.count),
            stage=state.stage.value,
            percentage=to_percentage(sum(percentages) / len(percentages)) if percentages else 0,
            left_percentage=left,
            right_percentage=right,
        )

    def reset(self):
        """Start over with a zeroed count."""
        logger.info("%s session reset at %d reps", self.exercise.value, math.floor(self.state.count))
        self.state = self.counter.init()

    def switch(self, exercise, config=None):
        """Change exercise; nothing carries over from the previous one."""
        exercise = Exercise.parse(exercise)
        counter = _make_counter(exercise, config)
        logger.info("switching session %s -> %s", self.exercise.value, exercise.value)
        self.exercise = exercise
        self.counter = counter
        self.state = self.counter.init()

    def bar_value(self, bar_height=300, top=60):
        """
        Vertical position of a progress bar for overlays.

        Maps the mean tracked angle over the primary limb's calibration
        range onto (bar_height, top).
        """
        angles = self.state.angles
        if not angles:
            return bar_height
        limb = self.counter.config.limbs[0]
        mean_angle = sum(angles) / len(angles)
        return int(math.floor(interpolate(mean_angle, limb.angle_range, (bar_height, top)) + 0.5))

    def finish(self, completed_at=None):
        """
        End the session and build the summary for the external save step.

        Args:
            completed_at: Timestamp to record (defaults to now, UTC)

        Returns:
            WorkoutSummary with the whole number of completed reps
        """
        if completed_at is None:
            completed_at = datetime.now(timezone.utc)
        summary = WorkoutSummary(self.exercise, math.floor(self.state.count), completed_at)
        logger.info("%s session finished: %d reps", self.exercise.value, summary.reps)
        return summary
