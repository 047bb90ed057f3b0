import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from counters import config
from counters.base_counter import CounterState, ExerciseCounter
from counters.landmarks import LandmarkName
from counters.geometry import angle


class PlankPhase(Enum):
    OUT_OF_POSITION = "out_of_position"
    HOLDING = "holding"


@dataclass(frozen=True)
class PlankState(CounterState):
    elapsed: float = 0.0
    # Clock reading of the previous valid frame while holding, else None.
    last_update: Optional[float] = None

    def invalidated(self):
        return replace(self, phase=PlankPhase.OUT_OF_POSITION, form_valid=False, last_update=None)


def plank_transition(state: PlankState, position_valid: bool, now: float) -> PlankState:
    """
    Accumulate held time between consecutive valid frames.

    A broken position freezes the elapsed time; holding again resumes from it.
    """
    if not position_valid:
        return state.invalidated()
    if state.phase is PlankPhase.OUT_OF_POSITION or state.last_update is None:
        return replace(state, phase=PlankPhase.HOLDING, form_valid=True, last_update=now)
    return replace(state, form_valid=True, elapsed=state.elapsed + (now - state.last_update), last_update=now)


class PlankCounter(ExerciseCounter):
    """
    Times a plank hold against a target duration.

    Progress is whole seconds spent in a valid position. `clock` returns the
    current time in seconds and defaults to time.monotonic.
    """

    DURATION_BASED = True

    REQUIRED_LANDMARKS = (
        LandmarkName.LEFT_SHOULDER, LandmarkName.LEFT_HIP, LandmarkName.LEFT_KNEE,
        LandmarkName.RIGHT_SHOULDER, LandmarkName.RIGHT_HIP, LandmarkName.RIGHT_KNEE,
    )

    def __init__(self, target_seconds: int = config.DEFAULT_PLANK_SECONDS,
                 clock: Callable[[], float] = time.monotonic,
                 min_angle: float = config.PLANK_MIN_ANGLE,
                 max_angle: float = config.PLANK_MAX_ANGLE,
                 vertical_ratio: float = config.PLANK_VERTICAL_RATIO,
                 min_likelihood: float = config.MIN_POSE_LIKELIHOOD):
        if target_seconds < 0:
            raise ValueError(f"Target duration must not be negative: {target_seconds}")
        self.target_seconds = target_seconds
        self.clock = clock
        self.min_angle = min_angle
        self.max_angle = max_angle
        self.vertical_ratio = vertical_ratio
        self.min_likelihood = min_likelihood
        super().__init__()

    def initial_state(self) -> PlankState:
        return PlankState(phase=PlankPhase.OUT_OF_POSITION)

    @property
    def elapsed_seconds(self) -> float:
        return self._state.elapsed

    def current_progress(self) -> int:
        return int(self._state.elapsed)

    def is_complete(self) -> bool:
        return self.current_progress() >= self.target_seconds

    def remaining_seconds(self) -> int:
        return min(max(self.target_seconds - self.current_progress(), 0), self.target_seconds)

    def set_target_duration(self, seconds: int):
        if seconds < 0:
            raise ValueError(f"Target duration must not be negative: {seconds}")
        logging.info(f"Plank target changed from {self.target_seconds}s to {seconds}s")
        self.target_seconds = seconds

    def is_valid_position(self, left_shoulder, left_hip, left_knee,
                          right_shoulder, right_hip, right_knee) -> bool:
        """Body straight from shoulders to knees and shoulders level with the hips."""
        left_angle = angle(left_shoulder.point, left_hip.point, left_knee.point)
        right_angle = angle(right_shoulder.point, right_hip.point, right_knee.point)
        body_angle = (left_angle + right_angle) / 2
        straight = self.min_angle <= body_angle <= self.max_angle

        avg_shoulder_y = (left_shoulder.y + right_shoulder.y) / 2
        avg_hip_y = (left_hip.y + right_hip.y) / 2
        shoulder_width = abs(left_shoulder.x - right_shoulder.x)
        level = abs(avg_shoulder_y - avg_hip_y) < shoulder_width * self.vertical_ratio

        return straight and level

    def process_frame(self, frame) -> None:
        points = frame.require(*self.REQUIRED_LANDMARKS)
        if points is None or (frame.likelihood is not None and frame.likelihood < self.min_likelihood):
            self._mark_invalid()
            return

        position_valid = self.is_valid_position(*points)
        self._advance(plank_transition(self._state, position_valid, self.clock()))
