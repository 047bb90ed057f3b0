from dataclasses import replace
from enum import Enum

from counters import config
from counters.base_counter import CounterState, ExerciseCounter
from counters.geometry import angle
from counters.landmarks import LandmarkName


class PushUpPhase(Enum):
    UP = "up"      # arms extended
    DOWN = "down"  # chest lowered


def pushup_transition(state: CounterState, elbow_angle: float, horizontal: bool,
                      down_angle: float, up_angle: float) -> CounterState:
    """UP -> DOWN -> UP counts a rep; a non-horizontal body never transitions and is never valid."""
    if state.phase is PushUpPhase.UP:
        if elbow_angle < down_angle and horizontal:
            return replace(state, phase=PushUpPhase.DOWN, form_valid=True)
        return replace(state, form_valid=elbow_angle > up_angle and horizontal)

    if elbow_angle > up_angle and horizontal:
        return replace(state, phase=PushUpPhase.UP, reps=state.reps + 1, form_valid=True)
    return replace(state, form_valid=elbow_angle < down_angle and horizontal)


class PushUpCounter(ExerciseCounter):
    """Counts push-ups from the shoulder-elbow-wrist angle while the torso stays horizontal."""

    REQUIRED_LANDMARKS = (
        LandmarkName.LEFT_SHOULDER, LandmarkName.LEFT_ELBOW, LandmarkName.LEFT_WRIST,
        LandmarkName.RIGHT_SHOULDER, LandmarkName.RIGHT_ELBOW, LandmarkName.RIGHT_WRIST,
        LandmarkName.LEFT_HIP, LandmarkName.RIGHT_HIP,
    )

    def __init__(self, down_angle: float = config.PUSHUP_DOWN_ANGLE,
                 up_angle: float = config.PUSHUP_UP_ANGLE,
                 horizontal_ratio: float = config.PUSHUP_HORIZONTAL_RATIO):
        self.down_angle = down_angle
        self.up_angle = up_angle
        self.horizontal_ratio = horizontal_ratio
        super().__init__()

    def initial_state(self) -> CounterState:
        return CounterState(phase=PushUpPhase.UP)

    def process_frame(self, frame) -> None:
        points = frame.require(*self.REQUIRED_LANDMARKS)
        if points is None:
            self._mark_invalid()
            return
        (left_shoulder, left_elbow, left_wrist,
         right_shoulder, right_elbow, right_wrist,
         left_hip, right_hip) = points

        left_angle = angle(left_shoulder.point, left_elbow.point, left_wrist.point)
        right_angle = angle(right_shoulder.point, right_elbow.point, right_wrist.point)
        elbow_angle = (left_angle + right_angle) / 2

        avg_shoulder_y = (left_shoulder.y + right_shoulder.y) / 2
        avg_hip_y = (left_hip.y + right_hip.y) / 2
        shoulder_width = abs(left_shoulder.x - right_shoulder.x)
        horizontal = abs(avg_shoulder_y - avg_hip_y) < shoulder_width * self.horizontal_ratio

        self._advance(pushup_transition(self._state, elbow_angle, horizontal, self.down_angle, self.up_angle))
