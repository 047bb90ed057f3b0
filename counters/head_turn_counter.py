from dataclasses import replace
from enum import Enum

from counters import config
from counters.base_counter import CounterState, ExerciseCounter
from counters.landmarks import LandmarkName


class HeadTurnPhase(Enum):
    CENTER = "center"
    LEFT = "left"
    RIGHT = "right"


def head_rotation(nose_x: float, left_eye_x: float, right_eye_x: float,
                  left_ear_x: float, right_ear_x: float,
                  scale: float = config.HEAD_TURN_SCALE) -> float:
    """
    Approximate horizontal head rotation in degrees, negative to the left.

    The nose offset from the eye midpoint is taken as a fraction of the head
    width (ear to ear) and scaled to roughly -45..45 degrees.
    """
    ear_distance = abs(left_ear_x - right_ear_x)
    if ear_distance == 0:
        return 0.0
    eye_mid_x = (left_eye_x + right_eye_x) / 2
    return (nose_x - eye_mid_x) / ear_distance * scale


def head_turn_transition(state: CounterState, is_left: bool, is_right: bool) -> CounterState:
    """Every departure from CENTER counts once; the head must come back to CENTER before the next one."""
    is_center = not is_left and not is_right
    if state.phase is HeadTurnPhase.CENTER:
        if is_left:
            return replace(state, phase=HeadTurnPhase.LEFT, reps=state.reps + 1, form_valid=True)
        if is_right:
            return replace(state, phase=HeadTurnPhase.RIGHT, reps=state.reps + 1, form_valid=True)
        return replace(state, form_valid=True)

    if is_center:
        return replace(state, phase=HeadTurnPhase.CENTER, form_valid=True)
    if state.phase is HeadTurnPhase.LEFT:
        return replace(state, form_valid=is_left)
    return replace(state, form_valid=is_right)


class HeadTurnCounter(ExerciseCounter):
    """Counts side-to-side head turns from the nose, eye and ear positions."""

    REQUIRED_LANDMARKS = (
        LandmarkName.NOSE, LandmarkName.LEFT_EAR, LandmarkName.RIGHT_EAR,
        LandmarkName.LEFT_EYE, LandmarkName.RIGHT_EYE,
    )

    def __init__(self, left_threshold: float = config.HEAD_TURN_LEFT_THRESHOLD,
                 right_threshold: float = config.HEAD_TURN_RIGHT_THRESHOLD):
        self.left_threshold = left_threshold
        self.right_threshold = right_threshold
        self.rotation = 0.0
        super().__init__()

    def initial_state(self) -> CounterState:
        return CounterState(phase=HeadTurnPhase.CENTER)

    def reset(self):
        super().reset()
        self.rotation = 0.0

    def process_frame(self, frame) -> None:
        points = frame.require(*self.REQUIRED_LANDMARKS)
        if points is None:
            self._mark_invalid()
            return
        nose, left_ear, right_ear, left_eye, right_eye = points

        self.rotation = head_rotation(nose.x, left_eye.x, right_eye.x, left_ear.x, right_ear.x)
        is_left = self.rotation < self.left_threshold
        is_right = self.rotation > self.right_threshold

        self._advance(head_turn_transition(self._state, is_left, is_right))
