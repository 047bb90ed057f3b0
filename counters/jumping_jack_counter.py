from dataclasses import replace
from enum import Enum

from counters import config
from counters.base_counter import CounterState, ExerciseCounter
from counters.landmarks import LandmarkName


class JumpingJackPhase(Enum):
    NEUTRAL = "neutral"    # arms down, legs together
    EXTENDED = "extended"  # arms up, legs spread


def jumping_jack_transition(state: CounterState, arms_up: bool, legs_spread: bool) -> CounterState:
    """A rep is NEUTRAL -> EXTENDED -> NEUTRAL, counted on the return."""
    if state.phase is JumpingJackPhase.NEUTRAL:
        if arms_up and legs_spread:
            return replace(state, phase=JumpingJackPhase.EXTENDED, form_valid=True)
        return replace(state, form_valid=not arms_up and not legs_spread)

    if not arms_up and not legs_spread:
        return replace(state, phase=JumpingJackPhase.NEUTRAL, reps=state.reps + 1, form_valid=True)
    return replace(state, form_valid=arms_up and legs_spread)


class JumpingJackCounter(ExerciseCounter):
    """Counts jumping jacks from shoulder/nose height and ankle spread."""

    REQUIRED_LANDMARKS = (
        LandmarkName.LEFT_SHOULDER, LandmarkName.RIGHT_SHOULDER, LandmarkName.NOSE,
        LandmarkName.LEFT_ANKLE, LandmarkName.RIGHT_ANKLE,
    )

    def __init__(self, spread_ratio: float = config.JUMPING_JACK_SPREAD_RATIO):
        self.spread_ratio = spread_ratio
        super().__init__()

    def initial_state(self) -> CounterState:
        return CounterState(phase=JumpingJackPhase.NEUTRAL)

    def process_frame(self, frame) -> None:
        points = frame.require(*self.REQUIRED_LANDMARKS)
        if points is None:
            self._mark_invalid()
            return
        left_shoulder, right_shoulder, nose, left_ankle, right_ankle = points

        # Image y grows downward, so "above" means a smaller y.
        arms_up = left_shoulder.y < nose.y and right_shoulder.y < nose.y

        shoulder_width = abs(left_shoulder.x - right_shoulder.x)
        ankle_distance = abs(left_ankle.x - right_ankle.x)
        legs_spread = ankle_distance > shoulder_width * (1 + self.spread_ratio)

        self._advance(jumping_jack_transition(self._state, arms_up, legs_spread))
