from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from counters import config
from counters.base_counter import CounterState, ExerciseCounter
from counters.geometry import angle
from counters.landmarks import LandmarkName


class SquatPhase(Enum):
    STANDING = "standing"
    BOTTOM = "bottom"


def squat_angle_transition(state: CounterState, knee_angle: float,
                           down_angle: float, up_angle: float) -> CounterState:
    """STANDING -> BOTTOM below down_angle, BOTTOM -> STANDING (+1 rep) above up_angle."""
    if state.phase is SquatPhase.STANDING:
        if knee_angle < down_angle:
            return replace(state, phase=SquatPhase.BOTTOM, form_valid=True)
        return replace(state, form_valid=knee_angle > up_angle)

    if knee_angle > up_angle:
        return replace(state, phase=SquatPhase.STANDING, reps=state.reps + 1, form_valid=True)
    return replace(state, form_valid=knee_angle < down_angle)


class AngleSquatCounter(ExerciseCounter):
    """
    Squat counter driven by the averaged hip-knee-ankle angle of both legs.

    Frames whose whole-pose likelihood is reported and below min_likelihood
    are treated like frames with missing landmarks.
    """

    REQUIRED_LANDMARKS = (
        LandmarkName.LEFT_HIP, LandmarkName.LEFT_KNEE, LandmarkName.LEFT_ANKLE,
        LandmarkName.RIGHT_HIP, LandmarkName.RIGHT_KNEE, LandmarkName.RIGHT_ANKLE,
    )

    def __init__(self, down_angle: float = config.SQUAT_DOWN_ANGLE,
                 up_angle: float = config.SQUAT_UP_ANGLE,
                 min_likelihood: float = config.MIN_POSE_LIKELIHOOD):
        self.down_angle = down_angle
        self.up_angle = up_angle
        self.min_likelihood = min_likelihood
        self.last_angle: Optional[float] = None
        super().__init__()

    def initial_state(self) -> CounterState:
        return CounterState(phase=SquatPhase.STANDING)

    def reset(self):
        super().reset()
        self.last_angle = None

    def process_frame(self, frame) -> None:
        points = frame.require(*self.REQUIRED_LANDMARKS)
        if points is None:
            self._mark_invalid()
            return
        if frame.likelihood is not None and frame.likelihood < self.min_likelihood:
            self._mark_invalid()
            return
        left_hip, left_knee, left_ankle, right_hip, right_knee, right_ankle = points

        left_angle = angle(left_hip.point, left_knee.point, left_ankle.point)
        right_angle = angle(right_hip.point, right_knee.point, right_ankle.point)
        self.last_angle = (left_angle + right_angle) / 2

        self._advance(squat_angle_transition(self._state, self.last_angle, self.down_angle, self.up_angle))


@dataclass(frozen=True)
class DisplacementSquatState(CounterState):
    # Standing hip height in pixels; None until the first usable frame.
    reference_hip_y: Optional[float] = None


def squat_displacement_transition(state: DisplacementSquatState, hip_y: float,
                                  down_pixels: float, up_pixels: float) -> DisplacementSquatState:
    """
    Track the hip drop below the calibrated standing height.

    The first call only calibrates. Each completed rep re-calibrates to the
    current hip height so slow drift of the camera or the user is absorbed.
    """
    if state.reference_hip_y is None:
        return replace(state, reference_hip_y=hip_y, form_valid=True)

    movement_down = hip_y - state.reference_hip_y
    if state.phase is SquatPhase.STANDING:
        if movement_down > down_pixels:
            return replace(state, phase=SquatPhase.BOTTOM, form_valid=True)
        return replace(state, form_valid=movement_down < up_pixels)

    if movement_down < up_pixels:
        return replace(state, phase=SquatPhase.STANDING, reps=state.reps + 1,
                       form_valid=True, reference_hip_y=hip_y)
    return replace(state, form_valid=movement_down > down_pixels)


class DisplacementSquatCounter(ExerciseCounter):
    """
    Squat counter that only needs the hips: it measures how far the hip
    midpoint has dropped (in pixels) below a standing reference captured on
    the first usable frame.

    The pixel thresholds assume a fixed camera resolution and distance.
    """

    REQUIRED_LANDMARKS = (LandmarkName.LEFT_HIP, LandmarkName.RIGHT_HIP)

    def __init__(self, down_pixels: float = config.SQUAT_DOWN_PIXELS,
                 up_pixels: float = config.SQUAT_UP_PIXELS):
        self.down_pixels = down_pixels
        self.up_pixels = up_pixels
        self._movement_down: Optional[float] = None
        super().__init__()

    def initial_state(self) -> DisplacementSquatState:
        return DisplacementSquatState(phase=SquatPhase.STANDING)

    @property
    def is_calibrated(self) -> bool:
        return self._state.reference_hip_y is not None

    @property
    def movement_down(self) -> Optional[float]:
        """Last measured hip drop in pixels, relative to the current reference."""
        return self._movement_down

    def reset(self):
        super().reset()
        self._movement_down = None

    def process_frame(self, frame) -> None:
        points = frame.require(*self.REQUIRED_LANDMARKS)
        if points is None:
            self._mark_invalid()
            return
        left_hip, right_hip = points
        hip_y = (left_hip.y + right_hip.y) / 2

        reference = self._state.reference_hip_y
        self._movement_down = hip_y - reference if reference is not None else 0.0
        self._advance(squat_displacement_transition(self._state, hip_y, self.down_pixels, self.up_pixels))
