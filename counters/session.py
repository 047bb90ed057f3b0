import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from counters import config
from counters.base_counter import ExerciseCounter
from counters.landmarks import Frame, LandmarkName

KEY_LANDMARKS = (
    LandmarkName.NOSE,
    LandmarkName.LEFT_SHOULDER, LandmarkName.RIGHT_SHOULDER,
    LandmarkName.LEFT_HIP, LandmarkName.RIGHT_HIP,
)


class VisibilityGate:
    """
    Frame-level pre-filter: a frame is usable when at least `min_visible` of
    the key landmarks are present with confidence above `min_confidence`.
    """

    def __init__(self, min_confidence: float = config.GATE_MIN_CONFIDENCE,
                 min_visible: int = config.GATE_MIN_VISIBLE,
                 key_landmarks: Sequence[LandmarkName] = KEY_LANDMARKS):
        if not 0.0 <= min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be within [0, 1], got {min_confidence}")
        if not 0 <= min_visible <= len(key_landmarks):
            raise ValueError(f"min_visible must be within 0..{len(key_landmarks)}, got {min_visible}")
        self.min_confidence = min_confidence
        self.min_visible = min_visible
        self.key_landmarks = tuple(key_landmarks)

    def visible_count(self, frame: Frame) -> int:
        count = 0
        for name in self.key_landmarks:
            landmark = frame.get(name)
            if landmark is not None and landmark.confidence > self.min_confidence:
                count += 1
        return count

    def is_usable(self, frame: Frame) -> bool:
        return self.visible_count(frame) >= self.min_visible


@dataclass(frozen=True)
class FrameResult:
    """What the session reports back after each frame."""
    user_visible: bool
    progress: int
    form_valid: bool
    completed: bool


class ExerciseSession:
    """
    Drives one counter through an exercise session.

    Frames rejected by the visibility gate never reach the counter; they only
    flip `user_visible` so callers can tell "not in view" apart from "bad form".
    `on_complete` is called once, on the frame where the target is first reached.
    """

    def __init__(self, counter: ExerciseCounter, target: int,
                 exercise: Optional[str] = None,
                 gate: Optional[VisibilityGate] = None,
                 on_complete: Optional[Callable[["ExerciseSession"], None]] = None):
        if target < 0:
            raise ValueError(f"Target must not be negative: {target}")
        if counter.DURATION_BASED and counter.target_seconds != target:
            counter.set_target_duration(target)
        self.counter = counter
        self._target = target
        self.exercise = exercise or type(counter).__name__
        self.gate = gate or VisibilityGate()
        self.on_complete = on_complete

        self.user_visible = True
        self.completed = False
        self.frames_processed = 0
        self.frames_dropped = 0
        logging.info(f"Started {self.exercise} session with target {self.target}")

    @property
    def target(self) -> int:
        if self.counter.DURATION_BASED:
            return self.counter.target_seconds
        return self._target

    def is_target_reached(self) -> bool:
        if self.counter.DURATION_BASED:
            return self.counter.is_complete()
        return self.counter.current_progress() >= self._target

    def on_frame(self, frame: Frame) -> FrameResult:
        visible = self.gate.is_usable(frame)
        if visible != self.user_visible:
            logging.info(f"{self.exercise}: user {'back in view' if visible else 'not visible'}")
        self.user_visible = visible

        if visible:
            self.counter.process_frame(frame)
            self.frames_processed += 1
        else:
            self.frames_dropped += 1

        if not self.completed and self.is_target_reached():
            self.completed = True
            logging.info(f"{self.exercise} session complete: {self.counter.current_progress()}/{self.target}")
            if self.on_complete is not None:
                self.on_complete(self)

        return FrameResult(
            user_visible=visible,
            progress=self.counter.current_progress(),
            form_valid=self.counter.is_form_valid(),
            completed=self.completed,
        )

    def reset(self):
        """Restart the session with the same counter and target."""
        self.counter.reset()
        self.user_visible = True
        self.completed = False
        self.frames_processed = 0
        self.frames_dropped = 0

    def summary(self) -> Dict:
        data = {
            "exercise": self.exercise,
            "target": self.target,
            "progress": self.counter.current_progress(),
            "form_valid": self.counter.is_form_valid(),
            "user_visible": self.user_visible,
            "completed": self.completed,
            "phase": self.counter.phase,
            "frames_processed": self.frames_processed,
            "frames_dropped": self.frames_dropped,
        }
        if self.counter.DURATION_BASED:
            data["remaining_seconds"] = self.counter.remaining_seconds()
        return data
