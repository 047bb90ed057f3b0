import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum


@dataclass(frozen=True)
class CounterState:
    """Snapshot of a counter: current phase, progress and form flag."""
    phase: Enum
    reps: int = 0
    form_valid: bool = False

    def invalidated(self):
        return replace(self, form_valid=False)


class ExerciseCounter(ABC):
    """
    Abstract base class for exercise counters.

    A counter consumes one Frame per call to process_frame and keeps its own
    phase, progress and form flag in an immutable state object that is
    advanced by a pure transition function. It never raises for bad input: a
    frame it cannot interpret marks the form invalid and leaves progress
    untouched.
    """

    # Duration-based counters report elapsed seconds as progress and decide
    # completion themselves through is_complete().
    DURATION_BASED = False

    def __init__(self):
        self._state = self.initial_state()

    @abstractmethod
    def initial_state(self) -> CounterState:
        """Return the counter's uncalibrated start state."""
        pass

    @abstractmethod
    def process_frame(self, frame) -> None:
        """Update the counter from a single frame."""
        pass

    @property
    def state(self) -> CounterState:
        return self._state

    def current_progress(self) -> int:
        """Completed reps, or whole elapsed seconds for duration-based counters."""
        return self._state.reps

    def is_form_valid(self) -> bool:
        return self._state.form_valid

    @property
    def phase(self) -> str:
        """Name of the current phase, e.g. 'STANDING'."""
        return self._state.phase.name

    def reset(self):
        """Return the counter to its initial, uncalibrated state."""
        self._state = self.initial_state()

    def _mark_invalid(self):
        self._state = self._state.invalidated()

    def _advance(self, new_state: CounterState):
        if new_state.reps > self._state.reps:
            logging.debug(f"{type(self).__name__}: rep {new_state.reps} completed")
        elif new_state.phase is not self._state.phase:
            logging.debug(f"{type(self).__name__}: {self._state.phase.name} -> {new_state.phase.name}")
        self._state = new_state
