from enum import Enum
from typing import Callable, Optional, Union

from counters import config
from counters.base_counter import ExerciseCounter
from counters.head_turn_counter import HeadTurnCounter
from counters.jumping_jack_counter import JumpingJackCounter
from counters.plank_counter import PlankCounter
from counters.pushup_counter import PushUpCounter
from counters.squat_counter import AngleSquatCounter, DisplacementSquatCounter


class ExerciseType(Enum):
    JUMPING_JACKS = "jumping_jacks"
    SQUATS = "squats"
    PUSH_UPS = "push_ups"
    PLANK = "plank"
    HEAD_TURNS = "head_turns"


class SquatStrategy(Enum):
    ANGLE = "angle"
    DISPLACEMENT = "displacement"


_EXERCISE_ALIASES = {
    "jumping_jack": ExerciseType.JUMPING_JACKS,
    "jumping jacks": ExerciseType.JUMPING_JACKS,
    "squat": ExerciseType.SQUATS,
    "push_up": ExerciseType.PUSH_UPS,
    "pushup": ExerciseType.PUSH_UPS,
    "pushups": ExerciseType.PUSH_UPS,
    "push-ups": ExerciseType.PUSH_UPS,
    "planks": ExerciseType.PLANK,
    "head_turn": ExerciseType.HEAD_TURNS,
    "head_nods": ExerciseType.HEAD_TURNS,
    "head turns": ExerciseType.HEAD_TURNS,
}


def parse_exercise_type(exercise_type: Union[str, ExerciseType]) -> ExerciseType:
    if isinstance(exercise_type, ExerciseType):
        return exercise_type
    normalized_exercise = str(exercise_type).strip().lower()
    try:
        return ExerciseType(normalized_exercise)
    except ValueError:
        pass
    if normalized_exercise in _EXERCISE_ALIASES:
        return _EXERCISE_ALIASES[normalized_exercise]
    raise ValueError(f"Unknown exercise type: {exercise_type}")


def parse_squat_strategy(strategy: Union[str, SquatStrategy, None]) -> SquatStrategy:
    if strategy is None:
        strategy = config.SQUAT_STRATEGY
    if isinstance(strategy, SquatStrategy):
        return strategy
    try:
        return SquatStrategy(str(strategy).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown squat strategy: {strategy}")


def default_target(exercise_type: Union[str, ExerciseType]) -> int:
    if parse_exercise_type(exercise_type) is ExerciseType.PLANK:
        return config.DEFAULT_PLANK_SECONDS
    return config.DEFAULT_TARGET_REPS


def get_counter(exercise_type: Union[str, ExerciseType],
                target: Optional[int] = None,
                squat_strategy: Union[str, SquatStrategy, None] = None,
                clock: Optional[Callable[[], float]] = None) -> ExerciseCounter:
    """
    Factory function to get a counter for an exercise type.

    `target` is only used by the plank counter (seconds); rep targets are
    tracked by the session. `clock` overrides the plank counter's time source.
    """
    exercise = parse_exercise_type(exercise_type)
    strategy = parse_squat_strategy(squat_strategy)

    if exercise is ExerciseType.JUMPING_JACKS:
        return JumpingJackCounter()
    elif exercise is ExerciseType.SQUATS:
        if strategy is SquatStrategy.DISPLACEMENT:
            return DisplacementSquatCounter()
        return AngleSquatCounter()
    elif exercise is ExerciseType.PUSH_UPS:
        return PushUpCounter()
    elif exercise is ExerciseType.PLANK:
        seconds = config.DEFAULT_PLANK_SECONDS if target is None else target
        if clock is not None:
            return PlankCounter(target_seconds=seconds, clock=clock)
        return PlankCounter(target_seconds=seconds)
    else:
        return HeadTurnCounter()
