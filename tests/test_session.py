import random

import pytest

from counters.counter_factory import ExerciseType, get_counter
from counters.head_turn_counter import HeadTurnCounter
from counters.jumping_jack_counter import JumpingJackCounter
from counters.landmarks import Frame
from counters.plank_counter import PlankCounter
from counters.session import ExerciseSession, VisibilityGate
from tests.helpers import head_frame, make_frame, plank_frame


def visible_head_frame(nose_x):
    """Head landmarks plus confidently detected shoulders so the gate lets the frame through."""
    landmarks = dict(head_frame(nose_x).landmarks)
    landmarks.update(make_frame(left_shoulder=(70, 120), right_shoulder=(130, 120)).landmarks)
    return Frame(landmarks=landmarks)


class TestVisibilityGate:
    def test_counts_confident_key_landmarks(self):
        gate = VisibilityGate(min_confidence=0.3, min_visible=2)
        frame = make_frame(nose=(0, 0, 0.9), left_shoulder=(0, 0, 0.31), right_shoulder=(0, 0, 0.3),
                           left_hip=(0, 0, 0.1), left_wrist=(0, 0, 1.0))
        assert gate.visible_count(frame) == 2
        assert gate.is_usable(frame)

    def test_rejects_single_visible_landmark(self):
        gate = VisibilityGate(min_confidence=0.3, min_visible=2)
        frame = make_frame(nose=(0, 0, 0.9), left_shoulder=(0, 0, 0.2), right_shoulder=(0, 0, 0.1),
                           left_hip=(0, 0, 0.1), right_hip=(0, 0, 0.05))
        assert not gate.is_usable(frame)

    def test_stricter_configuration(self):
        gate = VisibilityGate(min_confidence=0.5, min_visible=3)
        frame = make_frame(nose=(0, 0, 0.9), left_shoulder=(0, 0, 0.6), right_shoulder=(0, 0, 0.4))
        assert not gate.is_usable(frame)

    @pytest.mark.parametrize("kwargs", [{"min_confidence": 1.5}, {"min_visible": 6}, {"min_visible": -1}])
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            VisibilityGate(**kwargs)


class TestExerciseSession:
    def test_unusable_frame_leaves_counter_untouched(self):
        counter = HeadTurnCounter()
        session = ExerciseSession(counter, target=5, gate=VisibilityGate(min_confidence=0.3, min_visible=2))
        session.on_frame(visible_head_frame(100))
        before = counter.state

        result = session.on_frame(make_frame(nose=(90, 50, 0.9), left_eye=(95, 40), right_eye=(105, 40),
                                             left_ear=(80, 45), right_ear=(120, 45),
                                             left_shoulder=(0, 0, 0.1)))
        assert not result.user_visible
        assert counter.state is before
        assert session.frames_dropped == 1
        assert session.frames_processed == 1

    def test_completion_fires_once(self):
        completions = []
        session = ExerciseSession(HeadTurnCounter(), target=2, exercise="head_turns",
                                  on_complete=completions.append)
        for nose_x in (100, 90, 100, 110, 100, 90, 100, 110):
            result = session.on_frame(visible_head_frame(nose_x))
        assert completions == [session]
        assert result.completed
        assert result.progress == 4
        assert session.summary()["completed"]

    def test_not_complete_before_target(self):
        session = ExerciseSession(HeadTurnCounter(), target=2)
        result = session.on_frame(visible_head_frame(90))
        assert result.progress == 1
        assert not result.completed

    def test_plank_session_uses_duration(self, clock):
        counter = PlankCounter(target_seconds=2, clock=clock)
        completions = []
        session = ExerciseSession(counter, target=2, exercise="plank", on_complete=completions.append)
        frame = plank_frame()
        for _ in range(3):
            session.on_frame(frame)
            clock.advance(1)
        assert len(completions) == 1
        summary = session.summary()
        assert summary["remaining_seconds"] == 0
        assert summary["target"] == 2

    def test_session_target_applies_to_plank(self, clock):
        counter = PlankCounter(target_seconds=60, clock=clock)
        session = ExerciseSession(counter, target=5, exercise="plank")
        assert counter.target_seconds == 5
        assert session.target == 5
        assert session.summary()["remaining_seconds"] == 5

    def test_reset_rearms_completion(self):
        completions = []
        session = ExerciseSession(HeadTurnCounter(), target=1, on_complete=completions.append)
        session.on_frame(visible_head_frame(90))
        session.reset()
        assert session.summary()["progress"] == 0
        session.on_frame(visible_head_frame(100))
        session.on_frame(visible_head_frame(110))
        assert len(completions) == 2

    def test_negative_target(self):
        with pytest.raises(ValueError):
            ExerciseSession(JumpingJackCounter(), target=-1)


@pytest.mark.parametrize("exercise", [e for e in ExerciseType if e is not ExerciseType.PLANK])
def test_progress_never_decreases(exercise):
    rng = random.Random(7)
    counter = get_counter(exercise)
    names = ["nose", "left_eye", "right_eye", "left_ear", "right_ear", "left_shoulder", "right_shoulder",
             "left_elbow", "right_elbow", "left_wrist", "right_wrist", "left_hip", "right_hip",
             "left_knee", "right_knee", "left_ankle", "right_ankle"]
    last = 0
    for _ in range(300):
        points = {name: (rng.uniform(0, 400), rng.uniform(0, 400)) for name in names if rng.random() > 0.1}
        counter.process_frame(make_frame(**points))
        assert counter.current_progress() >= last
        last = counter.current_progress()
