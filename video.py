import argparse
import json
import logging

import cv2
import mediapipe as mp

from counters.counter_factory import get_counter, parse_exercise_type, default_target
from counters.landmarks import Frame, frame_from_mediapipe
from counters.session import ExerciseSession


def run_video(video_path, exercise, target=None, squat_strategy=None, rotate=False):
    """
    Replay a recorded clip through an exercise session.

    Frames are timestamped from the clip's frame rate rather than the wall clock,
    so a plank replay measures video time. Returns the session summary.
    """
    exercise_type = parse_exercise_type(exercise)
    if target is None:
        target = default_target(exercise_type)

    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise ValueError(f"Could not open video: {video_path}")
    fps = cap.get(cv2.CAP_PROP_FPS) or 30
    frame_count = 0

    counter = get_counter(exercise_type, target=target, squat_strategy=squat_strategy,
                          clock=lambda: frame_count / fps)
    session = ExerciseSession(counter, target, exercise=exercise_type.value)
    logging.info(f"Analyzing video: {video_path} ({fps:.1f} fps) for {exercise_type.value}")

    pose = mp.solutions.pose.Pose(min_detection_confidence=0.5, min_tracking_confidence=0.5)
    try:
        while cap.isOpened():
            success, image = cap.read()
            if not success:
                break
            if rotate:
                image = cv2.rotate(image, cv2.ROTATE_90_CLOCKWISE)

            results = pose.process(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))
            if results.pose_landmarks:
                height, width = image.shape[:2]
                frame = frame_from_mediapipe(results.pose_landmarks, width, height)
            else:
                frame = Frame()

            if session.on_frame(frame).completed:
                logging.info(f"Target reached at frame {frame_count}")
                break
            frame_count += 1
    finally:
        cap.release()
        pose.close()

    return session.summary()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    parser = argparse.ArgumentParser(description="Count exercise reps in a recorded video.")
    parser.add_argument("video", help="Path to the video file")
    parser.add_argument("--exercise", required=True, help="jumping_jacks, squats, push_ups, plank or head_turns")
    parser.add_argument("--target", type=int, help="Target reps, or seconds for plank")
    parser.add_argument("--squat-strategy", choices=["angle", "displacement"])
    parser.add_argument("--rotate", action="store_true", help="Rotate portrait clips 90 degrees clockwise")
    args = parser.parse_args()

    summary = run_video(args.video, args.exercise, args.target, args.squat_strategy, args.rotate)
    print(json.dumps(summary, indent=2))
