import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


class LandmarkName(IntEnum):
    """Body points produced by the pose model, numbered in MediaPipe Pose order."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


@dataclass(frozen=True)
class Landmark:
    """A 2D body point in image pixel space with its detection confidence."""
    x: float
    y: float
    confidence: float = 1.0

    @property
    def point(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Frame:
    """
    One pose estimate for a single camera capture.

    Not every landmark is guaranteed to be present. `likelihood` is the optional
    whole-pose confidence reported by some pose models.
    """
    landmarks: Mapping[LandmarkName, Landmark] = field(default_factory=dict)
    likelihood: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "landmarks", MappingProxyType(dict(self.landmarks)))

    def get(self, name: LandmarkName) -> Optional[Landmark]:
        return self.landmarks.get(name)

    def require(self, *names: LandmarkName) -> Optional[Tuple[Landmark, ...]]:
        """Return the requested landmarks in order, or None if any of them is missing."""
        found = tuple(self.landmarks.get(name) for name in names)
        if any(landmark is None for landmark in found):
            return None
        return found

    @classmethod
    def from_dict(cls, payload: Mapping) -> "Frame":
        """
        Build a frame from a JSON-style payload:

            {"landmarks": {"left_shoulder": {"x": 310.0, "y": 220.5, "confidence": 0.97}, ...},
             "likelihood": 0.92}

        A landmark may also be given as a [x, y] or [x, y, confidence] list.
        Unknown landmark names are skipped.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Frame payload must be an object")
        raw_landmarks = payload.get("landmarks") or {}
        if not isinstance(raw_landmarks, Mapping):
            raise ValueError("'landmarks' must be an object keyed by landmark name")

        landmarks: Dict[LandmarkName, Landmark] = {}
        for raw_name, raw_point in raw_landmarks.items():
            try:
                name = LandmarkName[str(raw_name).upper()]
            except KeyError:
                logging.debug(f"Ignoring unknown landmark: {raw_name}")
                continue
            landmarks[name] = _parse_landmark(raw_name, raw_point)

        likelihood = payload.get("likelihood")
        if likelihood is not None:
            likelihood = _to_probability(likelihood, "likelihood")
        return cls(landmarks=landmarks, likelihood=likelihood)

def _to_float(value, label: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value for {label}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid numeric value for {label}: {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"Non-finite value for {label}: {value!r}")
    return number


def _to_probability(value, label: str) -> float:
    number = _to_float(value, label)
    if not 0.0 <= number <= 1.0:
        raise ValueError(f"{label} must be within [0, 1], got {number}")
    return number


def _parse_landmark(name, raw_point) -> Landmark:
    if isinstance(raw_point, Mapping):
        if "x" not in raw_point or "y" not in raw_point:
            raise ValueError(f"Landmark {name} needs 'x' and 'y'")
        x, y = raw_point["x"], raw_point["y"]
        confidence = raw_point.get("confidence", 1.0)
    elif isinstance(raw_point, (list, tuple)) and len(raw_point) in (2, 3):
        x, y = raw_point[0], raw_point[1]
        confidence = raw_point[2] if len(raw_point) == 3 else 1.0
    else:
        raise ValueError(f"Landmark {name} must be an object or a [x, y, confidence] list")
    return Landmark(
        x=_to_float(x, f"{name}.x"),
        y=_to_float(y, f"{name}.y"),
        confidence=_to_probability(confidence, f"{name}.confidence"),
    )


def frame_from_mediapipe(pose_landmarks, width: int, height: int) -> Frame:
    """
    Convert a MediaPipe normalized landmark list into a pixel-space Frame.

    MediaPipe reports coordinates normalized to [0, 1]; they are scaled by the
    image size so pixel thresholds behave the same as with other pose models.
    Per-landmark `visibility` becomes the landmark confidence.
    """
    landmarks = {}
    for idx, lm in enumerate(pose_landmarks.landmark):
        if idx >= len(LandmarkName):
            break
        landmarks[LandmarkName(idx)] = Landmark(
            x=lm.x * width,
            y=lm.y * height,
            confidence=float(getattr(lm, "visibility", 1.0)),
        )
    return Frame(landmarks=landmarks)
