import math

from counters.landmarks import Frame, Landmark, LandmarkName


def make_frame(likelihood=None, **points):
    """Build a Frame from keyword landmarks: left_hip=(x, y) or left_hip=(x, y, confidence)."""
    landmarks = {}
    for name, value in points.items():
        confidence = value[2] if len(value) == 3 else 1.0
        landmarks[LandmarkName[name.upper()]] = Landmark(value[0], value[1], confidence)
    return Frame(landmarks=landmarks, likelihood=likelihood)


def bend(vertex, length, degrees):
    """
    Return (upper, lower) points around `vertex` forming the given joint angle:
    `upper` sits straight above the vertex and `lower` is rotated away from it.
    """
    vx, vy = vertex
    upper = (vx, vy - length)
    theta = math.radians(degrees)
    lower = (vx + length * math.sin(theta), vy - length * math.cos(theta))
    return upper, lower


def head_frame(nose_x):
    return make_frame(nose=(nose_x, 50), left_eye=(95, 40), right_eye=(105, 40),
                      left_ear=(80, 45), right_ear=(120, 45))


def plank_frame(hip_sag=0, likelihood=None):
    return make_frame(likelihood=likelihood,
                      left_shoulder=(0, 100), left_hip=(100, 105 + hip_sag), left_knee=(200, 110),
                      right_shoulder=(20, 100), right_hip=(120, 105 + hip_sag), right_knee=(220, 110))


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
