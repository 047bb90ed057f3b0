"""
Thresholds and defaults for the exercise counters and the session driver.

Angle thresholds are in degrees. Displacement thresholds are in image pixels
and therefore depend on the camera resolution.
"""
import os

# Squat, hip-knee-ankle angle
SQUAT_DOWN_ANGLE = 90.0
SQUAT_UP_ANGLE = 160.0

# Squat, hip vertical displacement from the standing reference
SQUAT_DOWN_PIXELS = 80.0
SQUAT_UP_PIXELS = 40.0

# Push-up, shoulder-elbow-wrist angle
PUSHUP_DOWN_ANGLE = 90.0
PUSHUP_UP_ANGLE = 160.0
# Shoulder/hip height difference allowed, relative to shoulder width
PUSHUP_HORIZONTAL_RATIO = 0.8

# Plank, shoulder-hip-knee angle
PLANK_MIN_ANGLE = 160.0
PLANK_MAX_ANGLE = 180.0
PLANK_VERTICAL_RATIO = 0.5

# Jumping jack, ankle spread beyond shoulder width
JUMPING_JACK_SPREAD_RATIO = 0.3

# Head turn, signed degrees (negative = left)
HEAD_TURN_LEFT_THRESHOLD = -8.0
HEAD_TURN_RIGHT_THRESHOLD = 8.0
HEAD_TURN_SCALE = 45.0

# Whole-pose likelihood required by counters that check it
MIN_POSE_LIKELIHOOD = 0.5

DEFAULT_TARGET_REPS = 20
DEFAULT_PLANK_SECONDS = 60

# Visibility gate
GATE_MIN_CONFIDENCE = float(os.environ.get("GATE_MIN_CONFIDENCE", 0.3))
GATE_MIN_VISIBLE = int(os.environ.get("GATE_MIN_VISIBLE", 2))

SQUAT_STRATEGY = os.environ.get("SQUAT_STRATEGY", "angle")
