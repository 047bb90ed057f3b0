import numpy as np
from typing import Sequence, Tuple

Point = Tuple[float, float]


def angle(a: Point, vertex: Point, c: Point) -> float:
    """
    Angle in degrees (0-180) between the rays vertex->a and vertex->c.

    Computed as atan2(cross, dot) of the two vectors, so it is symmetric in a and c.
    The caller must not pass a or c equal to the vertex; the result for a
    zero-length ray is meaningless.
    """
    ba = np.array(a, dtype=float) - np.array(vertex, dtype=float)
    bc = np.array(c, dtype=float) - np.array(vertex, dtype=float)
    dot = np.dot(ba, bc)
    cross = ba[0] * bc[1] - ba[1] * bc[0]
    return float(np.abs(np.degrees(np.arctan2(cross, dot))))


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.array(b, dtype=float) - np.array(a, dtype=float)))


def is_aligned(points: Sequence[Point], threshold_degrees: float) -> bool:
    """True if every consecutive triple bends less than threshold_degrees away from a straight line."""
    for i in range(len(points) - 2):
        deviation = abs(180.0 - angle(points[i], points[i + 1], points[i + 2]))
        if deviation > threshold_degrees:
            return False
    return True

