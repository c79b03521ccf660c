"""
Planar geometry primitives for parking space detection
Line segments, orientation predicates, line intersection and oriented rectangles
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import cv2
import numpy as np


Point = Tuple[float, float]


@dataclass(frozen=True)
class LineSegment:
    """Line segment in image pixel coordinates"""
    x1: float
    y1: float
    x2: float
    y2: float

    @classmethod
    def from_array(cls, values: Sequence[float]) -> 'LineSegment':
        """Build from an (x1, y1, x2, y2) sequence such as one HoughLinesP row"""
        x1, y1, x2, y2 = (float(v) for v in np.asarray(values).reshape(-1)[:4])
        return cls(x1, y1, x2, y2)


@dataclass(frozen=True)
class OrientedRect:
    """Rotated rectangle: center, (width, height) and rotation in degrees"""
    center: Point
    size: Tuple[float, float]
    angle: float

    @classmethod
    def from_cv(cls, rect) -> 'OrientedRect':
        """Convert the ((cx, cy), (w, h), angle) tuple returned by cv2.minAreaRect"""
        (cx, cy), (w, h), angle = rect
        return cls((float(cx), float(cy)), (float(w), float(h)), float(angle))

    def to_cv(self):
        return (tuple(self.center), tuple(self.size), self.angle)

    @property
    def area(self) -> float:
        return self.size[0] * self.size[1]

    def points(self) -> np.ndarray:
        """Four corner vertices as a (4, 2) float32 array"""
        return cv2.boxPoints(self.to_cv())

    def int_points(self) -> np.ndarray:
        """Corner vertices rounded to integer pixel positions, ready for fillPoly"""
        return np.round(self.points()).astype(np.int32)

    def bounding_rect(self) -> Tuple[int, int, int, int]:
        """Axis-aligned integer bounding box (x, y, w, h)"""
        return cv2.boundingRect(self.int_points())


def line_angle(line: LineSegment) -> float:
    """
    Orientation of a segment in degrees, normalized to [0, 180)

    A zero-length segment yields 0 (atan2(0, 0)).
    """
    angle = math.degrees(math.atan2(line.y2 - line.y1, line.x2 - line.x1))
    if angle < 0:
        angle += 180.0
    # atan2 may return exactly 180, and -tiny + 180 rounds to 180
    if angle >= 180.0:
        angle -= 180.0
    return angle


def are_parallel(line1: LineSegment, line2: LineSegment, tolerance: float) -> bool:
    """True when the two orientations differ by less than tolerance degrees"""
    return abs(line_angle(line1) - line_angle(line2)) < tolerance


def are_perpendicular(line1: LineSegment, line2: LineSegment, tolerance: float) -> bool:
    """True when the orientation difference is within tolerance of 90 degrees"""
    angle_diff = abs(line_angle(line1) - line_angle(line2))
    return abs(angle_diff - 90.0) < tolerance


def intersection_point(line1: LineSegment, line2: LineSegment,
                       eps: float = 1e-6) -> Optional[Point]:
    """
    Intersection of the two infinite lines through the given segments

    Args:
        line1: First segment (direction and reference point)
        line2: Second segment
        eps: Determinant magnitude below which the lines count as parallel

    Returns:
        (x, y) of the intersection, or None for (near-)parallel lines
    """
    x1, y1, x2, y2 = line1.x1, line1.y1, line1.x2, line1.y2
    x3, y3, x4, y4 = line2.x1, line2.y1, line2.x2, line2.y2

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < eps:
        return None

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    return (x1 + t * (x2 - x1), y1 + t * (y2 - y1))


def fit_min_area_rect(points: Iterable[Point]) -> Optional[OrientedRect]:
    """Minimum-area oriented rectangle enclosing the points (None when empty)"""
    pts = np.asarray(list(points), dtype=np.float32).reshape(-1, 2)
    if len(pts) == 0:
        return None
    return OrientedRect.from_cv(cv2.minAreaRect(pts))
