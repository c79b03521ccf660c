"""
SPARK Space Detection Module
Finds parking space rectangles from the painted line markings of an empty lot.
"""

from .core import SpaceDetector, create_detector
from ._space import ParkingSpace
from ._geometry import (
    LineSegment,
    OrientedRect,
    line_angle,
    are_parallel,
    are_perpendicular,
    intersection_point,
    fit_min_area_rect
)
from ._clustering import OrientationCluster, cluster_lines
from ._intersections import find_corner_sets
from ._candidates import (
    create_candidates,
    is_valid_space,
    compare_spaces,
    order_spaces,
    filter_spaces
)
from ._lines import extract_line_segments

__all__ = [
    'SpaceDetector',
    'create_detector',
    'ParkingSpace',
    'LineSegment',
    'OrientedRect',
    'line_angle',
    'are_parallel',
    'are_perpendicular',
    'intersection_point',
    'fit_min_area_rect',
    'OrientationCluster',
    'cluster_lines',
    'find_corner_sets',
    'create_candidates',
    'is_valid_space',
    'compare_spaces',
    'order_spaces',
    'filter_spaces',
    'extract_line_segments'
]
