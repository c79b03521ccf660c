"""Shared fixtures for the SPARK test suite."""
import logging
import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from spark_spaces import LineSegment, OrientedRect, ParkingSpace

logging.basicConfig(level=logging.INFO)
logging.getLogger('matplotlib').setLevel(logging.WARNING)
logging.getLogger('PIL').setLevel(logging.WARNING)


def make_space(space_id, cx, cy, w=50, h=100, angle=0.0, occupied=False):
    """Axis-aligned (by default) space whose contour is its rectangle"""
    rect = OrientedRect((float(cx), float(cy)), (float(w), float(h)), float(angle))
    contour = [tuple(int(v) for v in p) for p in rect.int_points()]
    return ParkingSpace(id=space_id, rect=rect, contour=contour, occupied=occupied)


@pytest.fixture
def rectangle_lines():
    """Four markings outlining a 50x100 space with corners at (0,0) and (50,100)"""
    return [
        LineSegment(0, 0, 50, 0),
        LineSegment(0, 100, 50, 100),
        LineSegment(0, 0, 0, 100),
        LineSegment(50, 0, 50, 100),
    ]


@pytest.fixture
def ground_truth_spaces():
    return [make_space(i, 100 * i, 100) for i in (1, 2, 3)]


@pytest.fixture
def two_space_lot():
    """Black 200x200 frame with two 40x80 spaces side by side"""
    frame = np.zeros((200, 200, 3), dtype=np.uint8)
    spaces = [make_space(1, 50, 100, 40, 80), make_space(2, 150, 100, 40, 80)]
    return frame, spaces
