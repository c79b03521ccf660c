"""
Parking space record shared by the detector, the evaluator and the lot monitors
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from ._geometry import OrientedRect


@dataclass
class ParkingSpace:
    """
    One parking space (or a candidate before filtering)

    Attributes:
        id: Space identifier; 1..N in canonical order once detection finishes
        rect: Oriented rectangle describing the space
        contour: Polygon points in pixel coordinates
        occupied: Occupancy flag, written only by the occupancy classifier
    """
    id: int
    rect: OrientedRect
    contour: List[Tuple[int, int]] = field(default_factory=list)
    occupied: bool = False

