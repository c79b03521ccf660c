"""
Space candidates, validity filtering and canonical ordering
"""

from dataclasses import replace
from functools import cmp_to_key
from typing import Iterable, List, Sequence

from ._geometry import OrientedRect, fit_min_area_rect
from ._intersections import CornerSet
from ._space import ParkingSpace


def create_candidates(corner_sets: Iterable[CornerSet]) -> List[ParkingSpace]:
    """
    Fit a minimum-area rectangle to each corner set.

    Candidate ids are positional tags only; the final ids are assigned by
    order_spaces.
    """
    candidates = []
    for tag, corners in enumerate(corner_sets, start=1):
        rect = fit_min_area_rect(corners)
        if rect is None:
            continue
        candidates.append(ParkingSpace(id=tag, rect=rect, contour=list(corners), occupied=False))
    return candidates


def is_valid_space(rect: OrientedRect,
                   min_area: float = 1000, max_area: float = 20000,
                   min_aspect: float = 1.5, max_aspect: float = 4.0) -> bool:
    """
    Area and aspect-ratio check on the rectangle's sides, bounds inclusive.
    The ratio is long side over short side; a zero short side is invalid.
    """
    width, height = rect.size
    if width > height:
        width, height = height, width
    if width <= 0:
        return False

    area = width * height
    ratio = height / width
    return min_area <= area <= max_area and min_aspect <= ratio <= max_aspect


def compare_spaces(a: ParkingSpace, b: ParkingSpace, row_tolerance: float = 50) -> int:
    """Row-then-column reading order: centers more than row_tolerance apart in y sort by y, else by x"""
    ay, by = a.rect.center[1], b.rect.center[1]
    if abs(ay - by) > row_tolerance:
        return -1 if ay < by else 1
    ax, bx = a.rect.center[0], b.rect.center[0]
    if ax < bx:
        return -1
    if ax > bx:
        return 1
    return 0


def order_spaces(spaces: Sequence[ParkingSpace], row_tolerance: float = 50) -> List[ParkingSpace]:
    """Stable sort into reading order and renumber ids 1..N"""
    key = cmp_to_key(lambda a, b: compare_spaces(a, b, row_tolerance))
    ordered = sorted(spaces, key=key)
    return [replace(space, id=rank) for rank, space in enumerate(ordered, start=1)]


def filter_spaces(candidates: Iterable[ParkingSpace],
                  min_area: float = 1000, max_area: float = 20000,
                  min_aspect: float = 1.5, max_aspect: float = 4.0,
                  row_tolerance: float = 50) -> List[ParkingSpace]:
    """Drop implausible candidates, then order and re-identify the survivors"""
    valid = [c for c in candidates
             if is_valid_space(c.rect, min_area, max_area, min_aspect, max_aspect)]
    return order_spaces(valid, row_tolerance)
