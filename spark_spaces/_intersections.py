"""
Corner set construction from perpendicular orientation clusters
"""

from typing import List, Sequence, Tuple

from ._clustering import OrientationCluster
from ._geometry import are_perpendicular, intersection_point


CornerSet = List[Tuple[int, int]]

MIN_CORNERS = 4


def find_corner_sets(clusters: Sequence[OrientationCluster],
                     perp_angle_thresh: float = 20,
                     eps: float = 1e-6) -> List[CornerSet]:
    """
    Intersect every perpendicular pair of clusters.

    For each cluster pair (i < j) whose representatives are perpendicular,
    every line of cluster i is intersected with every line of cluster j
    (as infinite lines). Parallel pairs and intersections with a negative
    coordinate are dropped. A pair yields one corner set, kept only when it
    holds at least four points.

    Args:
        clusters: Orientation clusters of one frame
        perp_angle_thresh: Perpendicular tolerance in degrees
        eps: Determinant threshold for parallel lines

    Returns:
        List of corner sets with integer pixel points
    """
    corner_sets = []

    for i in range(len(clusters)):
        for j in range(i + 1, len(clusters)):
            if not are_perpendicular(clusters[i].representative, clusters[j].representative,
                                     perp_angle_thresh):
                continue

            corners = []
            for line1 in clusters[i].members:
                for line2 in clusters[j].members:
                    point = intersection_point(line1, line2, eps)
                    if point is None:
                        continue
                    x, y = point
                    # out of frame
                    if x < 0 or y < 0:
                        continue
                    corners.append((int(round(x)), int(round(y))))

            if len(corners) >= MIN_CORNERS:
                corner_sets.append(corners)

    return corner_sets
