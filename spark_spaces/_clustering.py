"""
Orientation clustering
Greedy first-fit grouping of line segments by near-parallel orientation.
"""

from dataclasses import dataclass, field
from functools import reduce
from typing import Iterable, List

from ._geometry import LineSegment, are_parallel


@dataclass
class OrientationCluster:
    """Segments parallel to the cluster's first (representative) member"""
    members: List[LineSegment] = field(default_factory=list)

    @property
    def representative(self) -> LineSegment:
        return self.members[0]

    def __len__(self) -> int:
        return len(self.members)


def _assign(clusters: List[OrientationCluster], line: LineSegment,
            tolerance: float) -> List[OrientationCluster]:
    for cluster in clusters:
        if are_parallel(line, cluster.representative, tolerance):
            cluster.members.append(line)
            return clusters
    clusters.append(OrientationCluster([line]))
    return clusters


def cluster_lines(lines: Iterable[LineSegment], parallel_angle_thresh: float = 10) -> List[OrientationCluster]:
    """
    Group segments into orientation clusters.

    Segments are visited in source order and each one joins the first
    existing cluster whose representative is parallel to it, otherwise it
    opens a new cluster. Representatives never change, so the result
    depends on input order.

    Args:
        lines: Line segments of one frame
        parallel_angle_thresh: Parallel tolerance in degrees

    Returns:
        Ordered list of clusters partitioning the input
    """
    return reduce(lambda clusters, line: _assign(clusters, line, parallel_angle_thresh),
                  lines, [])
