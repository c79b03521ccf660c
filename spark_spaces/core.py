"""
Parking space detector
Runs line evidence -> orientation clusters -> corner sets -> candidates -> final spaces
"""

import logging
from typing import Iterable, List, Optional

import numpy as np

from spark_config import Config, default_config
from ._candidates import create_candidates, filter_spaces
from ._clustering import cluster_lines
from ._geometry import LineSegment
from ._intersections import find_corner_sets
from ._lines import extract_line_segments
from ._space import ParkingSpace

logger = logging.getLogger(__name__)


class SpaceDetector:
    """Detects parking spaces from the painted markings of an empty lot"""

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the detector

        Args:
            config: Detection parameters (default_config when omitted)
        """
        self.config = config or default_config
        self.stats = {
            "segments": 0,
            "clusters": 0,
            "corner_sets": 0,
            "candidates": 0,
            "spaces": 0
        }

    def detect_spaces(self, empty_lot: np.ndarray) -> List[ParkingSpace]:
        """
        Detect spaces in an image of the empty lot

        Args:
            empty_lot: BGR or grayscale image

        Returns:
            Spaces in reading order with ids 1..N
        """
        lines = extract_line_segments(empty_lot, self.config)
        return self.detect_from_lines(lines)

    def detect_from_lines(self, lines: Iterable[LineSegment]) -> List[ParkingSpace]:
        """
        Detect spaces from already extracted line segments

        Args:
            lines: Line segments in source order

        Returns:
            Spaces in reading order with ids 1..N
        """
        cfg = self.config
        lines = list(lines)

        clusters = cluster_lines(lines, cfg.parallel_angle_thresh)
        corner_sets = find_corner_sets(clusters, cfg.perp_angle_thresh, cfg.intersection_eps)
        candidates = create_candidates(corner_sets)
        spaces = filter_spaces(candidates,
                               cfg.min_space_area, cfg.max_space_area,
                               cfg.min_aspect_ratio, cfg.max_aspect_ratio,
                               cfg.row_tolerance)

        self.stats = {
            "segments": len(lines),
            "clusters": len(clusters),
            "corner_sets": len(corner_sets),
            "candidates": len(candidates),
            "spaces": len(spaces)
        }
        logger.debug(f"Space detection: {len(lines)} segments, {len(clusters)} clusters, "
                     f"{len(corner_sets)} corner sets, {len(candidates)} candidates, "
                     f"{len(spaces)} spaces")
        return spaces


def create_detector(config_path: Optional[str] = None) -> SpaceDetector:
    """
    Convenience factory

    Args:
        config_path: Optional JSON config; defaults are used when omitted

    Returns:
        SpaceDetector instance
    """
    config = Config.from_json(config_path) if config_path else default_config
    return SpaceDetector(config)
