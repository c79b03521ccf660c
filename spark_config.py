"""
Configuration management for SPARK parking lot analysis
"""
import json
import math
from dataclasses import dataclass, asdict
from typing import Tuple


@dataclass
class Config:
    """Tunable parameters for space detection, evaluation and lot monitoring"""

    # Line evidence parameters
    blur_size: int = 5
    canny_low: float = 50
    canny_high: float = 150
    hough_rho: float = 1
    hough_theta: float = math.pi / 180
    hough_threshold: int = 50
    min_line_length: float = 50
    max_line_gap: float = 10

    # Space detection parameters (degrees / pixels)
    parallel_angle_thresh: float = 10
    perp_angle_thresh: float = 20
    intersection_eps: float = 1e-6
    min_space_area: float = 1000
    max_space_area: float = 20000
    min_aspect_ratio: float = 1.5
    max_aspect_ratio: float = 4.0
    row_tolerance: float = 50

    # Evaluation parameters
    iou_threshold: float = 0.5
    iou_canvas_size: int = 1000
    mask_classes: Tuple[int, ...] = (0, 1, 2)  # background, parked, misparked

    # Occupancy / segmentation parameters
    occupancy_threshold: float = 0.3
    diff_threshold: int = 30
    car_area_min: float = 1000

    # 2D map
    map_width: int = 400
    map_height: int = 300

    def __post_init__(self):
        """Validate configuration after initialization"""
        self.mask_classes = tuple(self.mask_classes)
        assert self.blur_size > 0 and self.blur_size % 2 == 1, "Blur size must be a positive odd number"
        assert self.parallel_angle_thresh > 0, "Parallel angle threshold must be positive"
        assert self.perp_angle_thresh > 0, "Perpendicular angle threshold must be positive"
        assert 0 <= self.min_space_area <= self.max_space_area, "Space area range is invalid"
        assert 0 < self.min_aspect_ratio <= self.max_aspect_ratio, "Aspect ratio range is invalid"
        assert 0 < self.iou_threshold <= 1.0, "IoU threshold must be in (0, 1]"
        assert self.iou_canvas_size > 0, "IoU canvas size must be positive"
        assert len(self.mask_classes) > 0, "At least one mask class is required"
        assert 0 < self.occupancy_threshold < 1.0, "Occupancy threshold must be between 0 and 1"

    @classmethod
    def from_json(cls, json_path: str) -> 'Config':
        """Load configuration from JSON file"""
        with open(json_path, 'r') as f:
            config_dict = json.load(f)
        return cls(**config_dict)

    def to_json(self, json_path: str) -> None:
        """Save configuration to JSON file"""
        with open(json_path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    def print_config(self) -> None:
        """Print current configuration"""
        print("=" * 50)
        print("SPARK Parking Lot Analysis")
        print("=" * 50)
        print(f"Parallel / perpendicular tolerance: {self.parallel_angle_thresh} / {self.perp_angle_thresh} deg")
        print(f"Space area: [{self.min_space_area}, {self.max_space_area}] px^2")
        print(f"Aspect ratio: [{self.min_aspect_ratio}, {self.max_aspect_ratio}]")
        print(f"Row tolerance: {self.row_tolerance} px")
        print(f"IoU threshold: {self.iou_threshold}")
        print(f"Occupancy threshold: {self.occupancy_threshold}")
        print("=" * 50)


# Default configuration instance
default_config = Config()
