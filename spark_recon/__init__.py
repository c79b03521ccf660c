"""
SPARK Reconnaissance Module
Space definition storage, occupancy classification, car segmentation and visualization.
"""

from ._space_store import SpaceStore, load_spaces, save_spaces
from ._occupancy import OccupancyClassifier
from ._segmenter import (
    CarDetection,
    CarSegmenter,
    label_mask,
    misparking_summary,
    BACKGROUND,
    PARKED,
    MISPARKED
)
from ._visualizer import Visualizer

__all__ = [
    'SpaceStore',
    'load_spaces',
    'save_spaces',
    'OccupancyClassifier',
    'CarDetection',
    'CarSegmenter',
    'label_mask',
    'misparking_summary',
    'BACKGROUND',
    'PARKED',
    'MISPARKED',
    'Visualizer'
]
