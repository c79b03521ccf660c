"""
SPARK Evaluation Module
Scores detected spaces and car segmentations against ground truth.
"""

from .core import PerformanceEvaluator, load_label_mask
from ._iou import compute_pixel_iou, compute_rect_iou, rasterize_rect
from ._matching import Metrics, evaluate_space_detection, evaluate_segmentation
from ._report import summarize, format_report, generate_report, plot_metrics_history

__all__ = [
    'PerformanceEvaluator',
    'load_label_mask',
    'compute_pixel_iou',
    'compute_rect_iou',
    'rasterize_rect',
    'Metrics',
    'evaluate_space_detection',
    'evaluate_segmentation',
    'summarize',
    'format_report',
    'generate_report',
    'plot_metrics_history'
]
