"""
Performance evaluator
Scores detected spaces and segmentations frame by frame and keeps the history for reporting.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
from PIL import Image

from spark_config import Config, default_config
from spark_spaces import ParkingSpace
from ._matching import Metrics, evaluate_segmentation, evaluate_space_detection
from ._report import generate_report, plot_metrics_history, summarize

logger = logging.getLogger(__name__)


def load_label_mask(mask_path: str) -> np.ndarray:
    """
    Load a ground-truth label mask (one class id per pixel)

    Args:
        mask_path: Path to a single-channel or palette image

    Returns:
        uint8 array (H, W)
    """
    path = Path(mask_path)
    if not path.exists():
        raise FileNotFoundError(f"Ground-truth mask not found: {mask_path}")

    image = Image.open(path)
    if image.mode not in ('L', 'P'):
        image = image.convert('L')
    return np.array(image, dtype=np.uint8)


class PerformanceEvaluator:
    """Accumulates per-frame metrics for a sequence"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config
        self.history: List[Metrics] = []

    def evaluate_space_detection(self, detected: Sequence[ParkingSpace],
                                 ground_truth: Sequence[ParkingSpace]) -> Metrics:
        return evaluate_space_detection(detected, ground_truth,
                                        self.config.iou_threshold,
                                        self.config.iou_canvas_size)

    def evaluate_segmentation(self, segmentation: np.ndarray,
                              ground_truth_mask: np.ndarray) -> Metrics:
        return evaluate_segmentation(segmentation, ground_truth_mask, self.config.mask_classes)

    def evaluate_frame(self, detected: Sequence[ParkingSpace],
                       ground_truth: Sequence[ParkingSpace],
                       segmentation: Optional[np.ndarray] = None,
                       ground_truth_mask: Optional[np.ndarray] = None) -> Metrics:
        """
        Score one frame and append the result to the history

        Args:
            detected: Detected spaces
            ground_truth: Reference spaces
            segmentation: Optional predicted label mask
            ground_truth_mask: Optional reference label mask

        Returns:
            Combined metrics (mIoU stays 0 without both masks)
        """
        metrics = self.evaluate_space_detection(detected, ground_truth)

        if segmentation is not None and ground_truth_mask is not None:
            seg_metrics = self.evaluate_segmentation(segmentation, ground_truth_mask)
            metrics = replace(metrics, mIoU=seg_metrics.mIoU, class_ious=seg_metrics.class_ious)

        self.history.append(metrics)
        logger.info(f"📊 Frame {len(self.history)}: mAP={metrics.mAP:.3f}, mIoU={metrics.mIoU:.3f}, "
                    f"correct={metrics.correct_detections}/{metrics.detected_count}, "
                    f"FP={metrics.false_positives}, FN={metrics.false_negatives}")
        return metrics

    def summary(self) -> dict:
        return summarize(self.history)

    def generate_report(self, output_path: str) -> None:
        generate_report(output_path, self.history)

    def plot_history(self, output_path: str) -> None:
        plot_metrics_history(self.history, output_path)
