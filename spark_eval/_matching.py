"""
Detection-to-reference matching
Greedy space matching and per-class pixel mask scoring.
"""

from dataclasses import dataclass, field
from typing import Dict, Sequence

import numpy as np

from spark_spaces import ParkingSpace
from ._iou import compute_pixel_iou, compute_rect_iou


@dataclass
class Metrics:
    """Per-frame accuracy figures"""
    mAP: float = 0.0
    mIoU: float = 0.0
    total_spaces: int = 0
    correct_detections: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    class_ious: Dict[int, float] = field(default_factory=dict)

    @property
    def detected_count(self) -> int:
        return self.correct_detections + self.false_positives


def evaluate_space_detection(detected: Sequence[ParkingSpace],
                             ground_truth: Sequence[ParkingSpace],
                             iou_threshold: float = 0.5,
                             canvas_size: int = 1000) -> Metrics:
    """
    Match detected spaces against ground truth.

    Detections are visited in input order; each takes the unmatched
    ground-truth space with the highest rectangle IoU and counts as correct
    when that IoU reaches iou_threshold. This is greedy, so an earlier
    detection can claim the best match of a later one.

    Args:
        detected: Detected spaces, in the order to match them
        ground_truth: Reference spaces
        iou_threshold: Minimum IoU for a correct detection
        canvas_size: Rasterization canvas size for the IoU

    Returns:
        Metrics with mAP and detection counts filled in (mIoU left at 0)
    """
    matched_gt = [False] * len(ground_truth)
    correct = 0

    for space in detected:
        max_iou = 0.0
        best_match = None

        for j, reference in enumerate(ground_truth):
            if matched_gt[j]:
                continue
            iou = compute_rect_iou(space.rect, reference.rect, canvas_size)
            if iou > max_iou:
                max_iou = iou
                best_match = j

        if best_match is not None and max_iou >= iou_threshold:
            matched_gt[best_match] = True
            correct += 1

    false_positives = len(detected) - correct
    false_negatives = len(ground_truth) - correct
    mAP = correct / (correct + false_positives) if len(detected) > 0 else 0.0

    return Metrics(
        mAP=mAP,
        total_spaces=len(ground_truth),
        correct_detections=correct,
        false_positives=false_positives,
        false_negatives=false_negatives
    )


def evaluate_segmentation(segmentation: np.ndarray, ground_truth_mask: np.ndarray,
                          classes: Sequence[int] = (0, 1, 2)) -> Metrics:
    """
    Score a predicted label mask against the ground-truth label mask

    Args:
        segmentation: Predicted class id per pixel (H, W)
        ground_truth_mask: Reference class id per pixel (H, W)
        classes: Class ids averaged into mIoU

    Returns:
        Metrics with mIoU and per-class IoU filled in
    """
    segmentation = np.asarray(segmentation)
    ground_truth_mask = np.asarray(ground_truth_mask)
    if segmentation.shape != ground_truth_mask.shape:
        raise ValueError(f"Mask shapes differ: {segmentation.shape} vs {ground_truth_mask.shape}")

    class_ious = {
        class_id: compute_pixel_iou(segmentation == class_id, ground_truth_mask == class_id)
        for class_id in classes
    }
    mIoU = float(np.mean(list(class_ious.values()))) if class_ious else 0.0

    return Metrics(mIoU=mIoU, class_ious=class_ious)
