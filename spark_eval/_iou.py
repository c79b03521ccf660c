"""
Intersection over Union for oriented rectangles and pixel masks
"""

from typing import Tuple

import cv2
import numpy as np

from spark_spaces import OrientedRect


def compute_pixel_iou(mask_a: np.ndarray, mask_b: np.ndarray) -> float:
    """
    Compute IoU between two masks, nonzero pixels counting as set

    Args:
        mask_a: Mask (H, W)
        mask_b: Mask (H, W)

    Returns:
        IoU value (0-1); 0 when both masks are empty
    """
    a = np.asarray(mask_a) != 0
    b = np.asarray(mask_b) != 0

    union_area = np.count_nonzero(a | b)
    if union_area == 0:
        return 0.0

    inter_area = np.count_nonzero(a & b)
    return inter_area / union_area


def rasterize_rect(rect: OrientedRect, canvas_size: int = 1000,
                   origin: Tuple[int, int] = (0, 0)) -> np.ndarray:
    """Fill the rectangle, shifted by -origin, into a square uint8 canvas (255 inside)"""
    mask = np.zeros((canvas_size, canvas_size), dtype=np.uint8)
    points = rect.int_points() - np.asarray(origin, dtype=np.int32)
    cv2.fillPoly(mask, [points], 255)
    return mask


def compute_rect_iou(rect_a: OrientedRect, rect_b: OrientedRect, canvas_size: int = 1000) -> float:
    """
    Compute IoU between two oriented rectangles by rasterization

    Both rectangles are shifted so that their joint bounding box starts at
    the canvas origin, so the result does not depend on where the pair sits
    in the frame.

    Args:
        rect_a: First rectangle
        rect_b: Second rectangle
        canvas_size: Side of the square canvas both are drawn into

    Returns:
        IoU value (0-1); 0 when either rectangle has no area
    """
    # fillPoly would still draw a degenerate rectangle as a line
    if rect_a.area <= 0 or rect_b.area <= 0:
        return 0.0

    corners = np.vstack([rect_a.int_points(), rect_b.int_points()])
    origin = tuple(int(v) for v in corners.min(axis=0))

    return compute_pixel_iou(rasterize_rect(rect_a, canvas_size, origin),
                             rasterize_rect(rect_b, canvas_size, origin))
