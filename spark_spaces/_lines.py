"""
Line Evidence
Turns an empty-lot frame into raw line segments with OpenCV primitives.
"""

from typing import List

import cv2
import numpy as np

from ._geometry import LineSegment


def preprocess_image(image: np.ndarray, blur_size: int = 5) -> np.ndarray:
    """
    Grayscale, adaptive threshold and blur.

    Args:
        image: BGR (H, W, 3) or grayscale (H, W) uint8 image

    Returns:
        Blurred binary image (H, W)
    """
    if image.ndim == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    else:
        gray = image.copy()

    # Adaptive threshold copes with uneven lighting
    binary = cv2.adaptiveThreshold(gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
                                   cv2.THRESH_BINARY, 11, 2)
    return cv2.GaussianBlur(binary, (blur_size, blur_size), 0)


def enhance_lines(image: np.ndarray, canny_low: float = 50, canny_high: float = 150) -> np.ndarray:
    """Canny edges dilated with a 3x3 kernel to reconnect broken markings"""
    edges = cv2.Canny(image, canny_low, canny_high)
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3))
    return cv2.dilate(edges, kernel)


def detect_lines(edges: np.ndarray, rho: float = 1, theta: float = np.pi / 180,
                 threshold: int = 50, min_line_length: float = 50,
                 max_line_gap: float = 10) -> List[LineSegment]:
    """Probabilistic Hough transform; an image without lines gives an empty list"""
    lines = cv2.HoughLinesP(edges, rho, theta, threshold,
                            minLineLength=min_line_length, maxLineGap=max_line_gap)
    if lines is None:
        return []
    return [LineSegment.from_array(line[0]) for line in lines]


def extract_line_segments(image: np.ndarray, config) -> List[LineSegment]:
    """Full line evidence chain driven by a Config"""
    processed = preprocess_image(image, config.blur_size)
    edges = enhance_lines(processed, config.canny_low, config.canny_high)
    return detect_lines(edges, config.hough_rho, config.hough_theta, config.hough_threshold,
                        config.min_line_length, config.max_line_gap)
