"""
Occupancy Classification
Marks spaces as occupied by differencing each one against an empty-lot reference.
"""

import logging
from typing import List, Optional

import cv2
import numpy as np

from spark_spaces import ParkingSpace

logger = logging.getLogger(__name__)


class OccupancyClassifier:
    """Reference-frame differencing per parking space"""

    def __init__(self, occupancy_threshold: float = 0.3, diff_threshold: int = 30,
                 blur_size: int = 5):
        self.occupancy_threshold = occupancy_threshold
        self.diff_threshold = diff_threshold
        self.blur_size = blur_size
        self.reference: Optional[np.ndarray] = None

    def set_reference(self, empty_lot: np.ndarray) -> None:
        """Store the preprocessed empty-lot frame"""
        self.reference = self.preprocess_image(empty_lot)

    def preprocess_image(self, image: np.ndarray) -> np.ndarray:
        """Grayscale plus Gaussian blur"""
        if image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image.copy()
        return cv2.GaussianBlur(gray, (self.blur_size, self.blur_size), 0)

    @staticmethod
    def extract_roi(image: np.ndarray, space: ParkingSpace) -> np.ndarray:
        """
        Pixels inside the space rectangle, cropped to its bounding box

        Args:
            image: Preprocessed single-channel frame
            space: Space whose rectangle selects the pixels

        Returns:
            Cropped ROI (outside-rectangle pixels zeroed); may be empty
        """
        mask = np.zeros(image.shape[:2], dtype=np.uint8)
        cv2.fillPoly(mask, [space.rect.int_points()], 255)
        roi = cv2.bitwise_and(image, image, mask=mask)

        x, y, w, h = space.rect.bounding_rect()
        height, width = image.shape[:2]
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(width, x + w), min(height, y + h)
        return roi[y0:y1, x0:x1]

    def compare_roi(self, roi_a: np.ndarray, roi_b: np.ndarray) -> float:
        """Fraction of pixels whose absolute difference exceeds diff_threshold"""
        if roi_a.size == 0:
            return 0.0
        diff = cv2.absdiff(roi_a, roi_b)
        _, changed = cv2.threshold(diff, self.diff_threshold, 255, cv2.THRESH_BINARY)
        return cv2.countNonZero(changed) / float(changed.size)

    def _check_reference(self) -> None:
        if self.reference is None:
            raise RuntimeError("Reference frame not set; call set_reference() first")

    def is_occupied(self, processed_frame: np.ndarray, space: ParkingSpace) -> bool:
        """
        Decide occupancy of one space

        Args:
            processed_frame: Frame already passed through preprocess_image
            space: Space to test
        """
        self._check_reference()
        current = self.extract_roi(processed_frame, space)
        reference = self.extract_roi(self.reference, space)
        return self.compare_roi(current, reference) > self.occupancy_threshold

    def process_frame(self, frame: np.ndarray, spaces: List[ParkingSpace]) -> List[ParkingSpace]:
        """Set the occupied flag on every space in place"""
        self._check_reference()
        if frame.shape[:2] != self.reference.shape[:2]:
            raise ValueError(f"Frame size {frame.shape[:2]} differs from reference {self.reference.shape[:2]}")
        processed = self.preprocess_image(frame)

        for space in spaces:
            space.occupied = self.is_occupied(processed, space)

        occupied = sum(1 for s in spaces if s.occupied)
        logger.debug(f"Occupancy: {occupied}/{len(spaces)} spaces occupied")
        return spaces
