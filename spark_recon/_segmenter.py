"""
Car Segmentation
Extracts vehicle blobs from a frame and flags cars parked outside every space.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import cv2
import numpy as np

from spark_spaces import ParkingSpace

logger = logging.getLogger(__name__)

BACKGROUND = 0
PARKED = 1
MISPARKED = 2


@dataclass
class CarDetection:
    """One connected vehicle blob"""
    mask: np.ndarray
    misparked: bool

    @property
    def area(self) -> int:
        return int(np.count_nonzero(self.mask))


def space_polygon(space: ParkingSpace) -> np.ndarray:
    """Space outline as int32 points; the contour hull when it has 3+ points, else the rectangle"""
    if len(space.contour) >= 3:
        return cv2.convexHull(np.asarray(space.contour, dtype=np.int32))
    return space.rect.int_points()


class CarSegmenter:
    """Threshold-and-morphology vehicle segmentation"""

    def __init__(self, car_area_min: float = 1000, blur_size: int = 5):
        self.car_area_min = car_area_min
        self.blur_size = blur_size

    def preprocess_frame(self, frame: np.ndarray) -> np.ndarray:
        """Grayscale, blur and inverse adaptive threshold"""
        if frame.ndim == 3:
            processed = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        else:
            processed = frame.copy()
        processed = cv2.GaussianBlur(processed, (self.blur_size, self.blur_size), 0)
        return cv2.adaptiveThreshold(processed, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
                                     cv2.THRESH_BINARY_INV, 11, 2)

    def detect_vehicles(self, frame: np.ndarray) -> np.ndarray:
        """
        Binary car mask of the frame

        Args:
            frame: BGR or grayscale frame

        Returns:
            uint8 mask (H, W) with filled car contours set to 255
        """
        processed = self.preprocess_frame(frame)

        # Remove speckle, then close small gaps
        kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3))
        processed = cv2.morphologyEx(processed, cv2.MORPH_OPEN, kernel)
        processed = cv2.morphologyEx(processed, cv2.MORPH_CLOSE, kernel)

        contours, _ = cv2.findContours(processed, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        car_mask = np.zeros(processed.shape[:2], dtype=np.uint8)
        for contour in contours:
            if cv2.contourArea(contour) > self.car_area_min:
                cv2.drawContours(car_mask, [contour], 0, 255, -1)
        return car_mask

    @staticmethod
    def is_misparked(car_mask: np.ndarray, spaces: Sequence[ParkingSpace]) -> bool:
        """A car is misparked when its mask overlaps none of the spaces"""
        for space in spaces:
            space_mask = np.zeros(car_mask.shape[:2], dtype=np.uint8)
            cv2.fillPoly(space_mask, [space_polygon(space)], 255)

            if np.count_nonzero((car_mask != 0) & (space_mask != 0)) > 0:
                return False
        return True

    def detect_cars(self, frame: np.ndarray, spaces: Sequence[ParkingSpace]) -> List[CarDetection]:
        """
        Split the car mask into connected components and classify each

        Args:
            frame: BGR or grayscale frame
            spaces: Current parking spaces

        Returns:
            One CarDetection per component
        """
        car_mask = self.detect_vehicles(frame)
        num_labels, labels = cv2.connectedComponents(car_mask)

        detections = []
        # label 0 is background
        for label in range(1, num_labels):
            component = (labels == label).astype(np.uint8) * 255
            detections.append(CarDetection(mask=component,
                                           misparked=self.is_misparked(component, spaces)))

        logger.debug(f"Segmentation: {len(detections)} cars, "
                     f"{sum(1 for d in detections if d.misparked)} misparked")
        return detections


def label_mask(detections: Sequence[CarDetection], shape: Tuple[int, ...]) -> np.ndarray:
    """
    Prediction label mask for pixel scoring

    Args:
        detections: Car detections of one frame
        shape: Frame shape; only (H, W) is used

    Returns:
        uint8 (H, W): 0 background, 1 correctly parked, 2 misparked
    """
    labels = np.full(shape[:2], BACKGROUND, dtype=np.uint8)
    for detection in detections:
        labels[detection.mask != 0] = MISPARKED if detection.misparked else PARKED
    return labels


def misparking_summary(detections: Sequence[CarDetection], spaces: Sequence[ParkingSpace]) -> Dict:
    """
    Lot statistics for one frame

    Returns:
        Dict with total / occupied / available spaces and misparked cars
    """
    occupied = sum(1 for s in spaces if s.occupied)
    return {
        "total_spaces": len(spaces),
        "occupied_spaces": occupied,
        "available_spaces": len(spaces) - occupied,
        "total_cars": len(detections),
        "misparked_cars": sum(1 for d in detections if d.misparked)
    }
