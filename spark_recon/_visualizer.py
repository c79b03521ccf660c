"""
Visualization
Overlays spaces and car masks on frames and renders a 2D top-view map of the lot.
"""

import logging
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from spark_spaces import ParkingSpace

logger = logging.getLogger(__name__)

# BGR
EMPTY_SPACE = (255, 0, 0)
OCCUPIED_SPACE = (0, 0, 255)
CAR_CORRECT = (0, 255, 0)
CAR_MISPARKED = (0, 255, 255)


class Visualizer:
    """Draws lot state for a fixed frame size"""

    def __init__(self, frame_size: Tuple[int, int], map_size: Tuple[int, int] = (400, 300)):
        """
        Args:
            frame_size: (width, height) of camera frames
            map_size: (width, height) of the top-view map
        """
        self.frame_size = frame_size
        self.map_size = map_size
        self.homography: Optional[np.ndarray] = None

    def draw_spaces(self, frame: np.ndarray, spaces: Sequence[ParkingSpace]) -> np.ndarray:
        """Outline each space (blue empty, red occupied) with its id, in place"""
        for space in spaces:
            vertices = space.rect.int_points()
            color = OCCUPIED_SPACE if space.occupied else EMPTY_SPACE

            cv2.polylines(frame, [vertices], True, color, 2)
            cv2.putText(frame, str(space.id),
                        (int(vertices[0][0]), int(vertices[0][1]) - 10),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 2)
        return frame

    @staticmethod
    def draw_car_segmentation(frame: np.ndarray, car_mask: np.ndarray, misparked: bool) -> np.ndarray:
        """Blend a translucent car color (yellow misparked, green parked) into frame in place"""
        overlay = frame.copy()
        color = CAR_MISPARKED if misparked else CAR_CORRECT
        overlay[car_mask != 0] = color
        cv2.addWeighted(overlay, 0.3, frame, 0.7, 0, dst=frame)
        return frame

    def _scale_matrix(self) -> np.ndarray:
        frame_w, frame_h = self.frame_size
        map_w, map_h = self.map_size
        return np.array([[map_w / frame_w, 0, 0],
                         [0, map_h / frame_h, 0],
                         [0, 0, 1]], dtype=np.float64)

    def initialize_homography(self, spaces: Sequence[ParkingSpace]) -> np.ndarray:
        """
        Fit the frame-to-map homography

        Two opposite rectangle corners per space are mapped to a 20x20 box
        around the space center scaled into map coordinates. Falls back to
        plain scaling when there are too few points or the fit fails.
        """
        frame_w, frame_h = self.frame_size
        map_w, map_h = self.map_size

        src_points = []
        dst_points = []
        for space in spaces:
            vertices = space.rect.points()
            src_points += [vertices[0], vertices[2]]

            x = space.rect.center[0] / frame_w * map_w
            y = space.rect.center[1] / frame_h * map_h
            dst_points += [(x - 10, y - 10), (x + 10, y + 10)]

        homography = None
        if len(src_points) >= 4:
            homography, _ = cv2.findHomography(np.asarray(src_points, dtype=np.float32),
                                               np.asarray(dst_points, dtype=np.float32))
        if homography is None:
            logger.debug("Homography fit unavailable, using frame-to-map scaling")
            homography = self._scale_matrix()

        self.homography = homography
        return homography

    def transform_point(self, point: Tuple[float, float]) -> Tuple[float, float]:
        pts = np.asarray([[point]], dtype=np.float32)
        transformed = cv2.perspectiveTransform(pts, self.homography)
        return float(transformed[0][0][0]), float(transformed[0][0][1])

    def draw_space_2d(self, lot_map: np.ndarray, space: ParkingSpace) -> None:
        x, y = self.transform_point(space.rect.center)
        color = OCCUPIED_SPACE if space.occupied else EMPTY_SPACE

        cv2.rectangle(lot_map, (int(x) - 10, int(y) - 10), (int(x) + 10, int(y) + 10), color, -1)
        cv2.putText(lot_map, str(space.id), (int(x) - 5, int(y) + 5),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.3, (255, 255, 255), 1)

    def create_2d_map(self, spaces: Sequence[ParkingSpace]) -> np.ndarray:
        """Top-view map with one filled square per space"""
        if self.homography is None:
            self.initialize_homography(spaces)

        map_w, map_h = self.map_size
        lot_map = np.zeros((map_h, map_w, 3), dtype=np.uint8)
        for space in spaces:
            self.draw_space_2d(lot_map, space)
        return lot_map
