"""
SPARK Parking Lot Analyzer
Batch run over a frame sequence: spaces, occupancy, car segmentation, 2D map and evaluation report.
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import cv2

from spark_config import Config, default_config
from spark_eval import PerformanceEvaluator, load_label_mask
from spark_recon import (
    CarSegmenter,
    OccupancyClassifier,
    Visualizer,
    label_mask,
    load_spaces,
    misparking_summary,
    save_spaces
)
from spark_spaces import ParkingSpace, SpaceDetector

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

FRAME_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.bmp')


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file or use default"""
    if config_path and Path(config_path).exists():
        return Config.from_json(config_path)
    return default_config


def read_frame(path: Path):
    frame = cv2.imread(str(path))
    if frame is None:
        raise FileNotFoundError(f"Failed to load frame: {path}")
    return frame


def initial_spaces(empty_lot, config: Config, spaces_xml: Optional[str],
                   output_dir: Path) -> List[ParkingSpace]:
    """Reference spaces from XML, or detected from the empty lot and saved for reuse"""
    if spaces_xml:
        return load_spaces(spaces_xml)

    detector = SpaceDetector(config)
    spaces = detector.detect_spaces(empty_lot)
    logger.info(f"🅿️ Detected {len(spaces)} spaces ({detector.stats})")
    save_spaces(spaces, str(output_dir / "detected_spaces.xml"))
    return spaces


class ParkingAnalyzer:
    """Processes one frame sequence against an empty-lot reference"""

    def __init__(self, config: Config, empty_lot, spaces: List[ParkingSpace]):
        self.config = config
        self.spaces = spaces
        self.occupancy = OccupancyClassifier(config.occupancy_threshold, config.diff_threshold,
                                             config.blur_size)
        self.occupancy.set_reference(empty_lot)
        self.segmenter = CarSegmenter(config.car_area_min, config.blur_size)
        height, width = empty_lot.shape[:2]
        self.visualizer = Visualizer((width, height), (config.map_width, config.map_height))
        self.evaluator = PerformanceEvaluator(config)

    def process_frame(self, frame, output_dir: Path, stem: str,
                      ground_truth_dir: Optional[Path] = None,
                      masks_dir: Optional[Path] = None) -> dict:
        """Classify, segment, draw and (when ground truth exists) score one frame"""
        # fresh copies so occupancy never leaks between frames
        spaces = [replace(space) for space in self.spaces]
        self.occupancy.process_frame(frame, spaces)
        detections = self.segmenter.detect_cars(frame, spaces)

        overlay = self.visualizer.draw_spaces(frame.copy(), spaces)
        segmentation = frame.copy()
        for detection in detections:
            self.visualizer.draw_car_segmentation(segmentation, detection.mask, detection.misparked)
        lot_map = self.visualizer.create_2d_map(spaces)

        cv2.imwrite(str(output_dir / f"{stem}_spaces.png"), overlay)
        cv2.imwrite(str(output_dir / f"{stem}_cars.png"), segmentation)
        cv2.imwrite(str(output_dir / f"{stem}_map.png"), lot_map)

        stats = misparking_summary(detections, spaces)

        if ground_truth_dir is not None:
            gt_xml = ground_truth_dir / f"{stem}.xml"
            if gt_xml.exists():
                ground_truth = load_spaces(str(gt_xml))
                gt_mask = None
                if masks_dir is not None:
                    gt_mask = load_label_mask(str(masks_dir / f"{stem}.png"))
                predicted = label_mask(detections, frame.shape) if gt_mask is not None else None
                self.evaluator.evaluate_frame(spaces, ground_truth, predicted, gt_mask)
            else:
                logger.warning(f"⚠️ No ground truth for frame {stem}")

        return stats


def run(args) -> int:
    config = load_config(args.config)
    config.print_config()

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        empty_lot = read_frame(Path(args.empty_frame))
        spaces = initial_spaces(empty_lot, config, args.spaces_xml, output_dir)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"❌ Initialization failed: {e}")
        return 1

    analyzer = ParkingAnalyzer(config, empty_lot, spaces)

    frames_dir = Path(args.frames_dir)
    frame_paths = sorted(p for p in frames_dir.iterdir() if p.suffix.lower() in FRAME_EXTENSIONS)
    if not frame_paths:
        logger.warning(f"⚠️ No frames found in {frames_dir}")

    ground_truth_dir = Path(args.ground_truth_dir) if args.ground_truth_dir else None
    masks_dir = Path(args.masks_dir) if args.masks_dir else None

    for i, frame_path in enumerate(frame_paths, 1):
        logger.info(f"Processing frame {i}/{len(frame_paths)}: {frame_path.name}")
        try:
            frame = read_frame(frame_path)
            stats = analyzer.process_frame(frame, output_dir, frame_path.stem,
                                           ground_truth_dir, masks_dir)
        except (FileNotFoundError, ValueError, cv2.error) as e:
            logger.warning(f"⚠️ Skipping frame {frame_path.name}: {e}")
            continue

        logger.info(f"   Spaces: {stats['total_spaces']}, occupied: {stats['occupied_spaces']}, "
                    f"available: {stats['available_spaces']}, misparked cars: {stats['misparked_cars']}")

    if analyzer.evaluator.history:
        try:
            analyzer.evaluator.generate_report(str(output_dir / "report.txt"))
        except OSError as e:
            logger.error(f"❌ {e}")
            return 1
        analyzer.evaluator.plot_history(str(output_dir / "metrics_history.png"))

    logger.info(f"✅ All frames processed. Results saved to {output_dir}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='SPARK - parking lot occupancy analysis')
    parser.add_argument('--empty-frame', required=True, help='Image of the empty lot')
    parser.add_argument('--frames-dir', required=True, help='Directory of frames to analyze')
    parser.add_argument('--spaces-xml', default=None,
                        help='Reference space definitions; detected from the empty frame when omitted')
    parser.add_argument('--ground-truth-dir', default=None, help='Per-frame <stem>.xml ground-truth spaces')
    parser.add_argument('--masks-dir', default=None, help='Per-frame <stem>.png ground-truth label masks')
    parser.add_argument('--config', default=None, help='JSON configuration file')
    parser.add_argument('--output-dir', default='results')
    return run(parser.parse_args(argv))


if __name__ == '__main__':
    sys.exit(main())
