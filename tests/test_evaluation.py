import numpy as np
import pytest
from PIL import Image

from conftest import make_space
from spark_config import Config
from spark_eval import (
    Metrics,
    PerformanceEvaluator,
    compute_pixel_iou,
    compute_rect_iou,
    evaluate_segmentation,
    evaluate_space_detection,
    format_report,
    generate_report,
    load_label_mask,
    summarize,
)
from spark_spaces import OrientedRect


# Rectangle IoU

def test_identical_rects_iou_is_one():
    rect = OrientedRect((200.0, 200.0), (50.0, 100.0), 30.0)
    assert compute_rect_iou(rect, rect) == pytest.approx(1.0)


def test_identical_rects_past_canvas_edge_iou_is_one():
    rect = OrientedRect((1500.0, 500.0), (50.0, 100.0), 20.0)
    assert compute_rect_iou(rect, rect) == pytest.approx(1.0)


def test_rect_iou_does_not_depend_on_position():
    a = OrientedRect((100.0, 100.0), (50.0, 100.0), 0.0)
    b = OrientedRect((120.0, 110.0), (60.0, 90.0), 15.0)
    shifted_a = OrientedRect((1300.0, 1100.0), (50.0, 100.0), 0.0)
    shifted_b = OrientedRect((1320.0, 1110.0), (60.0, 90.0), 15.0)
    assert compute_rect_iou(shifted_a, shifted_b) == pytest.approx(compute_rect_iou(a, b))


def test_wide_frame_spaces_all_match():
    ground_truth = [make_space(i + 1, x, 300) for i, x in enumerate((200, 600, 1100, 1200))]
    metrics = evaluate_space_detection(ground_truth, ground_truth)
    assert metrics.correct_detections == 4
    assert metrics.false_positives == 0
    assert metrics.false_negatives == 0
    assert metrics.mAP == pytest.approx(1.0)


def test_disjoint_rects_iou_is_zero():
    a = OrientedRect((100.0, 100.0), (50.0, 100.0), 0.0)
    b = OrientedRect((400.0, 400.0), (50.0, 100.0), 0.0)
    assert compute_rect_iou(a, b) == 0.0


def test_rect_iou_is_symmetric():
    a = OrientedRect((100.0, 100.0), (50.0, 100.0), 0.0)
    b = OrientedRect((120.0, 110.0), (60.0, 90.0), 15.0)
    assert compute_rect_iou(a, b) == pytest.approx(compute_rect_iou(b, a))
    assert 0.0 < compute_rect_iou(a, b) < 1.0


def test_zero_area_rect_iou_is_zero():
    flat = OrientedRect((100.0, 100.0), (0.0, 50.0), 0.0)
    assert compute_rect_iou(flat, flat) == 0.0


def test_pixel_iou_of_empty_masks_is_zero():
    empty = np.zeros((10, 10), dtype=np.uint8)
    assert compute_pixel_iou(empty, empty) == 0.0


# Space matching

def test_shifted_detections_all_match(ground_truth_spaces):
    detected = [make_space(s.id, s.rect.center[0] + 1, s.rect.center[1]) for s in ground_truth_spaces]
    metrics = evaluate_space_detection(detected, ground_truth_spaces)

    assert metrics.correct_detections == 3
    assert metrics.false_positives == 0
    assert metrics.false_negatives == 0
    assert metrics.mAP == pytest.approx(1.0)


def test_no_detections(ground_truth_spaces):
    metrics = evaluate_space_detection([], ground_truth_spaces)
    assert metrics.mAP == 0.0
    assert metrics.correct_detections == 0
    assert metrics.false_positives == 0
    assert metrics.false_negatives == len(ground_truth_spaces)
    assert metrics.total_spaces == 3


def test_no_ground_truth():
    metrics = evaluate_space_detection([make_space(1, 100, 100)], [])
    assert metrics.correct_detections == 0
    assert metrics.false_positives == 1
    assert metrics.mAP == 0.0


def test_low_overlap_is_not_a_match(ground_truth_spaces):
    detected = [make_space(1, 130, 100)]
    metrics = evaluate_space_detection(detected, ground_truth_spaces)
    assert metrics.correct_detections == 0
    assert metrics.false_positives == 1
    assert metrics.false_negatives == 3


def test_ground_truth_is_matched_once():
    ground_truth = [make_space(1, 100, 100)]
    detected = [make_space(1, 100, 100), make_space(2, 101, 100)]
    metrics = evaluate_space_detection(detected, ground_truth)
    assert metrics.correct_detections == 1
    assert metrics.false_positives == 1
    assert metrics.mAP == pytest.approx(0.5)


def test_greedy_matching_depends_on_detection_order():
    ground_truth = [make_space(1, 100, 100), make_space(2, 120, 100)]
    first = make_space(1, 115, 100)   # overlaps both, best with the second
    second = make_space(2, 130, 100)  # overlaps only the second enough

    in_order = evaluate_space_detection([first, second], ground_truth)
    reversed_order = evaluate_space_detection([second, first], ground_truth)

    assert in_order.correct_detections == 1
    assert reversed_order.correct_detections == 2


@pytest.mark.parametrize("offsets", [[], [0], [0, 1, 300], [1, 2, 3, 150, 400]])
def test_counts_are_consistent(ground_truth_spaces, offsets):
    detected = [make_space(i, 100 + dx, 100) for i, dx in enumerate(offsets)]
    metrics = evaluate_space_detection(detected, ground_truth_spaces)

    assert metrics.correct_detections + metrics.false_positives == len(detected)
    assert metrics.correct_detections + metrics.false_negatives == len(ground_truth_spaces)
    assert metrics.detected_count == len(detected)


# Pixel mask matching

def test_identical_masks_score_one_per_present_class():
    mask = np.zeros((50, 50), dtype=np.uint8)
    mask[5:15, 5:15] = 1
    mask[30:40, 30:40] = 2

    metrics = evaluate_segmentation(mask, mask.copy())
    assert metrics.class_ious == {0: pytest.approx(1.0), 1: pytest.approx(1.0), 2: pytest.approx(1.0)}
    assert metrics.mIoU == pytest.approx(1.0)


def test_only_background_overlaps():
    predicted = np.zeros((100, 100), dtype=np.uint8)
    predicted[10:30, 10:30] = 1
    reference = np.zeros((100, 100), dtype=np.uint8)
    reference[60:80, 60:80] = 1

    metrics = evaluate_segmentation(predicted, reference)
    assert metrics.class_ious[0] == pytest.approx(9200 / 10000)
    assert metrics.class_ious[1] == 0.0
    assert metrics.class_ious[2] == 0.0
    assert metrics.mIoU == pytest.approx(0.92 / 3)


def test_mask_shapes_must_match():
    with pytest.raises(ValueError):
        evaluate_segmentation(np.zeros((10, 10)), np.zeros((10, 12)))


# Evaluator and report

def test_evaluator_combines_space_and_mask_scores(ground_truth_spaces):
    evaluator = PerformanceEvaluator(Config())
    mask = np.zeros((40, 40), dtype=np.uint8)
    mask[:10, :10] = 1

    metrics = evaluator.evaluate_frame(ground_truth_spaces, ground_truth_spaces, mask, mask)

    assert metrics.mAP == pytest.approx(1.0)
    assert metrics.mIoU == pytest.approx(2 / 3)
    assert evaluator.history == [metrics]


def test_evaluator_without_masks_leaves_miou_zero(ground_truth_spaces):
    evaluator = PerformanceEvaluator()
    metrics = evaluator.evaluate_frame([], ground_truth_spaces)
    assert metrics.mIoU == 0.0
    assert evaluator.summary()["total_false_negatives"] == 3


def test_summary_of_empty_sequence():
    summary = summarize([])
    assert summary["avg_mAP"] == 0.0
    assert summary["avg_mIoU"] == 0.0
    assert summary["total_correct_detections"] == 0


def test_report_text(tmp_path):
    sequence = [
        Metrics(mAP=1.0, mIoU=0.5, total_spaces=3, correct_detections=3),
        Metrics(mAP=0.5, mIoU=0.25, total_spaces=3, correct_detections=1,
                false_positives=1, false_negatives=2),
    ]
    path = tmp_path / "report.txt"
    generate_report(str(path), sequence)
    text = path.read_text()

    assert text == format_report(sequence)
    assert text.startswith("Parking Lot Analysis Report\n")
    assert "Frame 1:" in text and "Frame 2:" in text
    assert "    mIoU: 0.25" in text
    assert "Average mAP: 0.75" in text
    assert "Average mIoU: 0.375" in text
    assert "Total Correct Detections: 4" in text
    assert "Total False Positives: 1" in text
    assert "Total False Negatives: 2" in text


def test_report_destination_failure(tmp_path):
    with pytest.raises(OSError, match="Failed to open report file"):
        generate_report(str(tmp_path / "missing" / "report.txt"), [Metrics()])


def test_metrics_plot_is_written(tmp_path):
    evaluator = PerformanceEvaluator()
    evaluator.history = [Metrics(mAP=1.0, mIoU=0.4), Metrics(mAP=0.5, mIoU=0.6)]
    path = tmp_path / "history.png"
    evaluator.plot_history(str(path))
    assert path.exists()


def test_load_label_mask(tmp_path):
    mask = np.zeros((20, 30), dtype=np.uint8)
    mask[2:8, 3:9] = 2
    path = tmp_path / "frame.png"
    Image.fromarray(mask).save(path)

    loaded = load_label_mask(str(path))
    assert loaded.shape == (20, 30)
    assert np.array_equal(loaded, mask)


def test_missing_label_mask(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_label_mask(str(tmp_path / "nope.png"))
