"""
Evaluation report
Plain-text per-frame breakdown with summary statistics, plus a metrics plot.
"""

import logging
from typing import Dict, Sequence

import matplotlib.pyplot as plt

from ._matching import Metrics

logger = logging.getLogger(__name__)


def summarize(sequence_metrics: Sequence[Metrics]) -> Dict:
    """
    Aggregate a sequence of per-frame metrics

    Returns:
        Dict with average mAP / mIoU and total correct / FP / FN counts
    """
    count = len(sequence_metrics)
    return {
        "frames": count,
        "avg_mAP": sum(m.mAP for m in sequence_metrics) / count if count else 0.0,
        "avg_mIoU": sum(m.mIoU for m in sequence_metrics) / count if count else 0.0,
        "total_correct_detections": sum(m.correct_detections for m in sequence_metrics),
        "total_false_positives": sum(m.false_positives for m in sequence_metrics),
        "total_false_negatives": sum(m.false_negatives for m in sequence_metrics)
    }


def format_report(sequence_metrics: Sequence[Metrics]) -> str:
    """Render the report text"""
    lines = [
        "Parking Lot Analysis Report",
        "==========================",
        ""
    ]

    for i, metrics in enumerate(sequence_metrics, 1):
        lines += [
            f"Frame {i}:",
            "  Space Detection:",
            f"    mAP: {metrics.mAP:g}",
            f"    Correct Detections: {metrics.correct_detections}",
            f"    False Positives: {metrics.false_positives}",
            f"    False Negatives: {metrics.false_negatives}",
            "  Segmentation:",
            f"    mIoU: {metrics.mIoU:g}",
            ""
        ]

    summary = summarize(sequence_metrics)
    lines += [
        "",
        "Summary Statistics",
        "=================",
        f"Average mAP: {summary['avg_mAP']:g}",
        f"Average mIoU: {summary['avg_mIoU']:g}",
        f"Total Correct Detections: {summary['total_correct_detections']}",
        f"Total False Positives: {summary['total_false_positives']}",
        f"Total False Negatives: {summary['total_false_negatives']}"
    ]
    return "\n".join(lines) + "\n"


def generate_report(output_path: str, sequence_metrics: Sequence[Metrics]) -> None:
    """
    Write the plain-text report

    Args:
        output_path: Destination file (its directory must exist)
        sequence_metrics: Per-frame metrics in frame order

    Raises:
        OSError: The destination cannot be opened for writing
    """
    try:
        report = open(output_path, 'w')
    except OSError as e:
        logger.error(f"❌ Failed to open report file {output_path}: {e}")
        raise OSError(f"Failed to open report file: {output_path}") from e

    with report:
        report.write(format_report(sequence_metrics))

    logger.info(f"✅ Report for {len(sequence_metrics)} frames written to {output_path}")


def plot_metrics_history(sequence_metrics: Sequence[Metrics], output_path: str) -> None:
    """Plot per-frame mAP and mIoU, plus detection counts"""
    if not sequence_metrics:
        return

    frames = range(1, len(sequence_metrics) + 1)
    fig, axes = plt.subplots(1, 2, figsize=(15, 5))

    axes[0].plot(frames, [m.mAP for m in sequence_metrics], 'b-', label='mAP')
    axes[0].plot(frames, [m.mIoU for m in sequence_metrics], 'r-', label='mIoU')
    axes[0].set_title('Accuracy per Frame')
    axes[0].set_xlabel('Frame')
    axes[0].set_ylim(0, 1.05)
    axes[0].legend()
    axes[0].grid(True)

    axes[1].plot(frames, [m.correct_detections for m in sequence_metrics], 'g-', label='Correct')
    axes[1].plot(frames, [m.false_positives for m in sequence_metrics], 'm-', label='False Positives')
    axes[1].plot(frames, [m.false_negatives for m in sequence_metrics], 'k-', label='False Negatives')
    axes[1].set_title('Detections per Frame')
    axes[1].set_xlabel('Frame')
    axes[1].legend()
    axes[1].grid(True)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"✓ Metrics plot saved: {output_path}")
