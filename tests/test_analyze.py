import cv2
import numpy as np
from PIL import Image

from analyze import main
from conftest import make_space
from spark_recon import load_spaces, save_spaces


def write_sequence(root, spaces):
    empty = np.zeros((200, 200, 3), dtype=np.uint8)
    cv2.imwrite(str(root / "empty.png"), empty)

    frames = root / "frames"
    truth = root / "truth"
    masks = root / "masks"
    for directory in (frames, truth, masks):
        directory.mkdir()

    for i in range(2):
        frame = empty.copy()
        if i == 1:
            frame[40:170, 20:80] = 255
        cv2.imwrite(str(frames / f"frame_{i}.png"), frame)
        save_spaces(spaces, str(truth / f"frame_{i}.xml"))
        Image.fromarray(np.zeros((200, 200), dtype=np.uint8)).save(masks / f"frame_{i}.png")

    return frames, truth, masks


def test_sequence_with_reference_spaces(tmp_path):
    spaces = [make_space(1, 50, 100, 40, 80), make_space(2, 150, 100, 40, 80)]
    spaces_xml = tmp_path / "spaces.xml"
    save_spaces(spaces, str(spaces_xml))
    frames, truth, masks = write_sequence(tmp_path, spaces)
    output = tmp_path / "out"

    code = main([
        "--empty-frame", str(tmp_path / "empty.png"),
        "--frames-dir", str(frames),
        "--spaces-xml", str(spaces_xml),
        "--ground-truth-dir", str(truth),
        "--masks-dir", str(masks),
        "--output-dir", str(output),
    ])

    assert code == 0
    report = (output / "report.txt").read_text()
    assert "Frame 2:" in report
    assert "Average mAP: 1" in report
    assert "Total False Negatives: 0" in report
    assert (output / "metrics_history.png").exists()
    assert (output / "frame_1_map.png").exists()


def test_missing_mask_skips_frame(tmp_path):
    spaces = [make_space(1, 50, 100, 40, 80)]
    spaces_xml = tmp_path / "spaces.xml"
    save_spaces(spaces, str(spaces_xml))
    frames, truth, masks = write_sequence(tmp_path, spaces)
    (masks / "frame_0.png").unlink()
    output = tmp_path / "out"

    code = main([
        "--empty-frame", str(tmp_path / "empty.png"),
        "--frames-dir", str(frames),
        "--spaces-xml", str(spaces_xml),
        "--ground-truth-dir", str(truth),
        "--masks-dir", str(masks),
        "--output-dir", str(output),
    ])

    assert code == 0
    report = (output / "report.txt").read_text()
    assert "Frame 1:" in report
    assert "Frame 2:" not in report


def test_spaces_detected_when_no_reference(tmp_path):
    frames, _, _ = write_sequence(tmp_path, [])
    output = tmp_path / "out"

    code = main([
        "--empty-frame", str(tmp_path / "empty.png"),
        "--frames-dir", str(frames),
        "--output-dir", str(output),
    ])

    assert code == 0
    assert load_spaces(str(output / "detected_spaces.xml")) == []
    assert not (output / "report.txt").exists()


def test_missing_empty_frame(tmp_path):
    (tmp_path / "frames").mkdir()
    code = main([
        "--empty-frame", str(tmp_path / "absent.png"),
        "--frames-dir", str(tmp_path / "frames"),
        "--output-dir", str(tmp_path / "out"),
    ])
    assert code == 1


def test_mismatched_frame_size_is_skipped(tmp_path):
    spaces = [make_space(1, 50, 100, 40, 80)]
    spaces_xml = tmp_path / "spaces.xml"
    save_spaces(spaces, str(spaces_xml))
    cv2.imwrite(str(tmp_path / "empty.png"), np.zeros((200, 200, 3), dtype=np.uint8))

    frames = tmp_path / "frames"
    truth = tmp_path / "truth"
    frames.mkdir()
    truth.mkdir()
    cv2.imwrite(str(frames / "a.png"), np.zeros((150, 150, 3), dtype=np.uint8))
    cv2.imwrite(str(frames / "b.png"), np.zeros((200, 200, 3), dtype=np.uint8))
    for stem in ("a", "b"):
        save_spaces(spaces, str(truth / f"{stem}.xml"))
    output = tmp_path / "out"

    code = main([
        "--empty-frame", str(tmp_path / "empty.png"),
        "--frames-dir", str(frames),
        "--spaces-xml", str(spaces_xml),
        "--ground-truth-dir", str(truth),
        "--output-dir", str(output),
    ])

    assert code == 0
    assert not (output / "a_map.png").exists()
    assert (output / "b_map.png").exists()
    report = (output / "report.txt").read_text()
    assert "Frame 1:" in report
    assert "Frame 2:" not in report
