from __future__ import annotations
import json

import cv2
import numpy as np

from tools import visualize_detect


def _write_scene(path) -> None:
    img = np.full((150, 200, 3), 255, np.uint8)
    img[50:100, 60:140] = 0
    img[54:96, 64:136] = 255
    assert cv2.imwrite(str(path), img)


def test_cli_writes_overlay_and_report(tmp_path, capsys):
    image = tmp_path / "frame.png"
    _write_scene(image)
    report_path = tmp_path / "report.json"

    rc = visualize_detect.main([
        str(image), "--sensitivity", "75", "--min-area", "100", "--aspect-ratio", "5",
        "--out_dir", str(tmp_path / "out"), "--json", str(report_path), "--highlight", "1",
    ])
    assert rc == 0
    assert (tmp_path / "out" / "frame_viz.png").is_file()

    report = json.loads(report_path.read_text())
    assert report["count"] == 1
    assert report["image_size"] == {"width": 200, "height": 150}
    assert report["rectangles"][0]["id"] == "RECT-1"
    assert "Found 1 rectangles" in capsys.readouterr().out


def test_cli_no_detections_message(tmp_path, capsys):
    image = tmp_path / "blank.png"
    assert cv2.imwrite(str(image), np.full((60, 80, 3), 255, np.uint8))
    rc = visualize_detect.main([str(image), "--out_dir", str(tmp_path)])
    assert rc == 0
    assert "No rectangles detected" in capsys.readouterr().out


def test_cli_rejects_invalid_parameters(tmp_path, capsys):
    image = tmp_path / "frame.png"
    _write_scene(image)
    rc = visualize_detect.main([str(image), "--sensitivity", "9", "--aspect-ratio", "30",
                                "--out_dir", str(tmp_path)])
    assert rc == 2
    err = capsys.readouterr().err
    assert "invalid edgeSensitivity" in err
    assert "invalid maxAspectRatio" in err


def test_cli_missing_image(tmp_path, capsys):
    rc = visualize_detect.main([str(tmp_path / "nope.png"), "--out_dir", str(tmp_path)])
    assert rc == 1
    assert "Could not load image" in capsys.readouterr().err
