# rectscan/viz/overlay.py
"""
Presentation helpers: draw detections over an image and build the summary
report shown alongside it.
"""

from __future__ import annotations
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

from rectscan.core.contracts import Detection
from rectscan.geometry.primitives import round_half_up

_FILL_ALPHA = 0.15
_CORNER_PX = 5
_HIGHLIGHT_BGR = (87, 71, 255)   # #ff4757


def detection_color(index: int) -> Tuple[int, int, int]:
    """BGR for the index-th detection: HSL hue 120 + 35*index (mod 240), s=70%, l=50%."""
    hue_deg = 120 + (index * 35) % 240
    hls = np.uint8([[[hue_deg // 2, 128, 178]]])
    b, g, r = cv2.cvtColor(hls, cv2.COLOR_HLS2BGR)[0, 0]
    return int(b), int(g), int(r)


def _draw_corners(img: np.ndarray, x0: int, y0: int, x1: int, y1: int, color, thickness: int) -> None:
    for cx, cy, sx, sy in ((x0, y0, 1, 1), (x1, y0, -1, 1), (x1, y1, -1, -1), (x0, y1, 1, -1)):
        cv2.line(img, (cx, cy), (cx + sx * _CORNER_PX, cy), color, thickness + 1, cv2.LINE_AA)
        cv2.line(img, (cx, cy), (cx, cy + sy * _CORNER_PX), color, thickness + 1, cv2.LINE_AA)


def draw_detections(image_bgr: np.ndarray, detections: Sequence[Detection],
                    highlight: Optional[int] = None) -> np.ndarray:
    """Return a copy of image_bgr with every detection outlined and labeled."""
    out = image_bgr.copy()
    if out.ndim == 2:
        out = cv2.cvtColor(out, cv2.COLOR_GRAY2BGR)

    fill = out.copy()
    for i, det in enumerate(detections):
        cv2.rectangle(fill, (det.x, det.y), (det.x + det.width, det.y + det.height),
                      detection_color(i), thickness=-1)
    out = cv2.addWeighted(fill, _FILL_ALPHA, out, 1.0 - _FILL_ALPHA, 0)

    for i, det in enumerate(detections):
        color = detection_color(i)
        thickness = max(2, int(det.confidence * 4))
        x0, y0, x1, y1 = det.x, det.y, det.x + det.width, det.y + det.height
        cv2.rectangle(out, (x0, y0), (x1, y1), color, thickness, cv2.LINE_AA)
        _draw_corners(out, x0, y0, x1, y1, color, thickness)
        label = f"{det.id} ({round_half_up(det.confidence * 100)}%)"
        cv2.putText(out, label, (x0, max(12, y0 - 6)), cv2.FONT_HERSHEY_SIMPLEX,
                    0.45, color, 1, cv2.LINE_AA)

    if highlight is not None and 0 <= highlight < len(detections):
        det = detections[highlight]
        cv2.rectangle(out, (det.x - 4, det.y - 4), (det.x + det.width + 4, det.y + det.height + 4),
                      _HIGHLIGHT_BGR, 4, cv2.LINE_AA)
        cv2.circle(out, det.center, 8, _HIGHLIGHT_BGR, -1, cv2.LINE_AA)
        cv2.putText(out, "SELECTED", (det.x + det.width // 2 - 36, max(14, det.y - 15)),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, _HIGHLIGHT_BGR, 2, cv2.LINE_AA)
    return out


def build_report(detections: Sequence[Detection], elapsed_ms: float,
                 image_size: Tuple[int, int]) -> Dict:
    """Count, timing and average area, plus every detection as a dict."""
    W, H = image_size
    count = len(detections)
    avg_area = round_half_up(sum(d.area for d in detections) / count) if count else 0
    return {
        "count": count,
        "processing_ms": round_half_up(elapsed_ms),
        "average_area": avg_area,
        "image_size": {"width": W, "height": H},
        "rectangles": [d.as_dict() for d in detections],
    }
