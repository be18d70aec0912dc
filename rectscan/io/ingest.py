# rectscan/io/ingest.py
"""
Image source helpers: check an image file and decode it to the RGBA buffer the
detector consumes. The detector itself never touches the filesystem.
"""

from __future__ import annotations
from pathlib import Path
from typing import Tuple, Union
import os

import cv2
import numpy as np

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"}
MAX_FILE_BYTES = 10 * 1024 * 1024


def validate_image_file(path: Union[str, Path]) -> None:
    """
    Raise FileNotFoundError if the file is missing, ValueError if its extension
    is not a supported image type or it is larger than MAX_FILE_BYTES.
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"No image file at: {path}")
    if p.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise ValueError(f"Unsupported image type {p.suffix or '(none)'!r}; "
                         f"expected one of {sorted(ALLOWED_EXTENSIONS)}")
    size = os.path.getsize(p)
    if size > MAX_FILE_BYTES:
        raise ValueError(f"Image file is {size} bytes; limit is {MAX_FILE_BYTES}")


def to_rgba(img: np.ndarray) -> np.ndarray:
    """Gray, BGR or BGRA (as OpenCV decodes them) -> RGBA uint8."""
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)


def load_rgba(path: Union[str, Path]) -> Tuple[np.ndarray, int, int]:
    """
    Decode an image file to (rgba (H, W, 4) uint8, width, height).
    Raises FileNotFoundError if the file cannot be read as an image.
    """
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Could not read image at: {path}")
    if img.dtype != np.uint8:
        # 16-bit PNG/TIFF: keep the high byte
        img = (img >> 8).astype(np.uint8) if img.dtype == np.uint16 else img.astype(np.uint8)
    rgba = to_rgba(img)
    H, W = rgba.shape[:2]
    return rgba, W, H
