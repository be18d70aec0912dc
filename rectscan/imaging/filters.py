# rectscan/imaging/filters.py
"""
Pixel stages of the pipeline: RGBA -> luminance -> smoothed -> binary edge mask.

Every function returns a fresh array of the input's height x width; inputs are
never modified.
"""

from __future__ import annotations
import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights (R, G, B); alpha is ignored.
_LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float64)

EDGE_ON = 255
EDGE_OFF = 0


def _round_half_up(a: np.ndarray) -> np.ndarray:
    return np.floor(a + 0.5)


def to_grayscale(rgba: np.ndarray) -> np.ndarray:
    """(H, W, 4) uint8 RGBA -> (H, W) uint8 luminance."""
    rgba = np.asarray(rgba)
    if rgba.ndim != 3 or rgba.shape[2] < 3:
        raise ValueError(f"expected (H, W, 4) RGBA array, got shape {rgba.shape}")
    rgb = rgba[:, :, :3].astype(np.float64)
    lum = _LUMA[0] * rgb[:, :, 0] + _LUMA[1] * rgb[:, :, 1] + _LUMA[2] * rgb[:, :, 2]
    return np.clip(_round_half_up(lum), 0, 255).astype(np.uint8)


def gaussian_kernel(radius: int) -> np.ndarray:
    """Normalized 1-D kernel of size 2*radius+1 with sigma = radius/3."""
    if radius < 0:
        raise ValueError(f"blur radius must be >= 0, got {radius}")
    if radius == 0:
        return np.ones(1, dtype=np.float64)
    sigma = radius / 3.0
    xs = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(xs * xs) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_blur(gray: np.ndarray, radius: int = 1) -> np.ndarray:
    """
    Blur the interior [radius, dim - radius) with the outer product of the 1-D
    kernel. The border band of width `radius` is copied from the source as-is.
    """
    gray = np.asarray(gray)
    out = gray.copy()
    H, W = gray.shape[:2]
    r = int(radius)
    if r == 0 or H <= 2 * r or W <= 2 * r:
        return out

    kernel = gaussian_kernel(r)
    size = kernel.size
    ih, iw = H - 2 * r, W - 2 * r
    src = gray.astype(np.float64)
    acc = np.zeros((ih, iw), dtype=np.float64)
    weight_sum = 0.0
    for ky in range(size):
        for kx in range(size):
            w = kernel[ky] * kernel[kx]
            acc += src[ky:ky + ih, kx:kx + iw] * w
            weight_sum += w

    out[r:H - r, r:W - r] = np.clip(_round_half_up(acc / weight_sum), 0, 255).astype(gray.dtype)
    return out


def _threshold_interior(magnitude: np.ndarray, shape, threshold: float) -> np.ndarray:
    edges = np.zeros(shape, dtype=np.uint8)
    edges[1:-1, 1:-1] = np.where(magnitude > threshold, EDGE_ON, EDGE_OFF)
    return edges


def central_difference_edges(gray: np.ndarray, threshold: float) -> np.ndarray:
    """
    gx = I(x+1, y) - I(x-1, y), gy = I(x, y+1) - I(x, y-1); 255 where
    sqrt(gx^2 + gy^2) > threshold. The 1-pixel border ring stays 0.
    """
    gray = np.asarray(gray)
    H, W = gray.shape[:2]
    if H < 3 or W < 3:
        return np.zeros((H, W), dtype=np.uint8)
    g = gray.astype(np.int32)
    gx = g[1:-1, 2:] - g[1:-1, :-2]
    gy = g[2:, 1:-1] - g[:-2, 1:-1]
    mag = np.sqrt((gx * gx + gy * gy).astype(np.float64))
    return _threshold_interior(mag, (H, W), threshold)


def sobel_edges(gray: np.ndarray, threshold: float) -> np.ndarray:
    """3x3 Sobel magnitude thresholded the same way; border ring stays 0."""
    gray = np.asarray(gray)
    H, W = gray.shape[:2]
    if H < 3 or W < 3:
        return np.zeros((H, W), dtype=np.uint8)
    g = gray.astype(np.float64)
    gx = cv2.Sobel(g, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(g, cv2.CV_64F, 0, 1, ksize=3)
    mag = cv2.magnitude(gx, gy)
    return _threshold_interior(mag[1:-1, 1:-1], (H, W), threshold)


_EDGE_METHODS = {
    "central": central_difference_edges,
    "sobel": sobel_edges,
}


def extract_edges(gray: np.ndarray, threshold: float, method: str = "central") -> np.ndarray:
    try:
        fn = _EDGE_METHODS[method]
    except KeyError:
        raise ValueError(f"unknown edge method {method!r}; expected one of {sorted(_EDGE_METHODS)}") from None
    edges = fn(gray, threshold)
    if logger.isEnabledFor(logging.DEBUG):
        on = int(np.count_nonzero(edges))
        logger.debug("[edges] method=%s threshold=%s on=%d (%.2f%%)", method, threshold, on,
                     100.0 * on / max(1, edges.size))
    return edges
