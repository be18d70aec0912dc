"""
Error types surfaced by the detection pipeline.
"""

from __future__ import annotations
from typing import Dict


class RectScanError(Exception):
    """Base class for every error raised by rectscan."""


class InvalidParameters(RectScanError):
    """
    One or more detection parameters are outside their domain.

    reasons maps the offending field name to a human-readable message,
    one entry per violated field.
    """

    def __init__(self, reasons: Dict[str, str]):
        self.reasons = dict(reasons)
        detail = "; ".join(f"{k}: {v}" for k, v in self.reasons.items())
        super().__init__(f"invalid detection parameters ({detail})")


class ProcessingFailure(RectScanError):
    """
    Unexpected fault inside a pipeline stage (malformed buffer, bad arithmetic).
    Callers treat it as zero detections.
    """
