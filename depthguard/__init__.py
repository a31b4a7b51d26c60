"""
TrueDepth anti-spoofing analysis: decides whether a detected face is a real
3-D face or a flat presentation (printed photo, screen replay) from the
depth/disparity map captured with the photo.
"""

from .anti_spoofing import AntiSpoofingVerdict, DepthAntiSpoofingProcessor, VerdictStatus
from .errors import (
    DepthAnalysisError,
    EmptyRegion,
    InvalidGeometry,
    NoValidSamples,
    UnsupportedEncoding,
)
from .metrics import DepthMetrics
from .structures import DepthBuffer, FaceRegion, Point, Rect, SampleEncoding, Size

__all__ = [
    "AntiSpoofingVerdict",
    "DepthAntiSpoofingProcessor",
    "VerdictStatus",
    "DepthAnalysisError",
    "EmptyRegion",
    "InvalidGeometry",
    "NoValidSamples",
    "UnsupportedEncoding",
    "DepthMetrics",
    "DepthBuffer",
    "FaceRegion",
    "Point",
    "Rect",
    "SampleEncoding",
    "Size",
]

__version__ = "0.1.0"
