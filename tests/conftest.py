"""
Shared fixtures: synthetic depth maps standing in for TrueDepth captures.
"""

import numpy as np
import pytest

from depthguard.structures import DepthBuffer, FaceRegion, Rect, SampleEncoding, Size

# 41x41 depth map, image twice as large so every scale factor is exact
DEPTH_SIDE = 41
IMAGE_SIZE = Size(82, 82)


def tent(n: int) -> np.ndarray:
    """0 at both ends, 1 in the middle, steps of 2/(n-1)."""
    x = np.arange(n, dtype=np.float64)
    return 1.0 - np.abs(2.0 * x / (n - 1) - 1.0)


def nose_bump(side: int = DEPTH_SIDE, far: float = 0.6, relief: float = 0.15) -> np.ndarray:
    """
    Pyramid-shaped face: ``far`` meters at the border, ``far - 2 * relief``
    at the tip. Every row-major step (row wrap included) changes the value
    by ``relief * 2 / (side - 1)``.
    """
    t = tent(side)
    return far - relief * (t[np.newaxis, :] + t[:, np.newaxis])


@pytest.fixture
def full_face() -> FaceRegion:
    """A face filling the whole frame."""
    return FaceRegion(Rect(0.0, 0.0, 1.0, 1.0))


@pytest.fixture
def bump_buffer() -> DepthBuffer:
    return DepthBuffer.from_array(nose_bump(), SampleEncoding.DEPTH_F32)


@pytest.fixture
def flat_buffer() -> DepthBuffer:
    """A photo held up to the camera: one constant distance."""
    return DepthBuffer.from_array(np.full((DEPTH_SIDE, DEPTH_SIDE), 0.5), SampleEncoding.DEPTH_F32)
