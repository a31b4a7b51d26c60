"""
Debug heatmap: the face region of the depth map rendered as a
blue (low value) -> green/yellow -> red (high value) JPEG, base64 encoded.
"""

import base64
import logging
import math
from typing import Optional

import cv2
import numpy as np

from .errors import InvalidGeometry
from .sampler import PixelRegion
from .structures import DepthBuffer, Rect

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 80

# Band edges of the color ramp
_LOW_BAND = 0.33
_HIGH_BAND = 0.66


def colorize(normalized: np.ndarray) -> np.ndarray:
    """Map values in [0, 1] to an RGB uint8 image with the three-band ramp."""
    n = np.clip(np.nan_to_num(normalized.astype(np.float64)), 0.0, 1.0)
    rgb = np.zeros(n.shape + (3,), dtype=np.float64)

    low = n < _LOW_BAND
    mid = (n >= _LOW_BAND) & (n < _HIGH_BAND)
    high = n >= _HIGH_BAND

    t = n[low] / _LOW_BAND
    rgb[low] = np.stack([255 * (1 - t), np.zeros_like(t), np.full_like(t, 255)], axis=-1)

    t = (n[mid] - _LOW_BAND) / (_HIGH_BAND - _LOW_BAND)
    rgb[mid] = np.stack([255 * t, 255 * t, 255 * (1 - t)], axis=-1)

    t = (n[high] - _HIGH_BAND) / (1.0 - _HIGH_BAND)
    rgb[high] = np.stack([np.full_like(t, 255), 255 * (1 - t), np.zeros_like(t)], axis=-1)

    return np.clip(rgb, 0, 255).astype(np.uint8)


def heatmap_region(face_rect: Rect, depth_width: int, depth_height: int) -> PixelRegion:
    """
    Pixel box drawn by the heatmap. Unlike the sampler, the far edge is
    truncated after adding the size: ``int(x + width)``.
    """
    end_x = face_rect.x + face_rect.width
    end_y = face_rect.y + face_rect.height
    if not all(math.isfinite(v) for v in (face_rect.x, face_rect.y, end_x, end_y)):
        raise InvalidGeometry(f"Face rect is not finite: {face_rect}")
    return PixelRegion(
        start_x=max(0, int(face_rect.x)),
        start_y=max(0, int(face_rect.y)),
        end_x=min(int(end_x), depth_width),
        end_y=min(int(end_y), depth_height),
    )


def normalize_region(patch: np.ndarray) -> Optional[np.ndarray]:
    """
    Scale the positive samples of ``patch`` to [0, 1] by their own min/max.
    Non-positive and NaN samples map to 0. Returns None without positive samples.
    """
    positive = patch > 0
    if not positive.any():
        return None
    lo = float(patch[positive].min())
    hi = float(patch[positive].max())
    span = hi - lo
    if span <= 0:
        return np.zeros(patch.shape, dtype=np.float64)
    normalized = np.where(positive, (patch.astype(np.float64) - lo) / span, 0.0)
    return np.clip(normalized, 0.0, 1.0)


def render(buffer: DepthBuffer, face_rect: Rect, quality: int = DEFAULT_JPEG_QUALITY) -> Optional[str]:
    """Base64 JPEG of the face region (depth pixels), or None if nothing is worth drawing."""
    region = heatmap_region(face_rect, buffer.width, buffer.height)
    if region.is_empty:
        return None

    depth = buffer.as_array()
    patch = depth[region.start_y:region.end_y, region.start_x:region.end_x]
    normalized = normalize_region(patch)
    if normalized is None:
        logger.debug(f"No positive depth samples in {region}, skipping heatmap")
        return None

    bgr = cv2.cvtColor(colorize(normalized), cv2.COLOR_RGB2BGR)
    ok, encoded = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok:
        logger.warning("JPEG encoding of the depth heatmap failed")
        return None
    return base64.b64encode(encoded.tobytes()).decode("ascii")
