"""
Depth sampler: walks the depth buffer inside the mapped face rectangle,
keeps the samples that fall in the sensor's valid range and tags each one
as nose-proximal ("center") or not ("edge").
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import EmptyRegion, InvalidGeometry
from .structures import DepthBuffer, Point, Rect

logger = logging.getLogger(__name__)

# Exclusive upper bounds of a plausible sample, per encoding
DISPARITY_MAX = 5.0   # 1/m
DEPTH_MAX = 10.0      # m

# Geometric fallback trims this fraction of the face from every side
CENTER_MARGIN = 0.2
# Half-extent of the nose box, as a fraction of the face size
NOSE_RADIUS = 0.2


@dataclass(frozen=True)
class PixelRegion:
    """Half-open integer pixel box [start_x, end_x) x [start_y, end_y)."""
    start_x: int
    start_y: int
    end_x: int
    end_y: int

    @property
    def width(self) -> int:
        return max(0, self.end_x - self.start_x)

    @property
    def height(self) -> int:
        return max(0, self.end_y - self.start_y)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.pixel_count == 0


@dataclass(frozen=True)
class SampleSet:
    """Valid samples of one face scan, in row-major scan order."""
    values: np.ndarray
    is_center: np.ndarray
    total_pixels: int
    region: PixelRegion

    @property
    def valid_count(self) -> int:
        return int(self.values.size)

    @property
    def center_values(self) -> np.ndarray:
        return self.values[self.is_center]

    @property
    def edge_values(self) -> np.ndarray:
        return self.values[~self.is_center]


def clamp_region(face_rect: Rect, depth_width: int, depth_height: int) -> PixelRegion:
    """Truncate the face rect to whole pixels and clip it to the buffer bounds."""
    if not all(math.isfinite(v) for v in (face_rect.x, face_rect.y, face_rect.width, face_rect.height)):
        raise InvalidGeometry(f"Face rect is not finite: {face_rect}")
    face_x, face_y = int(face_rect.x), int(face_rect.y)
    face_w, face_h = int(face_rect.width), int(face_rect.height)
    return PixelRegion(
        start_x=max(0, face_x),
        start_y=max(0, face_y),
        end_x=min(face_x + face_w, depth_width),
        end_y=min(face_y + face_h, depth_height),
    )


def center_region(face_rect: Rect, region: PixelRegion, landmark: Optional[Point] = None) -> PixelRegion:
    """
    Box treated as the anatomical center of the face.

    With a landmark (the nose, in depth pixels) this is a box of
    ``NOSE_RADIUS`` times the face size around it, kept inside ``region``.
    Without one it is ``region`` with ``CENTER_MARGIN`` of the face size
    trimmed off each side.
    """
    face_w, face_h = int(face_rect.width), int(face_rect.height)
    if landmark is not None:
        radius_x = int(face_w * NOSE_RADIUS)
        radius_y = int(face_h * NOSE_RADIUS)
        nose_x, nose_y = int(landmark.x), int(landmark.y)
        return PixelRegion(
            start_x=max(region.start_x, nose_x - radius_x),
            start_y=max(region.start_y, nose_y - radius_y),
            end_x=min(region.end_x, nose_x + radius_x),
            end_y=min(region.end_y, nose_y + radius_y),
        )

    margin_x = int(face_w * CENTER_MARGIN)
    margin_y = int(face_h * CENTER_MARGIN)
    return PixelRegion(
        start_x=region.start_x + margin_x,
        start_y=region.start_y + margin_y,
        end_x=region.end_x - margin_x,
        end_y=region.end_y - margin_y,
    )


def sample(buffer: DepthBuffer, face_rect: Rect, landmark: Optional[Point] = None) -> SampleSet:
    """Collect the valid, center/edge tagged samples of ``face_rect`` (depth pixels)."""
    encoding = buffer.sample_encoding
    depth = buffer.as_array()

    region = clamp_region(face_rect, buffer.width, buffer.height)
    if region.is_empty:
        raise EmptyRegion(
            f"Face region {face_rect} lies outside the {buffer.width}x{buffer.height} depth map"
        )
    center = center_region(face_rect, region, landmark)

    patch = depth[region.start_y:region.end_y, region.start_x:region.end_x]
    upper = DISPARITY_MAX if encoding.is_disparity else DEPTH_MAX
    # NaN compares False on both sides and drops out here
    valid = (patch > 0) & (patch < upper)

    rows, cols = np.nonzero(valid)
    ys = rows + region.start_y
    xs = cols + region.start_x
    is_center = (
        (xs >= center.start_x) & (xs < center.end_x)
        & (ys >= center.start_y) & (ys < center.end_y)
    )
    values = patch[valid]

    logger.debug(
        f"Sampled {values.size}/{region.pixel_count} valid {encoding.value} pixels "
        f"in {region}, center={int(is_center.sum())}"
    )
    return SampleSet(values=values, is_center=is_center, total_pixels=region.pixel_count, region=region)
