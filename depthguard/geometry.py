"""
Coordinate mapping between the three spaces a face lives in:

- detector-normalized: [0, 1] on both axes, origin bottom-left, y grows up
- image pixels: origin top-left, y grows down
- depth-buffer pixels: image pixels scaled by depthSize / imageSize per axis

No clamping happens here; the sampler clamps to the buffer bounds.
"""

import math
from typing import Tuple, Union

from .errors import InvalidGeometry
from .structures import Point, Rect, Size

Shape = Union[Rect, Point]


def _check_finite(shape: Shape) -> Shape:
    if isinstance(shape, Rect):
        coords = (shape.x, shape.y, shape.width, shape.height)
    else:
        coords = (shape.x, shape.y)
    if not all(math.isfinite(c) for c in coords):
        raise InvalidGeometry(f"Mapped coordinates are not finite: {shape}")
    return shape


def _check_size(size: Size, name: str) -> None:
    if size.is_empty:
        raise InvalidGeometry(f"{name} has a zero dimension: {size.width}x{size.height}")


def _scale_factors(source: Size, target: Size) -> Tuple[float, float]:
    _check_size(source, "source size")
    _check_size(target, "target size")
    return target.width / source.width, target.height / source.height


def normalized_to_image(shape: Shape, image_size: Size) -> Shape:
    """Flip a detector-normalized rect/point into top-left image pixels."""
    _check_size(image_size, "image size")
    if isinstance(shape, Rect):
        return Rect(
            x=shape.x * image_size.width,
            y=(1.0 - shape.y - shape.height) * image_size.height,
            width=shape.width * image_size.width,
            height=shape.height * image_size.height,
        )
    return Point(shape.x * image_size.width, (1.0 - shape.y) * image_size.height)


def image_to_normalized(shape: Shape, image_size: Size) -> Shape:
    """Inverse of :func:`normalized_to_image`."""
    _check_size(image_size, "image size")
    if isinstance(shape, Rect):
        height = shape.height / image_size.height
        return Rect(
            x=shape.x / image_size.width,
            y=1.0 - shape.y / image_size.height - height,
            width=shape.width / image_size.width,
            height=height,
        )
    return Point(shape.x / image_size.width, 1.0 - shape.y / image_size.height)


def rescale(shape: Shape, source: Size, target: Size) -> Shape:
    """Linearly scale pixel coordinates from ``source`` space into ``target`` space."""
    sx, sy = _scale_factors(source, target)
    if isinstance(shape, Rect):
        return Rect(shape.x * sx, shape.y * sy, shape.width * sx, shape.height * sy)
    return Point(shape.x * sx, shape.y * sy)


def to_depth_space(shape: Shape, image_size: Size, depth_size: Size) -> Shape:
    """Map a detector-normalized rect or point into depth-buffer pixels; non-finite results raise ``InvalidGeometry``."""
    _check_size(depth_size, "depth size")
    return _check_finite(rescale(normalized_to_image(shape, image_size), image_size, depth_size))


def from_depth_space(shape: Shape, image_size: Size, depth_size: Size) -> Shape:
    """Map depth-buffer pixels back to detector-normalized coordinates."""
    return image_to_normalized(rescale(shape, depth_size, image_size), image_size)
