"""
Input value types for the depth anti-spoofing core: geometry primitives, the
detected face region and the borrowed depth buffer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from .errors import InvalidGeometry, UnsupportedEncoding


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class FaceRegion:
    """
    One face observation from the external detector.

    ``bounding_box`` is normalized to the image with a bottom-left origin.
    ``landmarks`` (e.g. the nose crest) are normalized relative to the
    bounding box, also bottom-left origin.
    """
    bounding_box: Rect
    landmarks: Tuple[Point, ...] = field(default_factory=tuple)

    def landmark_center(self) -> Optional[Point]:
        """Average of the landmark points in image-normalized coordinates."""
        if not self.landmarks:
            return None
        avg_x = sum(p.x for p in self.landmarks) / len(self.landmarks)
        avg_y = sum(p.y for p in self.landmarks) / len(self.landmarks)
        box = self.bounding_box
        return Point(box.x + avg_x * box.width, box.y + avg_y * box.height)


# CoreVideo pixel-format four-character codes
_FOURCC_ALIASES = {
    "hdep": "depth-f16",
    "fdep": "depth-f32",
    "hdis": "disparity-f16",
    "fdis": "disparity-f32",
}


class SampleEncoding(Enum):
    DEPTH_F16 = "depth-f16"
    DEPTH_F32 = "depth-f32"
    DISPARITY_F16 = "disparity-f16"
    DISPARITY_F32 = "disparity-f32"

    @classmethod
    def parse(cls, value: Union["SampleEncoding", str, int]) -> "SampleEncoding":
        """Accepts an enum member, its value, a four-character code or its OSType integer."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                value = value.to_bytes(4, "big").decode("ascii")
            except (OverflowError, UnicodeDecodeError):
                raise UnsupportedEncoding(f"Unsupported depth pixel format: {value!r}") from None
        if isinstance(value, str):
            key = value.strip().lower()
            key = _FOURCC_ALIASES.get(key, key)
            for member in cls:
                if member.value == key:
                    return member
        raise UnsupportedEncoding(f"Unsupported depth pixel format: {value!r}")

    @property
    def is_disparity(self) -> bool:
        return self in (SampleEncoding.DISPARITY_F16, SampleEncoding.DISPARITY_F32)

    @property
    def bytes_per_sample(self) -> int:
        return 2 if self in (SampleEncoding.DEPTH_F16, SampleEncoding.DISPARITY_F16) else 4

    @property
    def dtype(self) -> np.dtype:
        return np.dtype("<f2") if self.bytes_per_sample == 2 else np.dtype("<f4")


@dataclass(frozen=True)
class DepthBuffer:
    """
    Read-only depth/disparity map borrowed from the capture pipeline.

    ``data`` is the raw byte surface, ``bytes_per_row`` its row stride.
    ``encoding`` is kept as declared and only parsed when the buffer is read,
    so an unknown format surfaces as ``UnsupportedEncoding`` at analysis time.
    """
    data: bytes
    width: int
    height: int
    bytes_per_row: int
    encoding: Union[SampleEncoding, str, int]

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def sample_encoding(self) -> SampleEncoding:
        return SampleEncoding.parse(self.encoding)

    def as_array(self) -> np.ndarray:
        """Decode the buffer into a (height, width) float32 array."""
        encoding = self.sample_encoding
        if self.width <= 0 or self.height <= 0:
            raise InvalidGeometry(f"Depth buffer has zero size: {self.width}x{self.height}")

        item = encoding.bytes_per_sample
        row_bytes = self.width * item
        stride = self.bytes_per_row or row_bytes
        if stride < row_bytes:
            raise InvalidGeometry(f"Row stride {stride} is smaller than a row of {row_bytes} bytes")
        needed = stride * (self.height - 1) + row_bytes
        if len(self.data) < needed:
            raise InvalidGeometry(f"Depth payload holds {len(self.data)} bytes, {needed} required")

        raw = np.ndarray(
            shape=(self.height, self.width),
            dtype=encoding.dtype,
            buffer=self.data,
            strides=(stride, item),
        )
        return raw.astype(np.float32)

    @classmethod
    def from_array(
        cls,
        values: np.ndarray,
        encoding: Union[SampleEncoding, str, int],
        row_padding: int = 0,
    ) -> "DepthBuffer":
        """Pack a 2-D array into a buffer, optionally padding each row by ``row_padding`` samples."""
        encoding = SampleEncoding.parse(encoding)
        arr = np.asarray(values, dtype=encoding.dtype)
        if arr.ndim != 2:
            raise InvalidGeometry(f"Depth array must be 2-D, got shape {arr.shape}")
        height, width = arr.shape
        if row_padding > 0:
            padded = np.zeros((height, width + row_padding), dtype=encoding.dtype)
            padded[:, :width] = arr
            arr = padded
        return cls(
            data=np.ascontiguousarray(arr).tobytes(),
            width=width,
            height=height,
            bytes_per_row=(width + max(0, row_padding)) * encoding.bytes_per_sample,
            encoding=encoding,
        )
