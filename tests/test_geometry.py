"""
Tests for the coordinate mapper.
"""

import pytest

from depthguard.errors import InvalidGeometry
from depthguard.geometry import (
    from_depth_space,
    image_to_normalized,
    normalized_to_image,
    rescale,
    to_depth_space,
)
from depthguard.structures import Point, Rect, Size


class TestNormalizedToImage:
    """Detector (bottom-left origin) to image pixels (top-left origin)."""

    def test_rect_is_flipped_vertically(self):
        rect = normalized_to_image(Rect(0.25, 0.1, 0.5, 0.3), Size(1000, 800))
        assert rect.x == pytest.approx(250)
        assert rect.y == pytest.approx(480)  # (1 - 0.1 - 0.3) * 800
        assert rect.width == pytest.approx(500)
        assert rect.height == pytest.approx(240)

    def test_point_has_no_height_term(self):
        point = normalized_to_image(Point(0.5, 0.25), Size(1000, 800))
        assert point.x == pytest.approx(500)
        assert point.y == pytest.approx(600)

    def test_inverse(self):
        original = Rect(0.3, 0.2, 0.4, 0.5)
        back = image_to_normalized(normalized_to_image(original, Size(640, 480)), Size(640, 480))
        assert back.x == pytest.approx(original.x)
        assert back.y == pytest.approx(original.y)
        assert back.width == pytest.approx(original.width)
        assert back.height == pytest.approx(original.height)


class TestToDepthSpace:
    """Image pixels scaled into the depth map."""

    def test_independent_axis_scales(self):
        rect = to_depth_space(Rect(0.25, 0.1, 0.5, 0.3), Size(1000, 800), Size(640, 480))
        assert rect.x == pytest.approx(160)
        assert rect.y == pytest.approx(288)
        assert rect.width == pytest.approx(320)
        assert rect.height == pytest.approx(144)

    def test_no_clamping(self):
        rect = to_depth_space(Rect(-0.5, 0.9, 1.0, 0.5), Size(100, 100), Size(50, 50))
        assert rect.x == pytest.approx(-25)
        assert rect.y == pytest.approx(-20)

    def test_rescale_point(self):
        point = rescale(Point(300, 200), Size(600, 400), Size(60, 80))
        assert point.x == pytest.approx(30)
        assert point.y == pytest.approx(40)

    @pytest.mark.parametrize("rect", [
        Rect(0.0, 0.0, 1.0, 1.0),
        Rect(0.123, 0.456, 0.321, 0.222),
        Rect(0.7, 0.05, 0.25, 0.9),
    ])
    def test_round_trip(self, rect):
        image, depth = Size(4032, 3024), Size(640, 480)
        back = from_depth_space(to_depth_space(rect, image, depth), image, depth)
        for got, want in zip((back.x, back.y, back.width, back.height),
                             (rect.x, rect.y, rect.width, rect.height)):
            assert got == pytest.approx(want, rel=1e-4, abs=1e-9)

    @pytest.mark.parametrize("image,depth", [
        (Size(0, 100), Size(64, 48)),
        (Size(100, 0), Size(64, 48)),
        (Size(100, 100), Size(0, 48)),
        (Size(100, 100), Size(64, 0)),
    ])
    def test_zero_dimension_raises(self, image, depth):
        with pytest.raises(InvalidGeometry):
            to_depth_space(Rect(0.1, 0.1, 0.5, 0.5), image, depth)

    @pytest.mark.parametrize("shape", [
        Rect(1e308, 0.0, 1.0, 1.0),
        Rect(0.1, float("nan"), 0.5, 0.5),
        Point(float("inf"), 0.5),
    ])
    def test_non_finite_result_raises(self, shape):
        with pytest.raises(InvalidGeometry):
            to_depth_space(shape, Size(4032, 3024), Size(640, 480))
