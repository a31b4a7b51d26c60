"""
Tests for the metrics engine.
"""

import math

import numpy as np
import pytest

from depthguard.errors import NoValidSamples
from depthguard.metrics import reduce
from depthguard.sampler import PixelRegion, SampleSet


def make_samples(values, center, total):
    return SampleSet(
        values=np.asarray(values, dtype=np.float32),
        is_center=np.asarray(center, dtype=bool),
        total_pixels=total,
        region=PixelRegion(0, 0, total, 1),
    )


class TestReduce:

    def test_hand_computed(self):
        metrics = reduce(make_samples([1.0, 2.0, 4.0], [True, False, False], total=4))
        assert metrics.min == 1.0
        assert metrics.max == 4.0
        assert metrics.range == 3.0
        assert metrics.std_dev == pytest.approx(math.sqrt(42 / 27))  # population, N=3
        assert metrics.center_mean == pytest.approx(1.0)
        assert metrics.edge_mean == pytest.approx(3.0)
        assert metrics.gradient == pytest.approx(2.0)
        assert metrics.smoothness == pytest.approx(1.5)
        assert metrics.valid_pixel_fraction == pytest.approx(0.75)

    def test_smoothness_follows_scan_order(self):
        metrics = reduce(make_samples([1.0, 5.0, 1.0], [False] * 3, total=3))
        assert metrics.smoothness == pytest.approx(4.0)

    def test_single_sample(self):
        metrics = reduce(make_samples([0.7], [True], total=1))
        assert metrics.range == 0.0
        assert metrics.std_dev == 0.0
        assert metrics.smoothness == 0.0

    def test_empty_subset_mean_is_zero(self):
        metrics = reduce(make_samples([0.5, 0.5], [False, False], total=2))
        assert metrics.center_mean == 0.0
        assert metrics.edge_mean == pytest.approx(0.5)
        assert metrics.gradient == pytest.approx(0.5)

    def test_no_samples_raises(self):
        with pytest.raises(NoValidSamples):
            reduce(make_samples([], [], total=9))

    def test_flat_surface(self):
        metrics = reduce(make_samples(np.full(100, 0.5), np.ones(100, dtype=bool), total=100))
        assert metrics.range == 0.0
        assert metrics.std_dev == 0.0
        assert metrics.smoothness == 0.0
