"""
Metrics engine: reduces a face scan to the scalar statistics the spoof
classifier votes on.

All reductions run over the float32 samples in row-major scan order and
accumulate in float64, so results are reproducible for a given buffer.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Dict

import numpy as np

from .errors import NoValidSamples
from .sampler import SampleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepthMetrics:
    min: float
    max: float
    range: float
    std_dev: float
    center_mean: float
    edge_mean: float
    gradient: float
    smoothness: float
    valid_pixel_fraction: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _mean_or_zero(values: np.ndarray) -> float:
    # An empty subset counts as 0, not NaN; the thresholds were tuned that way
    if values.size == 0:
        return 0.0
    return float(values.mean(dtype=np.float64))


def reduce(samples: SampleSet) -> DepthMetrics:
    """Compute :class:`DepthMetrics` for one scan; raises ``NoValidSamples`` if it is empty."""
    values = samples.values
    if values.size == 0:
        raise NoValidSamples(
            f"No valid depth values found in face region ({samples.total_pixels} pixels scanned)"
        )

    lo = float(values.min())
    hi = float(values.max())
    std_dev = float(values.std(dtype=np.float64))  # population (ddof=0)

    center_mean = _mean_or_zero(samples.center_values)
    edge_mean = _mean_or_zero(samples.edge_values)

    # Consecutive samples in scan order, so row wrap-around pairs are included
    if values.size > 1:
        steps = np.abs(np.diff(values.astype(np.float64)))
        smoothness = float(steps.mean())
    else:
        smoothness = 0.0

    metrics = DepthMetrics(
        min=lo,
        max=hi,
        range=hi - lo,
        std_dev=std_dev,
        center_mean=center_mean,
        edge_mean=edge_mean,
        gradient=abs(center_mean - edge_mean),
        smoothness=smoothness,
        valid_pixel_fraction=samples.valid_count / samples.total_pixels,
    )
    logger.debug(f"Depth metrics: {metrics}")
    return metrics
