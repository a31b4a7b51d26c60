"""
Spoof classifier: five independent threshold checks on the depth metrics,
real face iff at least four pass.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

from .metrics import DepthMetrics

logger = logging.getLogger(__name__)

REQUIRED_CHECKS = 4


@dataclass(frozen=True)
class ThresholdProfile:
    range_min: float
    std_dev_min: float
    gradient_min: float
    smoothness_min: float
    smoothness_max: float
    valid_pixel_fraction_min: float


# Disparity (1/m, larger = closer). Observed real: range 1.19-2.82,
# std 0.24-0.73, gradient 0.13-0.54; flat fakes: range 0.12-0.39,
# std 0.022-0.10, gradient 0.006-0.11.
DISPARITY_PROFILE = ThresholdProfile(
    range_min=0.50,
    std_dev_min=0.15,
    gradient_min=0.10,
    smoothness_min=0.005,
    smoothness_max=0.06,
    valid_pixel_fraction_min=0.85,
)

# Depth in meters: at least 10cm of relief, 3cm spread, 5cm nose-to-edge.
DEPTH_PROFILE = ThresholdProfile(
    range_min=0.10,
    std_dev_min=0.03,
    gradient_min=0.05,
    smoothness_min=0.005,
    smoothness_max=0.04,
    valid_pixel_fraction_min=0.85,
)


@dataclass(frozen=True)
class Classification:
    is_real_face: bool
    checks_passed: int
    checks: Dict[str, bool] = field(default_factory=dict)

    @property
    def total_checks(self) -> int:
        return len(self.checks)


def profile_for(is_disparity: bool) -> ThresholdProfile:
    return DISPARITY_PROFILE if is_disparity else DEPTH_PROFILE


def run_checks(metrics: DepthMetrics, profile: ThresholdProfile) -> Dict[str, bool]:
    return {
        "range": metrics.range > profile.range_min,
        "std_dev": metrics.std_dev > profile.std_dev_min,
        "gradient": metrics.gradient > profile.gradient_min,
        "smoothness": profile.smoothness_min < metrics.smoothness < profile.smoothness_max,
        "valid_pixels": metrics.valid_pixel_fraction > profile.valid_pixel_fraction_min,
    }


def classify(metrics: DepthMetrics, is_disparity: bool, verbose: bool = False) -> Classification:
    """Vote the metrics against the profile for the buffer's encoding."""
    checks = run_checks(metrics, profile_for(is_disparity))
    passed = sum(checks.values())
    is_real = passed >= REQUIRED_CHECKS

    level = logging.INFO if verbose else logging.DEBUG
    logger.log(
        level,
        f"[depth] {passed}/{len(checks)} checks passed -> {'REAL FACE' if is_real else 'SPOOFING DETECTED'} "
        f"({'disparity' if is_disparity else 'depth'}) checks={checks}",
    )
    return Classification(is_real_face=is_real, checks_passed=passed, checks=checks)
