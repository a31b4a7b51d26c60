"""
Depth-based anti-spoofing: composes the mapper, sampler, metrics engine,
classifier and (in debug mode) heatmap renderer into one verdict per capture.

Every stage hands its output to the next explicitly; the processor keeps no
state between or during calls, so one instance can serve concurrent captures.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence

from .classifier import Classification, classify
from .errors import (
    EmptyRegion,
    InvalidGeometry,
    NoValidSamples,
    UnsupportedEncoding,
)
from .geometry import to_depth_space
from .heatmap import DEFAULT_JPEG_QUALITY, render
from .metrics import DepthMetrics, reduce
from .sampler import sample
from .structures import DepthBuffer, FaceRegion, Size

logger = logging.getLogger(__name__)


class VerdictStatus(str, Enum):
    SUCCESS = "success"
    NO_FACE = "no_face"
    MULTIPLE_FACES = "multiple_faces"
    SPOOFING_DETECTED = "spoofing_detected"
    NO_DEPTH_DATA = "no_depth_data"
    DISABLED = "disabled"


MESSAGES = {
    VerdictStatus.SUCCESS: "One and unique face recognized",
    VerdictStatus.NO_FACE: "No face detected in image",
    VerdictStatus.MULTIPLE_FACES: "Multiple faces detected ({count} faces found)",
    VerdictStatus.SPOOFING_DETECTED: "Anti-spoofing failed - possible 2D spoofing detected",
    VerdictStatus.NO_DEPTH_DATA: "Device does not support depth capture",
    VerdictStatus.DISABLED: "Anti-spoofing not enabled",
}


@dataclass(frozen=True)
class AntiSpoofingVerdict:
    """Final result of one capture. ``is_real_face`` only means something when ``face_detected``."""
    is_enabled: bool
    has_true_depth: bool
    face_count: int
    is_real_face: bool
    status: VerdictStatus
    message: str
    metrics: Optional[DepthMetrics] = None
    classification: Optional[Classification] = None
    debug_heatmap: Optional[str] = None

    @property
    def face_detected(self) -> bool:
        return self.face_count == 1

    def metrics_dict(self) -> Optional[Dict]:
        if self.metrics is None or self.classification is None:
            return None
        return {
            "range": self.metrics.range,
            "stdDeviation": self.metrics.std_dev,
            "gradient": self.metrics.gradient,
            "smoothness": self.metrics.smoothness,
            "validPixelPercentage": self.metrics.valid_pixel_fraction,
            "checksPassed": self.classification.checks_passed,
            "totalChecks": self.classification.total_checks,
        }

    def to_dict(self) -> Dict:
        result = {
            "isEnabled": self.is_enabled,
            "hasTrueDepth": self.has_true_depth,
            "faceDetected": self.face_detected,
            "faceCount": self.face_count,
            "isRealFace": self.is_real_face,
            "status": self.status.value,
            "message": self.message,
        }
        metrics = self.metrics_dict()
        if metrics is not None:
            result["metrics"] = metrics
        if self.debug_heatmap is not None:
            result["debugHeatmap"] = self.debug_heatmap
        return result


class DepthAntiSpoofingProcessor:
    """Decides real-vs-flat for the single face of a capture using its depth map."""

    def __init__(self, enable_debug: bool = False, heatmap_quality: int = DEFAULT_JPEG_QUALITY):
        self.enable_debug = enable_debug
        self.heatmap_quality = heatmap_quality

    def analyze(
        self,
        faces: Sequence[FaceRegion],
        depth_buffer: Optional[DepthBuffer],
        image_size: Size,
        enable_depth_data: bool = True,
        enable_debug: Optional[bool] = None,
    ) -> AntiSpoofingVerdict:
        """
        Build the verdict for one capture.

        ``faces`` are the detector's observations for the photo, ``depth_buffer``
        the depth map already oriented like the image (None when the device
        delivered none). ``enable_debug`` overrides the instance default.
        """
        debug = self.enable_debug if enable_debug is None else enable_debug

        if not enable_depth_data:
            return AntiSpoofingVerdict(
                is_enabled=False,
                has_true_depth=False,
                face_count=0,
                is_real_face=False,
                status=VerdictStatus.DISABLED,
                message=MESSAGES[VerdictStatus.DISABLED],
            )

        has_depth = depth_buffer is not None
        face_count = len(faces)

        if face_count == 0:
            return self._finish(VerdictStatus.NO_FACE, has_depth, face_count)
        if face_count > 1:
            return self._finish(
                VerdictStatus.MULTIPLE_FACES,
                has_depth,
                face_count,
                message=MESSAGES[VerdictStatus.MULTIPLE_FACES].format(count=face_count),
            )
        if not has_depth:
            return self._finish(VerdictStatus.NO_DEPTH_DATA, False, face_count)

        return self._analyze_face(faces[0], depth_buffer, image_size, debug)

    def _analyze_face(
        self,
        face: FaceRegion,
        depth_buffer: DepthBuffer,
        image_size: Size,
        debug: bool,
    ) -> AntiSpoofingVerdict:
        heatmap = None
        try:
            depth_size = depth_buffer.size
            face_rect = to_depth_space(face.bounding_box, image_size, depth_size)
            nose = face.landmark_center()
            nose_px = to_depth_space(nose, image_size, depth_size) if nose is not None else None
            logger.debug(f"Face rect in depth pixels: {face_rect}, nose: {nose_px}")

            if debug:
                heatmap = render(depth_buffer, face_rect, quality=self.heatmap_quality)

            samples = sample(depth_buffer, face_rect, nose_px)
            metrics = reduce(samples)
            classification = classify(
                metrics, depth_buffer.sample_encoding.is_disparity, verbose=debug
            )
        except (InvalidGeometry, UnsupportedEncoding) as e:
            logger.warning(f"Depth data unusable: {e}")
            return self._finish(
                VerdictStatus.NO_DEPTH_DATA, True, 1, message=str(e),
                heatmap=heatmap, debug=debug,
            )
        except (EmptyRegion, NoValidSamples) as e:
            logger.warning(f"Depth analysis failed: {e}")
            return self._finish(
                VerdictStatus.SPOOFING_DETECTED, True, 1, message=str(e),
                heatmap=heatmap, debug=debug,
            )

        status = VerdictStatus.SUCCESS if classification.is_real_face else VerdictStatus.SPOOFING_DETECTED
        return self._finish(
            status, True, 1,
            is_real_face=classification.is_real_face,
            metrics=metrics,
            classification=classification,
            heatmap=heatmap,
            debug=debug,
        )

    @staticmethod
    def _finish(
        status: VerdictStatus,
        has_true_depth: bool,
        face_count: int,
        *,
        message: Optional[str] = None,
        is_real_face: bool = False,
        metrics: Optional[DepthMetrics] = None,
        classification: Optional[Classification] = None,
        heatmap: Optional[str] = None,
        debug: bool = False,
    ) -> AntiSpoofingVerdict:
        verdict = AntiSpoofingVerdict(
            is_enabled=True,
            has_true_depth=has_true_depth,
            face_count=face_count,
            is_real_face=is_real_face,
            status=status,
            message=message if message is not None else MESSAGES[status],
            metrics=metrics if debug else None,
            classification=classification if debug else None,
            debug_heatmap=heatmap if debug else None,
        )
        logger.info(
            f"[anti-spoofing] status={status.value} faces={face_count} "
            f"real={is_real_face} depth={has_true_depth}"
        )
        return verdict
