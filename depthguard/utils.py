"""
Utility functions shared by the analysis core and the host glue.
"""

import base64
import binascii
import logging
from typing import Any, Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def convert_numpy_types(obj: Any) -> Any:
    """Convert NumPy types to Python native types for JSON serialization."""
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, dict):
        return {key: convert_numpy_types(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy_types(item) for item in obj]
    else:
        return obj


def decode_base64(payload: str) -> bytes:
    """Decode a base64 string, tolerating a ``data:...;base64,`` prefix."""
    if "," in payload and payload.lstrip().startswith("data:"):
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def decode_heatmap(encoded: str) -> Optional[np.ndarray]:
    """Decode a base64 heatmap back into a BGR image (for inspection and tests)."""
    nparr = np.frombuffer(decode_base64(encoded), np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        logger.error("Failed to decode heatmap image")
    return image
