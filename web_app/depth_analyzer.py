"""
Dedicated depth analyzer blueprint for DepthGuard.
ONLY turns capture payloads into anti-spoofing verdicts - nothing else!
"""

import logging
import math
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from flask import Blueprint, jsonify, request

from depthguard.anti_spoofing import DepthAntiSpoofingProcessor
from depthguard.structures import DepthBuffer, FaceRegion, Point, Rect, Size
from depthguard.utils import convert_numpy_types, decode_base64

logger = logging.getLogger(__name__)

# Load .env from project root and from this directory; latter takes precedence
load_dotenv()
load_dotenv(os.path.join(os.path.dirname(__file__), '.env'), override=True)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


DEBUG_BY_DEFAULT = _env_flag('DEPTHGUARD_DEBUG')
HEATMAP_QUALITY = int(os.getenv('DEPTHGUARD_HEATMAP_QUALITY', '80'))

# Create Blueprint for depth analysis
depth_analyzer = Blueprint('depth_analyzer', __name__)

processor = DepthAntiSpoofingProcessor(enable_debug=DEBUG_BY_DEFAULT, heatmap_quality=HEATMAP_QUALITY)


class PayloadError(ValueError):
    """Request body does not describe a capture we can analyze."""


def _number(raw: Dict[str, Any], key: str, where: str) -> float:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f'{where}.{key} must be a number')
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    # JSON parsing lets NaN and Infinity through
    if not math.isfinite(number):
        raise PayloadError(f'{where}.{key} must be a finite number')
    return number


def _flag(raw: Dict[str, Any], key: str, default: Optional[bool]) -> Optional[bool]:
    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', 'false'):
        return value.strip().lower() == 'true'
    raise PayloadError(f'{key} must be a boolean')


def _parse_size(raw: Any) -> Size:
    if not isinstance(raw, dict):
        raise PayloadError('imageSize must be an object with width and height')
    return Size(_number(raw, 'width', 'imageSize'), _number(raw, 'height', 'imageSize'))


def _parse_faces(raw: Any) -> List[FaceRegion]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PayloadError('faces must be a list')

    faces = []
    for i, item in enumerate(raw):
        box = item.get('boundingBox') if isinstance(item, dict) else None
        if not isinstance(box, dict):
            raise PayloadError(f'faces[{i}].boundingBox is required')
        where = f'faces[{i}].boundingBox'
        rect = Rect(
            _number(box, 'x', where),
            _number(box, 'y', where),
            _number(box, 'width', where),
            _number(box, 'height', where),
        )
        points = []
        for point in item.get('noseCrest') or []:
            if not isinstance(point, (list, tuple)) or len(point) != 2:
                raise PayloadError(f'faces[{i}].noseCrest entries must be [x, y] pairs')
            pair = {'x': point[0], 'y': point[1]}
            where = f'faces[{i}].noseCrest'
            points.append(Point(_number(pair, 'x', where), _number(pair, 'y', where)))
        faces.append(FaceRegion(rect, tuple(points)))
    return faces


def _parse_depth(raw: Any) -> Optional[DepthBuffer]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise PayloadError('depthData must be an object')
    data = raw.get('data')
    if not isinstance(data, str):
        raise PayloadError('depthData.data must be a base64 string')
    try:
        payload = decode_base64(data)
    except ValueError as e:
        raise PayloadError(str(e)) from e

    width = int(_number(raw, 'width', 'depthData'))
    height = int(_number(raw, 'height', 'depthData'))
    bytes_per_row = int(_number(raw, 'bytesPerRow', 'depthData')) if raw.get('bytesPerRow') is not None else 0
    # Unknown formats are passed through and reported in the verdict
    return DepthBuffer(
        data=payload,
        width=width,
        height=height,
        bytes_per_row=bytes_per_row,
        encoding=raw.get('pixelFormat', ''),
    )


@depth_analyzer.route('/analyze_depth', methods=['POST'])
def analyze_depth():
    """Run depth anti-spoofing on one captured photo's face observations and depth map."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Expected a JSON body'}), 400

    try:
        enable_depth = _flag(data, 'enableDepthData', False)
        enable_debug = _flag(data, 'enableDebug', None)
        faces = _parse_faces(data.get('faces'))
        image_size = _parse_size(data.get('imageSize'))
        # Disabled captures never look at the depth payload
        depth_buffer = _parse_depth(data.get('depthData')) if enable_depth else None
    except PayloadError as e:
        logger.warning(f"Rejected depth analysis request: {e}")
        return jsonify({'error': str(e)}), 400

    verdict = processor.analyze(
        faces,
        depth_buffer,
        image_size,
        enable_depth_data=enable_depth,
        enable_debug=enable_debug,
    )

    anti_spoofing = verdict.to_dict()
    heatmap = anti_spoofing.pop('debugHeatmap', None)
    result = {'antiSpoofing': anti_spoofing}
    if heatmap is not None:
        result['debugDepthHeatmap'] = heatmap

    return jsonify(convert_numpy_types(result))
