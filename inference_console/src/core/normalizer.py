import math
from typing import Any

from src.core.errors import ProcessingError
from src.core.types import Detection, Keypoint, ProcessedResult

DATA_URI_PREFIX = 'data:image/jpeg;base64,'
DEFAULT_FAILURE_MESSAGE = 'Image processing failed'


def _as_float(value: Any, default: float | None = None) -> float | None:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def _as_id(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    number = _as_float(value) if isinstance(value, float) else None
    return int(number) if number is not None else default


def _parse_box(raw: Any) -> tuple[float, float, float, float] | None:
    if not isinstance(raw, (list, tuple)) or len(raw) != 4:
        return None
    values = [_as_float(value) for value in raw]
    if any(value is None for value in values):
        return None
    return tuple(values)  # type: ignore[return-value]


def _parse_point(raw: Any) -> tuple[float, float] | None:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        return None
    x, y = _as_float(raw[0]), _as_float(raw[1])
    if x is None or y is None:
        return None
    return (x, y)


def _parse_keypoints(raw: Any) -> tuple[Keypoint, ...]:
    if not isinstance(raw, list):
        return ()
    keypoints: list[Keypoint] = []
    for index, row in enumerate(raw):
        if not isinstance(row, dict):
            continue
        x, y = _as_float(row.get('x')), _as_float(row.get('y'))
        if x is None or y is None:
            continue
        keypoints.append(
            Keypoint(
                id=_as_id(row.get('id'), index),
                x=x,
                y=y,
                confidence=_as_float(row.get('confidence'), 0.0),
            )
        )
    return tuple(keypoints)


def normalize_detection(row: dict[str, Any]) -> Detection:
    return Detection(
        box=_parse_box(row.get('box')),
        class_name=str(row.get('class') or '').strip(),
        confidence=_as_float(row.get('confidence')),
        mask_center=_parse_point(row.get('mask_center')),
        keypoints=_parse_keypoints(row.get('keypoints')),
    )


def normalize_response(raw: Any) -> ProcessedResult:
    if not isinstance(raw, dict):
        raise ProcessingError('Inference service returned an unexpected payload.', code='INVALID_RESPONSE')
    if raw.get('success') is not True:
        raise ProcessingError(str(raw.get('error') or DEFAULT_FAILURE_MESSAGE))
    image = raw.get('image')
    if not isinstance(image, str) or not image:
        raise ProcessingError('Inference service response is missing the processed image.', code='MISSING_PROCESSED_IMAGE')

    detections = raw.get('detections') or []
    if not isinstance(detections, list):
        raise ProcessingError('Inference service returned malformed detections.', code='INVALID_RESPONSE')
    return ProcessedResult(
        processed_image=f'{DATA_URI_PREFIX}{image}',
        detections=tuple(normalize_detection(row) for row in detections if isinstance(row, dict)),
    )
