from src.core.types import (
    Detection,
    DisplayBoundingBox,
    DisplayDetection,
    DisplayKeypoint,
    Point,
)


def format_percent(confidence: float | None) -> str:
    if confidence is None:
        return 'N/A'
    return f'{confidence * 100:.1f}%'


def _bounding_box(box: tuple[float, float, float, float]) -> DisplayBoundingBox:
    x1, y1, x2, y2 = box
    width = x2 - x1
    height = y2 - y1
    return DisplayBoundingBox(
        x1=x1,
        y1=y1,
        x2=x2,
        y2=y2,
        width=width,
        height=height,
        center=Point(x=x1 + width / 2, y=y1 + height / 2),
    )


def project_detections(detections: list[Detection] | tuple[Detection, ...]) -> list[DisplayDetection]:
    with_box = [d for d in detections if d.box is not None and len(d.box) == 4]
    return [
        DisplayDetection(
            id=index,
            class_name=detection.class_name,
            confidence=format_percent(detection.confidence),
            bounding_box=_bounding_box(detection.box),
            mask_center=Point(x=detection.mask_center[0], y=detection.mask_center[1]) if detection.mask_center else None,
            keypoints=tuple(
                DisplayKeypoint(id=kp.id, x=kp.x, y=kp.y, confidence=format_percent(kp.confidence))
                for kp in detection.keypoints
            ),
        )
        for index, detection in enumerate(with_box)
    ]
