import base64
from typing import Any

from src.core.backend import InferenceBackend
from src.core.types import InferenceRequest


class DummyInferenceBackend(InferenceBackend):
    """Offline stand-in for the inference service; echoes the upload back."""

    @property
    def name(self) -> str:
        return 'dummy'

    async def submit(self, request: InferenceRequest) -> dict[str, Any]:
        fields = request.fields
        with_masks = fields.get('enableSegmentation') == 'true'
        with_keypoints = fields.get('enableKeypoints') == 'true'

        detections = []
        for box, label, confidence in (
            ([10.0, 20.0, 50.0, 80.0], 'berry', 0.953),
            ([60.0, 30.0, 110.0, 95.0], 'berry', 0.71),
        ):
            x1, y1, x2, y2 = box
            center = [(x1 + x2) / 2, (y1 + y2) / 2]
            detections.append(
                {
                    'box': box,
                    'class': label,
                    'confidence': confidence,
                    'mask_center': center if with_masks else None,
                    'keypoints': (
                        [{'id': 1, 'x': center[0] + 1, 'y': center[1] - 1, 'confidence': 0.88}]
                        if with_keypoints
                        else []
                    ),
                }
            )

        return {
            'success': True,
            'image': base64.b64encode(request.image.content).decode('ascii'),
            'detections': detections,
        }
