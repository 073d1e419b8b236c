import logging
from typing import Any

import httpx

from src.core.backend import InferenceBackend
from src.core.errors import ProcessingError, TransportError
from src.core.types import InferenceRequest

logger = logging.getLogger(__name__)


class HttpInferenceBackend(InferenceBackend):
    def __init__(self, timeout_ms: int | None = None) -> None:
        # No timeout unless one is configured.
        self._timeout = max(int(timeout_ms), 1000) / 1000.0 if timeout_ms else None

    @property
    def name(self) -> str:
        return 'http'

    async def submit(self, request: InferenceRequest) -> dict[str, Any]:
        image = request.image
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    request.target,
                    files={'image': (image.filename, image.content, image.content_type)},
                    data=request.fields,
                )
        except httpx.RequestError as exc:
            logger.warning('Inference backend unreachable target=%s error=%s', request.target, exc)
            raise TransportError(f'Could not reach inference service: {exc}') from exc

        if not response.is_success:
            body = response.text
            logger.warning('Inference backend error target=%s status=%s', request.target, response.status_code)
            raise TransportError(
                f'Server error ({response.status_code}): {body}',
                upstream_status=response.status_code,
                body=body,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProcessingError('Inference service returned invalid JSON.', code='INVALID_RESPONSE') from exc
