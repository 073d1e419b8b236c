import logging
import time

from src.config import Settings
from src.core.backend import InferenceBackend
from src.core.errors import ConsoleError
from src.core.normalizer import normalize_response
from src.core.options import resolve_request
from src.core.types import ProcessedResult, ProcessingOptions

logger = logging.getLogger(__name__)


async def process_image(
    image,
    options: ProcessingOptions,
    backend: InferenceBackend,
    settings: Settings,
) -> ProcessedResult:
    request = resolve_request(options, image, settings)
    start = time.perf_counter()
    try:
        raw = await backend.submit(request)
        result = normalize_response(raw)
    except ConsoleError as exc:
        logger.warning(
            'Image processing failed backend=%s target=%s code=%s message=%s',
            backend.name,
            request.target,
            exc.code,
            exc.message,
        )
        raise
    latency_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        'Image processed backend=%s target=%s model=%s detections=%s latency_ms=%s',
        backend.name,
        request.target,
        options.model_id,
        len(result.detections),
        latency_ms,
    )
    return result
