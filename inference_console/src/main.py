import logging
import time
import uuid
from dataclasses import asdict

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.core.backend import create_backend
from src.core.errors import ConsoleError
from src.core.model_catalog import ModelCatalog
from src.core.pipeline import process_image
from src.core.projection import project_detections
from src.core.session import ConsoleSession
from src.core.state import ConsoleState
from src.core.types import ImageFile, ProcessingOptions
from src.logging_setup import setup_logging
from src.schemas import (
    ErrorResponse,
    HealthResponse,
    ModelsResponse,
    ProcessResponse,
    SelectModelRequest,
    SessionResponse,
    ToggleRequest,
)
from src.utils.image_io import to_image_file

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger('inference_console')

app = FastAPI(title='Inference Console', version=settings.version)
started_at = time.time()


@app.on_event('startup')
def startup_event() -> None:
    backend = create_backend(settings)
    catalog = ModelCatalog(settings.model_catalog_path)
    app.state.backend = backend
    app.state.catalog = catalog
    app.state.session = ConsoleSession(backend, catalog, settings)
    logger.info(
        'Inference console initialized provider=%s base_url=%s routing_policy=%s',
        backend.name,
        settings.inference_base_url,
        settings.routing_policy,
    )
    logger.info('Model catalog loaded path=%s size=%s', catalog.path, catalog.size)


@app.exception_handler(ConsoleError)
async def console_error_handler(request: Request, exc: ConsoleError):
    request_id = request.headers.get('x-request-id') or str(uuid.uuid4())
    payload = ErrorResponse(
        error=exc.code,
        message=exc.message,
        request_id=request_id,
        details=exc.details or None,
    )
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump())


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    request_id = request.headers.get('x-request-id') or str(uuid.uuid4())
    logger.exception('Unhandled exception request_id=%s', request_id)
    payload = ErrorResponse(
        error='UNEXPECTED_SERVER_ERROR',
        message='Unexpected server error.',
        request_id=request_id,
    )
    return JSONResponse(status_code=500, content=payload.model_dump())


async def _read_upload(image: UploadFile | None) -> ImageFile | None:
    if image is None:
        return None
    return ImageFile(
        filename=image.filename or 'upload.jpg',
        content=await image.read(),
        content_type=image.content_type or 'application/octet-stream',
    )


def _session_response(state: ConsoleState) -> SessionResponse:
    result = state.result
    return SessionResponse(
        selected_model=state.selected_model,
        toggles=asdict(state.toggles),
        image_name=state.image.filename if state.image else None,
        is_loading=state.is_loading,
        error=state.error,
        user_message=state.user_message,
        processed_image=result.processed_image if result else None,
        detections=[asdict(row) for row in project_detections(result.detections)] if result else None,
    )


@app.get('/health', response_model=HealthResponse)
def health():
    return HealthResponse(
        ok=True,
        version=settings.version,
        provider=app.state.backend.name,
        routing_policy=settings.routing_policy,
        inference_base_url=settings.inference_base_url,
        models_loaded=app.state.catalog.size,
        uptime_s=round(time.time() - started_at, 3),
    )


@app.get('/models', response_model=ModelsResponse)
def models():
    catalog: ModelCatalog = app.state.catalog
    return ModelsResponse(
        ok=True,
        models=[
            {'id': model.id, 'name': model.name, 'capabilities': list(model.capabilities)}
            for model in catalog.models
        ],
    )


@app.post('/process', response_model=ProcessResponse)
async def process(
    request: Request,
    image: UploadFile | None = File(default=None),
    model_id: str = Form(default='', alias='modelId'),
    enable_detection: bool = Form(default=False, alias='enableDetection'),
    enable_segmentation: bool = Form(default=False, alias='enableSegmentation'),
    enable_keypoints: bool = Form(default=False, alias='enableKeypoints'),
):
    request_id = request.headers.get('x-request-id') or str(uuid.uuid4())
    options = ProcessingOptions(
        model_id=model_id,
        enable_detection=enable_detection,
        enable_segmentation=enable_segmentation,
        enable_keypoints=enable_keypoints,
    )
    catalog: ModelCatalog = app.state.catalog
    if model_id.strip():
        catalog.check_options(options)

    upload = await _read_upload(image)
    result = await process_image(upload, options, app.state.backend, settings)
    display = project_detections(result.detections)

    logger.info(
        'process request_id=%s model=%s capabilities=%s detections=%s displayed=%s',
        request_id,
        options.model_id,
        ','.join(options.enabled_capabilities),
        len(result.detections),
        len(display),
    )
    return ProcessResponse(
        ok=True,
        processed_image=result.processed_image,
        detections=[asdict(row) for row in result.detections],
        display_detections=[asdict(row) for row in display],
    )


@app.get('/session', response_model=SessionResponse)
def get_session():
    session: ConsoleSession = app.state.session
    return _session_response(session.state)


@app.post('/session/model', response_model=SessionResponse)
def session_select_model(payload: SelectModelRequest):
    session: ConsoleSession = app.state.session
    return _session_response(session.select_model(payload.model_id.strip()))


@app.post('/session/toggle', response_model=SessionResponse)
def session_toggle(payload: ToggleRequest):
    session: ConsoleSession = app.state.session
    return _session_response(session.toggle(payload.capability.strip().lower()))


@app.post('/session/image', response_model=SessionResponse)
async def session_image(image: UploadFile | None = File(default=None)):
    session: ConsoleSession = app.state.session
    upload = to_image_file(await _read_upload(image), settings.max_image_bytes)
    return _session_response(session.attach_image(upload))


@app.post('/session/run', response_model=SessionResponse)
async def session_run():
    session: ConsoleSession = app.state.session
    return _session_response(await session.run())


@app.post('/session/reset', response_model=SessionResponse)
def session_reset():
    session: ConsoleSession = app.state.session
    return _session_response(session.reset())


def run() -> None:
    import uvicorn

    uvicorn.run('src.main:app', host=settings.host, port=settings.port, log_level=settings.log_level.lower())
