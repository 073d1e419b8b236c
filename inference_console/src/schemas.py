from pydantic import BaseModel, ConfigDict


class PointOut(BaseModel):
    x: float
    y: float


class KeypointOut(BaseModel):
    id: int
    x: float
    y: float
    confidence: float


class DetectionOut(BaseModel):
    box: list[float] | None = None
    class_name: str
    confidence: float | None = None
    mask_center: list[float] | None = None
    keypoints: list[KeypointOut] = []


class BoundingBoxOut(BaseModel):
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    height: float
    center: PointOut


class DisplayKeypointOut(BaseModel):
    id: int
    x: float
    y: float
    confidence: str


class DisplayDetectionOut(BaseModel):
    id: int
    class_name: str
    confidence: str
    bounding_box: BoundingBoxOut
    mask_center: PointOut | None = None
    keypoints: list[DisplayKeypointOut] = []


class ProcessResponse(BaseModel):
    ok: bool = True
    processed_image: str
    detections: list[DetectionOut]
    display_detections: list[DisplayDetectionOut]


class ModelOut(BaseModel):
    id: str
    name: str
    capabilities: list[str]


class ModelsResponse(BaseModel):
    ok: bool = True
    models: list[ModelOut]


class TogglesOut(BaseModel):
    detection: bool
    segmentation: bool
    keypoints: bool


class SessionResponse(BaseModel):
    ok: bool = True
    selected_model: str
    toggles: TogglesOut
    image_name: str | None = None
    is_loading: bool
    error: str | None = None
    user_message: str | None = None
    processed_image: str | None = None
    detections: list[DisplayDetectionOut] | None = None


class SelectModelRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str


class ToggleRequest(BaseModel):
    capability: str


class HealthResponse(BaseModel):
    ok: bool
    version: str
    provider: str
    routing_policy: str
    inference_base_url: str
    models_loaded: int
    uptime_s: float


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str
    request_id: str | None = None
    details: dict | None = None
