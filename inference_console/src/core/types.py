from dataclasses import dataclass

CAPABILITIES = ('detection', 'segmentation', 'keypoints')


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content: bytes
    content_type: str = 'image/jpeg'


@dataclass(frozen=True)
class ProcessingOptions:
    model_id: str
    enable_detection: bool = False
    enable_segmentation: bool = False
    enable_keypoints: bool = False

    @property
    def flags(self) -> tuple[bool, bool, bool]:
        return (self.enable_detection, self.enable_segmentation, self.enable_keypoints)

    @property
    def enabled_capabilities(self) -> list[str]:
        return [name for name, enabled in zip(CAPABILITIES, self.flags) if enabled]


@dataclass(frozen=True)
class InferenceRequest:
    target: str
    fields: dict[str, str]
    image: ImageFile


@dataclass(frozen=True)
class Keypoint:
    id: int
    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class Detection:
    box: tuple[float, float, float, float] | None
    class_name: str
    confidence: float | None
    mask_center: tuple[float, float] | None = None
    keypoints: tuple[Keypoint, ...] = ()


@dataclass(frozen=True)
class ProcessedResult:
    processed_image: str
    detections: tuple[Detection, ...] = ()


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class DisplayBoundingBox:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    height: float
    center: Point


@dataclass(frozen=True)
class DisplayKeypoint:
    id: int
    x: float
    y: float
    confidence: str


@dataclass(frozen=True)
class DisplayDetection:
    id: int
    class_name: str
    confidence: str
    bounding_box: DisplayBoundingBox
    mask_center: Point | None = None
    keypoints: tuple[DisplayKeypoint, ...] = ()
