from src.config import Settings
from src.core.errors import ValidationError
from src.core.types import InferenceRequest, ProcessingOptions
from src.utils.image_io import to_image_file

ROUTING_POLICIES = ('single', 'capability')

# (detection, segmentation, keypoints) -> endpoint path
CAPABILITY_ROUTES: dict[tuple[bool, bool, bool], str] = {
    (True, True, True): '/process_all',
    (True, True, False): '/process_detection_segmentation',
    (True, False, True): '/process_detection_keypoints',
    (False, True, True): '/process_segmentation_keypoints',
    (True, False, False): '/process_detection',
    (False, True, False): '/process_segmentation',
    (False, False, True): '/process_keypoints',
}


def _join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _flag(value: bool) -> str:
    return 'true' if value else 'false'


def validate_options(options: ProcessingOptions) -> None:
    if not (options.model_id or '').strip():
        raise ValidationError('MISSING_MODEL', 'Please select a model.')
    if not any(options.flags):
        raise ValidationError('NO_CAPABILITY', 'Please enable at least one processing task.')


def route_for(flags: tuple[bool, bool, bool]) -> str:
    path = CAPABILITY_ROUTES.get(tuple(bool(flag) for flag in flags))
    if path is None:
        raise ValidationError('NO_CAPABILITY', 'Please enable at least one processing task.')
    return path


def resolve_target(options: ProcessingOptions, settings: Settings) -> str:
    base_url = (settings.inference_base_url or '').strip()
    if not base_url:
        raise ValidationError('BACKEND_UNCONFIGURED', 'Inference backend address is not configured (INFERENCE_BASE_URL).')
    policy = (settings.routing_policy or '').strip().lower()
    if policy == 'single':
        return _join_url(base_url, settings.process_path)
    if policy == 'capability':
        return _join_url(base_url, route_for(options.flags))
    raise ValidationError('UNKNOWN_ROUTING_POLICY', f'Unsupported ROUTING_POLICY={settings.routing_policy!r}')


def build_fields(options: ProcessingOptions) -> dict[str, str]:
    return {
        'modelId': options.model_id.strip(),
        'enableDetection': _flag(options.enable_detection),
        'enableSegmentation': _flag(options.enable_segmentation),
        'enableKeypoints': _flag(options.enable_keypoints),
    }


def resolve_request(options: ProcessingOptions, image, settings: Settings) -> InferenceRequest:
    """Turn the user's selections into a backend target and multipart payload.

    Raises ValidationError for a missing model, no enabled capability, a missing
    or unrecognized image, or an unconfigured backend address.
    """
    validate_options(options)
    upload = to_image_file(image, settings.max_image_bytes)
    return InferenceRequest(
        target=resolve_target(options, settings),
        fields=build_fields(options),
        image=upload,
    )
