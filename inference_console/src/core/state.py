"""Console UI state and its transitions.

Every transition returns a new ``ConsoleState``; nothing is mutated in place.
"""
from dataclasses import dataclass, field, replace

from src.core.errors import ValidationError
from src.core.model_catalog import ModelCatalog
from src.core.types import CAPABILITIES, ImageFile, ProcessedResult, ProcessingOptions


@dataclass(frozen=True)
class CapabilityToggles:
    detection: bool = False
    segmentation: bool = False
    keypoints: bool = False


@dataclass(frozen=True)
class ConsoleState:
    selected_model: str = ''
    toggles: CapabilityToggles = field(default_factory=CapabilityToggles)
    image: ImageFile | None = None
    result: ProcessedResult | None = None
    is_loading: bool = False
    error: str | None = None
    user_message: str | None = None


def select_model(state: ConsoleState, model_id: str) -> ConsoleState:
    return replace(state, selected_model=model_id, toggles=CapabilityToggles())


def toggle_capability(state: ConsoleState, capability: str, catalog: ModelCatalog) -> ConsoleState:
    if capability not in CAPABILITIES:
        raise ValidationError('UNKNOWN_CAPABILITY', f'Unknown capability {capability!r}.')
    if not catalog.supports(state.selected_model, capability):
        raise ValidationError(
            'CAPABILITY_UNSUPPORTED',
            f'Model {state.selected_model or "(none)"!r} does not support {capability}.',
        )
    current = getattr(state.toggles, capability)
    return replace(state, toggles=replace(state.toggles, **{capability: not current}))


def attach_image(state: ConsoleState, image: ImageFile | None) -> ConsoleState:
    return replace(state, image=image)


def with_user_message(state: ConsoleState, message: str | None) -> ConsoleState:
    return replace(state, user_message=message)


def begin_request(state: ConsoleState) -> ConsoleState:
    return replace(state, is_loading=True, error=None, user_message=None)


def complete_request(state: ConsoleState, result: ProcessedResult) -> ConsoleState:
    return replace(state, result=result, is_loading=False, error=None)


def fail_request(state: ConsoleState, message: str) -> ConsoleState:
    return replace(state, is_loading=False, error=message)


def reset_state() -> ConsoleState:
    return ConsoleState()


def to_options(state: ConsoleState) -> ProcessingOptions:
    return ProcessingOptions(
        model_id=state.selected_model,
        enable_detection=state.toggles.detection,
        enable_segmentation=state.toggles.segmentation,
        enable_keypoints=state.toggles.keypoints,
    )
