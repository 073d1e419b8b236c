import logging

from src.config import Settings
from src.core import state as transitions
from src.core.backend import InferenceBackend
from src.core.errors import ConsoleError
from src.core.model_catalog import ModelCatalog
from src.core.pipeline import process_image
from src.core.state import ConsoleState
from src.core.types import ImageFile

logger = logging.getLogger(__name__)


class ConsoleSession:
    """Owns the single console state record and replaces it on each event.

    Runs are not serialized: a run that finishes later overwrites the outcome
    of one that finished earlier.
    """

    def __init__(self, backend: InferenceBackend, catalog: ModelCatalog, settings: Settings):
        self._backend = backend
        self._catalog = catalog
        self._settings = settings
        self._state = ConsoleState()

    @property
    def state(self) -> ConsoleState:
        return self._state

    def select_model(self, model_id: str) -> ConsoleState:
        self._state = transitions.select_model(self._state, model_id)
        return self._state

    def toggle(self, capability: str) -> ConsoleState:
        self._state = transitions.toggle_capability(self._state, capability, self._catalog)
        return self._state

    def attach_image(self, image: ImageFile | None) -> ConsoleState:
        self._state = transitions.attach_image(self._state, image)
        return self._state

    def reset(self) -> ConsoleState:
        self._state = transitions.reset_state()
        return self._state

    def _precheck(self, snapshot: ConsoleState) -> str | None:
        if snapshot.image is None:
            return 'Please upload an image first.'
        if not snapshot.selected_model:
            return 'Please select a model.'
        if not any((snapshot.toggles.detection, snapshot.toggles.segmentation, snapshot.toggles.keypoints)):
            return 'Please enable at least one processing task.'
        return None

    async def run(self) -> ConsoleState:
        snapshot = transitions.with_user_message(self._state, None)
        message = self._precheck(snapshot)
        if message:
            self._state = transitions.with_user_message(snapshot, message)
            return self._state

        self._state = transitions.begin_request(snapshot)
        try:
            result = await process_image(
                snapshot.image,
                transitions.to_options(snapshot),
                self._backend,
                self._settings,
            )
        except ConsoleError as exc:
            self._state = transitions.fail_request(self._state, exc.message)
            return self._state
        except Exception:
            self._state = transitions.fail_request(self._state, 'Unexpected server error.')
            raise

        self._state = transitions.complete_request(self._state, result)
        logger.info('Session run complete model=%s detections=%s', snapshot.selected_model, len(result.detections))
        return self._state
