import asyncio

import pytest

from src.config import Settings
from src.core.backend import InferenceBackend
from src.core.errors import TransportError, ValidationError
from src.core.model_catalog import ModelCatalog
from src.core.session import ConsoleSession
from src.core.state import (
    ConsoleState,
    begin_request,
    complete_request,
    fail_request,
    select_model,
    to_options,
    toggle_capability,
)
from src.core.types import ImageFile, ProcessedResult
from src.providers.dummy_backend import DummyInferenceBackend


class FlakyBackend(DummyInferenceBackend):
    def __init__(self) -> None:
        self.fail = False

    @property
    def name(self) -> str:
        return 'flaky'

    async def submit(self, request):
        if self.fail:
            raise TransportError('Server error (500): boom', upstream_status=500, body='boom')
        return await super().submit(request)


class BrokenBackend(InferenceBackend):
    @property
    def name(self) -> str:
        return 'broken'

    async def submit(self, request):
        raise RuntimeError('backend bug')


class OutOfOrderBackend(InferenceBackend):
    """The first call is held until the second one has answered."""

    def __init__(self) -> None:
        self.calls = 0
        self.release = asyncio.Event()

    @property
    def name(self) -> str:
        return 'out-of-order'

    async def submit(self, request):
        self.calls += 1
        if self.calls == 1:
            await self.release.wait()
            return {'success': True, 'image': 'FIRST'}
        self.release.set()
        return {'success': True, 'image': 'SECOND'}


def make_session(backend: InferenceBackend | None = None) -> ConsoleSession:
    return ConsoleSession(backend or DummyInferenceBackend(), ModelCatalog('src/data/models.json'), Settings())


def make_image() -> ImageFile:
    return ImageFile(filename='berries.jpg', content=b'jpeg-bytes')


def test_select_model_resets_toggles():
    catalog = ModelCatalog('src/data/models.json')
    state = toggle_capability(select_model(ConsoleState(), 'strawberry'), 'keypoints', catalog)

    reset = select_model(state, 'strawberry')

    assert state.toggles.keypoints is True
    assert reset.toggles.keypoints is False


def test_toggle_requires_declared_capability():
    catalog = ModelCatalog('src/data/models.json')

    with pytest.raises(ValidationError) as exc_info:
        toggle_capability(ConsoleState(), 'detection', catalog)

    assert exc_info.value.code == 'CAPABILITY_UNSUPPORTED'


def test_transitions_return_new_records():
    state = ConsoleState(selected_model='strawberry')
    result = ProcessedResult(processed_image='data:image/jpeg;base64,AAA')

    loading = begin_request(state)
    done = complete_request(loading, result)
    failed = fail_request(loading, 'boom')

    assert state.is_loading is False
    assert loading.is_loading is True
    assert done.result is result and done.is_loading is False
    assert failed.error == 'boom' and failed.result is None
    assert to_options(state).model_id == 'strawberry'


@pytest.mark.parametrize(
    'prepare, message',
    [
        (lambda s: None, 'Please upload an image first.'),
        (lambda s: s.attach_image(make_image()), 'Please select a model.'),
        (lambda s: (s.attach_image(make_image()), s.select_model('strawberry')), 'Please enable at least one processing task.'),
    ],
)
def test_run_prechecks_set_user_message(prepare, message):
    session = make_session()
    prepare(session)

    state = asyncio.run(session.run())

    assert state.user_message == message
    assert state.is_loading is False
    assert state.result is None


def test_run_stores_result():
    session = make_session()
    session.attach_image(make_image())
    session.select_model('strawberry')
    session.toggle('detection')
    session.toggle('segmentation')

    state = asyncio.run(session.run())

    assert state.error is None
    assert state.is_loading is False
    assert state.result.processed_image.startswith('data:image/jpeg;base64,')
    assert all(row.mask_center is not None for row in state.result.detections)
    assert session.state is state


def test_run_failure_keeps_previous_result():
    backend = FlakyBackend()
    session = make_session(backend)
    session.attach_image(make_image())
    session.select_model('strawberry')
    session.toggle('detection')
    first = asyncio.run(session.run())

    backend.fail = True
    second = asyncio.run(session.run())

    assert second.error == 'Server error (500): boom'
    assert second.result == first.result
    assert second.is_loading is False


def test_reset_clears_everything():
    session = make_session()
    session.attach_image(make_image())
    session.select_model('strawberry')

    assert session.reset() == ConsoleState()


def test_unexpected_backend_error_clears_loading():
    session = make_session(BrokenBackend())
    session.attach_image(make_image())
    session.select_model('strawberry')
    session.toggle('keypoints')

    with pytest.raises(RuntimeError):
        asyncio.run(session.run())

    assert session.state.is_loading is False
    assert session.state.error == 'Unexpected server error.'


def test_overlapping_runs_keep_the_last_completion():
    async def overlapping_runs():
        backend = OutOfOrderBackend()
        session = make_session(backend)
        session.attach_image(make_image())
        session.select_model('strawberry')
        session.toggle('detection')
        first, second = await asyncio.gather(session.run(), session.run())
        return session, backend, first, second

    session, backend, first, second = asyncio.run(overlapping_runs())

    assert backend.calls == 2
    assert second.result.processed_image == 'data:image/jpeg;base64,SECOND'
    assert first.result.processed_image == 'data:image/jpeg;base64,FIRST'
    assert session.state.result.processed_image == 'data:image/jpeg;base64,FIRST'
    assert session.state.is_loading is False
