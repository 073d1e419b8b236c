from abc import ABC, abstractmethod
from typing import Any

from src.config import Settings
from src.core.types import InferenceRequest


class InferenceBackend(ABC):
    @abstractmethod
    async def submit(self, request: InferenceRequest) -> dict[str, Any]:
        """Send one request and return the decoded JSON body."""
        raise NotImplementedError

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError


def create_backend(settings: Settings) -> InferenceBackend:
    provider = settings.provider.strip().lower()
    if provider == 'http':
        from src.providers.http_backend import HttpInferenceBackend

        return HttpInferenceBackend(timeout_ms=settings.inference_timeout_ms)
    if provider == 'dummy':
        from src.providers.dummy_backend import DummyInferenceBackend

        return DummyInferenceBackend()
    raise ValueError(f'Unsupported PROVIDER={settings.provider!r}')
