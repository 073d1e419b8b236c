import json
from dataclasses import dataclass
from pathlib import Path

from src.core.errors import ValidationError
from src.core.types import CAPABILITIES, ProcessingOptions


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    capabilities: tuple[str, ...]

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities


class ModelCatalog:
    def __init__(self, path: str):
        self._path = self._resolve_path(path)
        self._items = self._load_items(self._path)

    def _resolve_path(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.exists() or candidate.is_absolute():
            return candidate
        module_root = Path(__file__).resolve().parents[1]
        fallback = module_root / 'data' / 'models.json'
        if fallback.exists():
            return fallback
        return candidate

    @property
    def path(self) -> Path:
        return self._path

    @property
    def size(self) -> int:
        return len(self._items)

    @property
    def models(self) -> list[ModelInfo]:
        return list(self._items)

    def _load_items(self, path: Path) -> list[ModelInfo]:
        if not path.exists():
            return []
        raw = json.loads(path.read_text(encoding='utf-8'))
        if not isinstance(raw, list):
            return []

        records: list[ModelInfo] = []
        seen: set[str] = set()
        for row in raw:
            if not isinstance(row, dict):
                continue
            model_id = str(row.get('id') or '').strip()
            if not model_id or model_id in seen:
                continue
            capabilities = tuple(
                name for name in CAPABILITIES if name in {str(value).strip().lower() for value in row.get('capabilities', [])}
            )
            seen.add(model_id)
            records.append(
                ModelInfo(
                    id=model_id,
                    name=str(row.get('name') or model_id).strip(),
                    capabilities=capabilities,
                )
            )
        return records

    def get(self, model_id: str) -> ModelInfo | None:
        for item in self._items:
            if item.id == model_id:
                return item
        return None

    def supports(self, model_id: str, capability: str) -> bool:
        model = self.get(model_id)
        return model is not None and model.supports(capability)

    def check_options(self, options: ProcessingOptions) -> ModelInfo:
        model = self.get(options.model_id)
        if model is None:
            raise ValidationError('UNKNOWN_MODEL', f'Unknown model {options.model_id!r}.')
        unsupported = [name for name in options.enabled_capabilities if not model.supports(name)]
        if unsupported:
            raise ValidationError(
                'CAPABILITY_UNSUPPORTED',
                f'Model {model.id!r} does not support: {", ".join(unsupported)}.',
                details={'model_id': model.id, 'unsupported': unsupported},
            )
        return model
