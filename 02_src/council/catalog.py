"""Model catalog: the static id -> display name mapping."""

from pathlib import Path
from typing import Iterable

from .logging_config import get_logger
from .models import ModelDescriptor

logger = get_logger(__name__)


def parse_catalog(text: str) -> list[ModelDescriptor]:
    """Parse `id, displayName` lines, skipping blanks and `#` comments."""
    models: list[ModelDescriptor] = []
    for line in text.splitlines():
        if not line.strip() or line.startswith("#"):
            continue
        model_id, _, name = line.partition(",")
        model_id = model_id.strip()
        name = name.strip()
        if not model_id:
            continue
        models.append(ModelDescriptor(id=model_id, display_name=name or model_id))
    return models


class ModelCatalog:
    """Ordered lookup of available models by id."""

    def __init__(self, models: Iterable[ModelDescriptor] = ()):
        self._models: dict[str, ModelDescriptor] = {}
        for model in models:
            self._models.setdefault(model.id, model)

    @classmethod
    def from_text(cls, text: str) -> "ModelCatalog":
        return cls(parse_catalog(text))

    @classmethod
    def load(cls, path: Path) -> "ModelCatalog":
        """Load the catalog file; a missing file yields an empty catalog."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("Model catalog not found at %s", path)
            return cls()
        catalog = cls.from_text(text)
        logger.info("Loaded %s models from %s", len(catalog), path)
        return catalog

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    @property
    def models(self) -> list[ModelDescriptor]:
        return list(self._models.values())

    def get(self, model_id: str) -> ModelDescriptor | None:
        return self._models.get(model_id)

    def display_name(self, model_id: str | None) -> str:
        """Display name for an id, or the id itself when unknown."""
        if not model_id:
            return ""
        model = self._models.get(model_id)
        return model.display_name if model else model_id

    def default_panels(self, count: int) -> list[str]:
        """First `count` ids, padded with empty selections."""
        ids = [m.id for m in self.models[:count]]
        return ids + [""] * (count - len(ids))

    def default_pair(self) -> tuple[str, str]:
        """Default dialogue pair: a GPT model for A, a Claude model for B."""
        models = self.models
        if len(models) < 2:
            return ("", "")
        model_a = next((m for m in models if "gpt" in m.id), models[0])
        model_b = next((m for m in models if "claude" in m.id), models[1])
        return (model_a.id, model_b.id)
