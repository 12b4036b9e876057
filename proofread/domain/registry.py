"""In-memory registry of prompts, models, credentials and model selection.

The registry is owned by the top-level extension and lives for the whole
process. It is read and mutated only on the UI thread; workers receive
copies through :class:`~proofread.domain.models.OrchestrationRequest`.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .models import (
    DEFAULT_MODEL,
    ModelDescriptor,
    ModelId,
    Prompt,
)


class Registry:
    """Prompts, available models, API key and the current model selection."""

    def __init__(
        self,
        *,
        prompts: Iterable[Prompt] = (),
        models: Iterable[ModelDescriptor] = (),
        api_key: Optional[str] = None,
        current_model: Optional[ModelId] = None,
    ) -> None:
        self._prompts: Tuple[Prompt, ...] = tuple(prompts)
        self._models: List[ModelDescriptor] = list(models)
        self.api_key = api_key or None
        self.current_model: ModelId = current_model or DEFAULT_MODEL

    @property
    def prompts(self) -> Tuple[Prompt, ...]:
        return self._prompts

    @property
    def models(self) -> Tuple[ModelDescriptor, ...]:
        return tuple(self._models)

    @property
    def has_prompts(self) -> bool:
        return bool(self._prompts)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    @property
    def is_ready(self) -> bool:
        """True when prompt actions can be offered to the user."""
        return self.has_prompts and self.has_credentials

    def set_models(self, models: Iterable[ModelDescriptor]) -> None:
        self._models = list(models)

    def set_current_model(self, model_id: ModelId) -> None:
        cleaned = (model_id or "").strip()
        if not cleaned:
            raise ValueError("model id must not be empty")
        self.current_model = cleaned


__all__ = ["Registry"]
