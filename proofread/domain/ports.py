from __future__ import annotations

from concurrent.futures import Future
from enum import Enum
from typing import Callable, Optional, Protocol, Tuple

from .models import ModelDescriptor, ModelId, Prompt, PromptId


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class PromptNotFoundError(UseCaseError):
    def __init__(self, prompt_id: PromptId):
        super().__init__("PROMPT_NOT_FOUND", f"Prompt '{prompt_id}' is not configured.")
        self.prompt_id = prompt_id


# ---- Host contract values ----
class ContentKind(str, Enum):
    """Flavor of text requested from or pushed into the editing surface."""

    PLAIN = "plain"


class AlertKind(str, Enum):
    ERROR = "ai:error-proofreading"
    NO_RESPONSE = "ai:no-response"


ContentCallback = Callable[[Optional[str], Optional[BaseException]], None]


# ---- Ports (Hexagonal boundaries) ----
class TransformPort(Protocol):
    """Single blocking round trips against the language-model provider."""

    def complete(self, model: ModelId, instruction: str, text: str) -> Optional[str]: ...
    def list_models(self) -> list[ModelDescriptor]: ...
    def close(self) -> None: ...


class SettingsStorePort(Protocol):
    """Persistence for prompts, credentials and the model selection."""

    def load_prompts(self) -> Tuple[Prompt, ...]: ...
    def load_credentials(self) -> Optional[str]: ...
    def load_selected_model(self) -> ModelId: ...
    def save_selected_model(self, model_id: ModelId) -> bool: ...


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class UiContext(Protocol):
    """Single-threaded UI execution context.

    ``call_soon`` may be called from any thread; everything else is UI-thread
    only.
    """

    def call_soon(self, callback: Callable[[], None]) -> None: ...
    def schedule_once(self, delay_ms: int, callback: Callable[[], None]) -> Cancellable: ...


class WaitIndicator(Protocol):
    def close(self) -> None: ...


class ComposerSurface(Protocol):
    """Editing surface the orchestrator reads from and writes to.

    The surface also owns the alert area and the modal wait indicator.
    """

    def get_content(self, kind: ContentKind, callback: ContentCallback) -> None: ...
    def insert_content(self, text: str, kind: ContentKind) -> None: ...
    def submit_alert(self, kind: AlertKind, message: str) -> None: ...
    def open_wait_indicator(self, message: str) -> WaitIndicator: ...
    def is_alive(self) -> bool: ...


class Executor(Protocol):
    def submit(self, fn: Callable[..., object], *args: object) -> "Future[object]": ...


__all__ = [
    "AlertKind",
    "Cancellable",
    "ComposerSurface",
    "ContentCallback",
    "ContentKind",
    "Executor",
    "PromptNotFoundError",
    "SettingsStorePort",
    "TransformPort",
    "UiContext",
    "UseCaseError",
    "WaitIndicator",
]
