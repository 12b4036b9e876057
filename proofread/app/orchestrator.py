"""Per-invocation state machine for one proofreading request.

An :class:`Orchestrator` is created for every user trigger and used once:

``IDLE -> AWAITING_CONTENT -> DISPATCHED -> COMPLETING | FAILED | EMPTY``

``ABORTED`` ends invocations that stop without a user-visible outcome
(missing prompt id or credentials, content retrieval error, surface closed).

Call context:
    ``ProofreadExtension.start_transform`` builds the instance on the UI
    thread. The content callback and the completion handler also run on the UI
    thread; only the provider call runs on the worker executor.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from enum import Enum
from typing import Callable, Optional, Tuple

from proofread.domain.models import ModelId, OrchestrationRequest, Prompt, PromptId
from proofread.domain.ports import (
    AlertKind,
    Cancellable,
    ComposerSurface,
    ContentKind,
    Executor,
    UiContext,
    UseCaseError,
    WaitIndicator,
)
from proofread.domain.registry import Registry
from proofread.usecases.error_mapping import map_api_error

WAIT_DELAY_MS = 800
NO_RESPONSE_MESSAGE = "No response received from proofreading service"

TransformFn = Callable[[str, PromptId, Tuple[Prompt, ...], str, ModelId], Optional[str]]


class OrchestratorState(str, Enum):
    IDLE = "idle"
    AWAITING_CONTENT = "awaiting_content"
    DISPATCHED = "dispatched"
    COMPLETING = "completing"
    FAILED = "failed"
    EMPTY = "empty"
    ABORTED = "aborted"


class Orchestrator:
    """Coordinate content retrieval, dispatch, wait indicator and delivery."""

    def __init__(
        self,
        *,
        surface: ComposerSurface,
        registry: Optional[Registry],
        ui: UiContext,
        executor: Executor,
        transform: TransformFn,
        wait_delay_ms: int = WAIT_DELAY_MS,
        on_finished: Optional[Callable[["Orchestrator"], None]] = None,
    ) -> None:
        self.surface = surface
        self.registry = registry
        self.ui = ui
        self.executor = executor
        self.transform = transform
        self.wait_delay_ms = wait_delay_ms
        self.on_finished = on_finished

        self.state = OrchestratorState.IDLE
        self.request: Optional[OrchestrationRequest] = None
        self.wait_indicator_shown = False
        self._prompt_id: Optional[PromptId] = None
        self._model: Optional[ModelId] = None
        self._api_key: Optional[str] = None
        self._prompts: Tuple[Prompt, ...] = ()
        self._wait_timer: Optional[Cancellable] = None
        self._wait_indicator: Optional[WaitIndicator] = None
        self._released = False
        self._log = logging.getLogger(__name__)

    @property
    def finished(self) -> bool:
        return self._released

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def start(self, prompt_id: Optional[PromptId]) -> bool:
        """Request the surface content for ``prompt_id``.

        Returns ``False`` when a precondition fails; the invocation is then
        aborted without any user-visible call.
        """
        if self.state is not OrchestratorState.IDLE:
            self._log.warning("Orchestrator already used (state=%s); ignoring start", self.state.value)
            return False
        if not prompt_id:
            return self._abort_precondition("no prompt id")
        if self.registry is None:
            return self._abort_precondition("no registry")
        if not self.registry.has_prompts:
            return self._abort_precondition("no prompts configured")
        if not self.registry.api_key:
            return self._abort_precondition("no API key")

        # Snapshot on the UI thread; the worker only sees these copies.
        self._prompt_id = prompt_id
        self._model = self.registry.current_model
        self._api_key = self.registry.api_key
        self._prompts = self.registry.prompts

        self._log.debug("Starting proofreading for prompt: %s with model: %s", prompt_id, self._model)
        self._transition(OrchestratorState.AWAITING_CONTENT)
        self.surface.get_content(ContentKind.PLAIN, self._on_content_ready)
        return True

    # ------------------------------------------------------------------
    # Suspension point 1: content retrieval
    # ------------------------------------------------------------------
    def _on_content_ready(self, text: Optional[str], error: Optional[BaseException] = None) -> None:
        if self.state is not OrchestratorState.AWAITING_CONTENT:
            self._log.warning("Content delivered in state %s; ignoring", self.state.value)
            return
        if error is not None:
            self._log.warning("Error getting content: %s", error)
            self._finish(OrchestratorState.ABORTED)
            return
        if not self.surface.is_alive():
            self._log.debug("Surface closed before content arrived")
            self._finish(OrchestratorState.ABORTED)
            return
        if not text:
            self._log.debug("Empty content for prompt %s; nothing to send", self._prompt_id)
            self._finish(OrchestratorState.EMPTY)
            return
        self._dispatch(text)

    def _dispatch(self, text: str) -> None:
        self.request = OrchestrationRequest(
            prompt_id=self._prompt_id or "",
            source_text=text,
            model=self._model or "",
            api_key=self._api_key or "",
            prompts=self._prompts,
        )
        request = self.request
        self._transition(OrchestratorState.DISPATCHED)
        self._wait_timer = self.ui.schedule_once(self.wait_delay_ms, self._show_wait_indicator)
        try:
            future = self.executor.submit(
                self.transform,
                request.source_text,
                request.prompt_id,
                request.prompts,
                request.api_key,
                request.model,
            )
        except RuntimeError as exc:
            # Executor already shut down.
            self._log.warning("Could not dispatch proofreading request: %s", exc)
            self._clear_wait_indicator()
            self._deliver_failure("Proofreading is unavailable while the application shuts down.")
            return
        future.add_done_callback(self._on_worker_done)

    # ------------------------------------------------------------------
    # Wait indicator
    # ------------------------------------------------------------------
    def _show_wait_indicator(self) -> None:
        if self.state is not OrchestratorState.DISPATCHED or self._wait_indicator is not None:
            return
        if not self.surface.is_alive():
            return
        message = f"Proofreading with {self._model or 'AI'} may take a little longer. Please wait..."
        self._wait_indicator = self.surface.open_wait_indicator(message)
        self.wait_indicator_shown = True

    def _clear_wait_indicator(self) -> None:
        timer, self._wait_timer = self._wait_timer, None
        if timer is not None:
            timer.cancel()
        indicator, self._wait_indicator = self._wait_indicator, None
        if indicator is not None:
            indicator.close()

    # ------------------------------------------------------------------
    # Suspension point 2: completion
    # ------------------------------------------------------------------
    def _on_worker_done(self, future: "Future[object]") -> None:
        # Runs on the worker thread (or inline when already done).
        self.ui.call_soon(lambda: self._on_completed(future))

    def _on_completed(self, future: "Future[object]") -> None:
        if self.state is not OrchestratorState.DISPATCHED:
            self._log.warning("Completion delivered in state %s; ignoring", self.state.value)
            return
        self._clear_wait_indicator()

        if not self.surface.is_alive():
            self._log.debug("Surface closed while request was in flight")
            self._finish(OrchestratorState.ABORTED)
            return

        try:
            result = future.result()
        except UseCaseError as exc:
            self._log.warning("Proofreading failed [%s]: %s", exc.code, exc.message)
            self._deliver_failure(exc.message)
            return
        except Exception as exc:
            mapped = map_api_error(exc, default_code="TRANSFORM_FAILED")
            self._log.warning("Proofreading failed [%s]: %s", mapped.code, mapped.message)
            self._deliver_failure(mapped.message)
            return

        if not result:
            try:
                self.surface.submit_alert(AlertKind.NO_RESPONSE, NO_RESPONSE_MESSAGE)
            finally:
                self._finish(OrchestratorState.EMPTY)
            return

        try:
            self.surface.insert_content(str(result), ContentKind.PLAIN)
        finally:
            self._finish(OrchestratorState.COMPLETING)

    def _deliver_failure(self, message: str) -> None:
        try:
            self.surface.submit_alert(AlertKind.ERROR, message)
        finally:
            self._finish(OrchestratorState.FAILED)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _abort_precondition(self, reason: str) -> bool:
        self._log.warning("Cannot start proofreading: %s", reason)
        self._finish(OrchestratorState.ABORTED)
        return False

    def _transition(self, state: OrchestratorState) -> None:
        self._log.debug("Orchestrator %s -> %s", self.state.value, state.value)
        self.state = state

    def _finish(self, state: OrchestratorState) -> None:
        if self._released:
            self._log.warning("Orchestrator already released; ignoring %s", state.value)
            return
        self._transition(state)
        self._release()

    def _release(self) -> None:
        self._released = True
        self._clear_wait_indicator()
        self.request = None
        self._api_key = None
        self._prompts = ()
        if self.on_finished is not None:
            self.on_finished(self)


__all__ = [
    "NO_RESPONSE_MESSAGE",
    "Orchestrator",
    "OrchestratorState",
    "TransformFn",
    "WAIT_DELAY_MS",
]
