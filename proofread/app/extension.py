"""Top-level extension: registry ownership and action wiring.

This module owns the process-wide :class:`Registry`, builds action sets for
composer surfaces and creates one :class:`Orchestrator` per prompt trigger.
It is the :class:`~proofread.app.actions.ActionContext` every action set is
built with.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable, List, Optional, Set

from proofread.adapters.openai_rest import OpenAIRestAdapter
from proofread.app.actions import ActionHost, ActionSet, build_action_set
from proofread.app.orchestrator import WAIT_DELAY_MS, Orchestrator
from proofread.domain.models import ModelDescriptor, ModelId, PromptId
from proofread.domain.ports import (
    ComposerSurface,
    Executor,
    SettingsStorePort,
    TransformPort,
    UiContext,
    UseCaseError,
)
from proofread.domain.registry import Registry
from proofread.usecases.error_mapping import map_api_error
from proofread.usecases.list_models import ListModels
from proofread.usecases.transform_text import TransformText


class ProofreadExtension:
    """Wire registry, storage, use cases and composer surfaces together.

    Call chain:
        ``proofread.app.main.main`` creates one instance, attaches each
        composer window and calls ``refresh_models`` once. Action activations
        come back through ``start_transform`` and ``select_model``.
    """

    def __init__(
        self,
        *,
        storage: SettingsStorePort,
        ui: UiContext,
        executor: Executor,
        client_factory: Optional[Callable[[str], TransformPort]] = None,
        wait_delay_ms: int = WAIT_DELAY_MS,
        registry: Optional[Registry] = None,
    ) -> None:
        """Load the registry from ``storage`` unless one is given.

        Args:
            storage: Prompt, credential and selection persistence.
            ui: UI-thread scheduler shared by all orchestrators.
            executor: Worker pool for blocking provider calls.
            client_factory: Builds a provider client for an API key.
            wait_delay_ms: Delay before the wait indicator appears.
            registry: Preloaded registry, mainly for tests.
        """
        self._log = logging.getLogger(__name__)
        self.storage = storage
        self.ui = ui
        self.executor = executor
        self.wait_delay_ms = wait_delay_ms
        factory = client_factory or (lambda api_key: OpenAIRestAdapter(api_key))
        self.uc_transform = TransformText(factory)
        self.uc_list_models = ListModels(factory)
        self.registry = registry if registry is not None else self._load_registry()
        self._hosts: List[ActionHost] = []
        self._inflight: Set[Orchestrator] = set()

    def _load_registry(self) -> Registry:
        registry = Registry(
            prompts=self.storage.load_prompts(),
            api_key=self.storage.load_credentials(),
            current_model=self.storage.load_selected_model(),
        )
        self._log.info(
            "Registry loaded: %d prompt(s), API key %s, model %s",
            len(registry.prompts),
            "present" if registry.has_credentials else "missing",
            registry.current_model,
        )
        return registry

    @property
    def inflight(self) -> Set[Orchestrator]:
        return set(self._inflight)

    # ------------------------------------------------------------------
    # Surfaces
    # ------------------------------------------------------------------
    def build_actions(self) -> ActionSet:
        return build_action_set(
            self.registry.prompts,
            self.registry.models,
            self.registry.current_model,
            context=self,
        )

    def attach(self, host: ActionHost) -> Optional[ActionSet]:
        """Install actions on ``host``; skip when prompts or API key are missing."""
        if not self.registry.is_ready:
            missing = "prompts" if not self.registry.has_prompts else "API key"
            self._log.warning("No %s configured, skipping UI creation", missing)
            return None
        action_set = self.build_actions()
        host.install_actions(action_set)
        if host not in self._hosts:
            self._hosts.append(host)
        return action_set

    def detach(self, host: ActionHost) -> None:
        if host in self._hosts:
            self._hosts.remove(host)

    def rebuild(self) -> None:
        """Rebuild action sets so labels reflect the current registry."""
        for host in list(self._hosts):
            if not host.is_alive():
                self._hosts.remove(host)
                continue
            host.install_actions(self.build_actions())

    # ------------------------------------------------------------------
    # ActionContext
    # ------------------------------------------------------------------
    def start_transform(self, prompt_id: PromptId, surface: ComposerSurface) -> Orchestrator:
        orchestrator = Orchestrator(
            surface=surface,
            registry=self.registry,
            ui=self.ui,
            executor=self.executor,
            transform=self.uc_transform,
            wait_delay_ms=self.wait_delay_ms,
            on_finished=self._inflight.discard,
        )
        self._inflight.add(orchestrator)
        orchestrator.start(prompt_id)
        return orchestrator

    def select_model(self, model_id: ModelId) -> bool:
        """Persist ``model_id`` and refresh the current-model marker."""
        try:
            self.registry.set_current_model(model_id)
        except ValueError:
            self._log.warning("Ignoring empty model selection")
            return False
        saved = self.storage.save_selected_model(self.registry.current_model)
        if not saved:
            self._log.warning("Model %s selected but could not be saved", model_id)
        self.rebuild()
        return saved

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------
    def refresh_models(self) -> Optional["Future[object]"]:
        """Fetch the model list on the worker and install it on the UI thread."""
        api_key = self.registry.api_key
        if not api_key:
            self._log.debug("No API key; skipping model listing")
            return None
        future = self.executor.submit(self.uc_list_models, api_key)
        future.add_done_callback(
            lambda done: self.ui.call_soon(lambda: self._install_models(done))
        )
        return future

    def _install_models(self, future: "Future[object]") -> None:
        models: List[ModelDescriptor] = []
        try:
            models = list(future.result() or [])
        except UseCaseError as exc:
            self._log.warning("Error fetching models: %s", exc.message)
        except Exception as exc:
            self._log.warning("Error fetching models: %s", map_api_error(exc, default_code="LIST_MODELS_FAILED").message)
        self.registry.set_models(models)
        self._log.debug("Models available: %d", len(models))
        self.rebuild()


__all__ = ["ProofreadExtension"]
