"""Value objects shared by the registry, the remote client and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_MODEL = "gpt-4o"
OPENAI_HOST = "api.openai.com"

PromptId = str
ModelId = str


@dataclass(frozen=True)
class Prompt:
    """A named instruction template sent to the model alongside user text.

    Attributes:
        id: Unique, non-empty identifier used for routing and lookup.
        display_name: Label shown in menus.
        prompt_text: Instruction text placed before the user text.
    """

    id: PromptId
    display_name: str
    prompt_text: str


@dataclass(frozen=True)
class ModelDescriptor:
    """A conversational model offered by the provider."""

    id: ModelId


@dataclass(frozen=True)
class OrchestrationRequest:
    """Per-invocation snapshot handed to the worker.

    Everything the worker needs is copied in here before dispatch so the
    worker never reads the live registry.
    """

    prompt_id: PromptId
    source_text: str
    model: ModelId
    api_key: str
    prompts: Tuple[Prompt, ...]


def find_prompt(prompts: Tuple[Prompt, ...], prompt_id: PromptId) -> Optional[Prompt]:
    """Return the prompt with ``prompt_id`` or ``None``."""
    for prompt in prompts:
        if prompt.id == prompt_id:
            return prompt
    return None


__all__ = [
    "DEFAULT_MODEL",
    "ModelDescriptor",
    "ModelId",
    "OPENAI_HOST",
    "OrchestrationRequest",
    "Prompt",
    "PromptId",
    "find_prompt",
]
